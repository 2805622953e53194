from django.db import models
from django.utils import timezone


class Account(models.Model):
    """
    A resident (warga) of the neighbourhood association.

    Two independent flags drive verification:
    - data_complete: the resident submitted a full profile and the required documents
    - verified: an administrator confirmed the identity

    The account sits in the verification queue while data_complete and not verified.
    """

    RELIGION_CHOICES = [
        ("Islam", "Islam"),
        ("Kristen", "Kristen"),
        ("Katolik", "Katolik"),
        ("Hindu", "Hindu"),
        ("Buddha", "Buddha"),
        ("Konghucu", "Konghucu"),
    ]

    MARITAL_STATUS_CHOICES = [
        ("Belum Kawin", "Belum Kawin"),
        ("Kawin", "Kawin"),
        ("Cerai Hidup", "Cerai Hidup"),
        ("Cerai Mati", "Cerai Mati"),
    ]

    RESIDENCY_STATUS_CHOICES = [
        ("Tetap", "Tetap"),
        ("Tetap Domisili", "Tetap Domisili"),
        ("Musiman", "Musiman"),
    ]

    GENDER_CHOICES = [
        ("Laki-laki", "Laki-laki"),
        ("Perempuan", "Perempuan"),
    ]

    ROLE_SUPER_ADMIN = "Super Admin"
    ROLE_KETUA_RT = "Ketua RT"
    ROLE_SEKRETARIS = "Sekretaris"
    ROLE_BENDAHARA = "Bendahara"
    ROLE_PENGURUS = "Pengurus"
    ROLE_WARGA = "Warga"

    ROLE_CHOICES = [
        (ROLE_SUPER_ADMIN, "Super Admin"),
        (ROLE_KETUA_RT, "Ketua RT"),
        (ROLE_SEKRETARIS, "Sekretaris"),
        (ROLE_BENDAHARA, "Bendahara"),
        (ROLE_PENGURUS, "Pengurus"),
        (ROLE_WARGA, "Warga"),
    ]

    national_id = models.CharField(max_length=32, unique=True, db_index=True, help_text="NIK")
    family_card_id = models.CharField(max_length=32, blank=True, help_text="Nomor KK")
    full_name = models.CharField(max_length=255)
    gender = models.CharField(max_length=20, choices=GENDER_CHOICES, blank=True)
    birth_place = models.CharField(max_length=120, blank=True)
    birth_date = models.DateField(blank=True, null=True)
    religion = models.CharField(max_length=20, choices=RELIGION_CHOICES, blank=True)
    occupation = models.CharField(max_length=120, blank=True)
    marital_status = models.CharField(max_length=20, choices=MARITAL_STATUS_CHOICES, blank=True)
    phone_number = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    home_address = models.CharField(max_length=500, blank=True, help_text="Alamat domisili")
    id_card_address = models.CharField(max_length=500, blank=True, help_text="Alamat sesuai KTP")
    residency_status = models.CharField(max_length=20, choices=RESIDENCY_STATUS_CHOICES, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_WARGA, db_index=True)

    id_card_photo = models.CharField(
        max_length=500, blank=True, help_text="Reference to the uploaded KTP image"
    )
    family_card_photo = models.CharField(
        max_length=500, blank=True, help_text="Reference to the uploaded KK image"
    )

    data_complete = models.BooleanField(default=False)
    verified = models.BooleanField(default=False)
    rejection_reason = models.TextField(
        blank=True, null=True, help_text="Why the last verification attempt was returned"
    )

    joined_at = models.DateTimeField(default=timezone.now)
    data_submitted_at = models.DateTimeField(blank=True, null=True)
    verified_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = "accounts"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["data_complete", "verified"]),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.national_id})"

    @property
    def awaiting_verification(self) -> bool:
        return self.data_complete and not self.verified
