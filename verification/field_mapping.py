"""
Catalog translating the field names residents see on the change-request form
into Account attributes. Bump FIELD_MAPPING_VERSION whenever an entry changes.
"""

from verification.exceptions import MappingError

FIELD_MAPPING_VERSION = 1

FIELD_MAPPING = {
    "Pekerjaan": "occupation",
    "Agama": "religion",
    "Status Perkawinan": "marital_status",
    "Nomor HP": "phone_number",
    "Email": "email",
    "Alamat Domisili": "home_address",
    "Status Tinggal": "residency_status",
}


def resolve(field: str) -> str:
    """Return the Account attribute for a change-request field name."""
    try:
        return FIELD_MAPPING[field]
    except KeyError:
        raise MappingError(
            f"Field '{field}' is not in the change-request catalog (v{FIELD_MAPPING_VERSION})"
        ) from None


def supported_fields() -> list:
    return list(FIELD_MAPPING)
