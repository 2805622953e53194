from django.conf import settings
from rest_framework.permissions import BasePermission

ROLE_HEADER = "HTTP_X_ACTOR_ROLE"


def actor_role(request) -> str:
    return request.META.get(ROLE_HEADER, "").strip()


class IsAdministrator(BasePermission):
    """
    Accepts requests whose X-Actor-Role claim is one of ADMIN_ROLES.

    The claim is issued by the upstream portal; this service does not authenticate it.
    """

    message = "Administrator role required"

    def has_permission(self, request, view):
        return actor_role(request) in settings.ADMIN_ROLES
