"""Health check endpoints for Kubernetes probes."""

from django.conf import settings
from django.db import connection
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status
import logging

from verification.rabbitmq.publisher import get_publisher

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    Liveness probe: the verification queue is served from the database, so
    the service is healthy exactly when the database answers.

    Returns:
        200 OK: Database reachable
        503 Service Unavailable: Database is unreachable
    """
    try:
        connection.ensure_connection()
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return Response(
            {"status": "unhealthy", "checks": {"database": "error"}},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return Response(
        {"status": "healthy", "checks": {"database": "ok"}}, status=status.HTTP_200_OK
    )


@api_view(["GET"])
@permission_classes([AllowAny])
def readiness_check(request):
    """
    Readiness probe. A broker outage does not make the service unready:
    decisions still commit and notifications stay stored, so the broker
    state is only reported.
    """
    body = {"status": "ready"}
    if request.query_params.get("verbose"):
        if settings.NOTIFICATION_DELIVERY_ENABLED:
            body["notificationDelivery"] = "ok" if get_publisher().channel else "degraded"
        else:
            body["notificationDelivery"] = "disabled"
    return Response(body, status=status.HTTP_200_OK)
