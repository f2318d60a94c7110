"""
Health Check Module.

Liveness, readiness and detailed dependency checks.

Readiness covers what every request needs (database, cache). Object
storage only backs photo uploads and image links, so its failure makes
the service DEGRADED rather than UNHEALTHY.
"""
import logging
import shutil
import time
from typing import Any, Callable, Dict, List, Optional

from django.conf import settings
from django.core.cache import cache
from django.db import connection
from django.urls import path
from django.utils import timezone
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class HealthStatus:
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


# =============================================================================
# PROBES
# =============================================================================

def run_check(
    name: str,
    probe: Callable[[], Optional[Dict[str, Any]]],
    failure_status: str = HealthStatus.UNHEALTHY
) -> Dict[str, Any]:
    """
    Time ``probe`` and report it as a check result.

    A probe may return extra fields for the result; any exception marks
    the check with ``failure_status``.
    """
    start = time.time()
    try:
        details = probe() or {}
    except Exception as e:
        log = logger.error if failure_status == HealthStatus.UNHEALTHY else logger.warning
        log(f"Health check '{name}' failed: {e}")
        return {"name": name, "status": failure_status, "error": str(e)}

    result = {
        "name": name,
        "status": details.pop("status", HealthStatus.HEALTHY),
        "latency_ms": round((time.time() - start) * 1000, 2),
    }
    result.update(details)
    return result


def _ping_database():
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_cache():
    key = f"health_check_{time.time()}"
    cache.set(key, "OK", 10)
    value = cache.get(key)
    cache.delete(key)
    if value != "OK":
        raise RuntimeError("Cache read/write mismatch")


def _ping_media_bucket():
    import boto3

    client = boto3.client(
        's3',
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_S3_REGION,
    )
    client.head_bucket(Bucket=settings.AWS_S3_BUCKET_NAME)
    return {"bucket": settings.AWS_S3_BUCKET_NAME}


def _disk_usage():
    total, _, free = shutil.disk_usage("/")
    free_percent = (free / total) * 100

    if free_percent < 10:
        status = HealthStatus.UNHEALTHY
    elif free_percent < 20:
        status = HealthStatus.DEGRADED
    else:
        status = HealthStatus.HEALTHY

    return {
        "status": status,
        "free_percent": round(free_percent, 2),
        "free_gb": round(free / (1024**3), 2),
    }


def check_database() -> Dict[str, Any]:
    return run_check("database", _ping_database)


def check_cache() -> Dict[str, Any]:
    return run_check("cache", _ping_cache)


def check_object_storage() -> Dict[str, Any]:
    return run_check("object_storage", _ping_media_bucket, failure_status=HealthStatus.DEGRADED)


def check_disk_space() -> Dict[str, Any]:
    return run_check("disk", _disk_usage, failure_status=HealthStatus.DEGRADED)


def overall_status(checks: List[Dict[str, Any]]) -> str:
    statuses = {c["status"] for c in checks}
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


# =============================================================================
# VIEWS
# =============================================================================

@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """Process is up and serving requests."""
    return Response({
        "status": HealthStatus.HEALTHY,
        "timestamp": timezone.now().isoformat(),
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def liveness_check(request):
    return Response({
        "status": "alive",
        "timestamp": timezone.now().isoformat(),
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def readiness_check(request):
    """503 while the database or cache is down."""
    checks = [check_database(), check_cache()]
    status = overall_status(checks)

    return Response(
        {
            "status": status,
            "checks": checks,
            "timestamp": timezone.now().isoformat(),
        },
        status=503 if status == HealthStatus.UNHEALTHY else 200
    )


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def detailed_health_check(request):
    checks = [
        check_database(),
        check_cache(),
        check_object_storage(),
        check_disk_space(),
    ]

    return Response({
        "status": overall_status(checks),
        "service": getattr(settings, 'SERVICE_NAME', 'unknown'),
        "version": getattr(settings, 'SERVICE_VERSION', '1.0.0'),
        "checks": checks,
        "timestamp": timezone.now().isoformat(),
    })


def get_health_urlpatterns():
    """
    Usage in urls.py:
        urlpatterns += get_health_urlpatterns()
    """
    return [
        path('health/', health_check, name='health'),
        path('health/live/', liveness_check, name='liveness'),
        path('health/ready/', readiness_check, name='readiness'),
        path('health/detailed/', detailed_health_check, name='health_detailed'),
    ]
