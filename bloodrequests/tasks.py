# bloodrequests/tasks.py
"""
Celery tasks for donor alerts and the eligibility sweep
"""
import logging

from celery import shared_task

from donors.models import DonorNotification
from donors.registry import refresh_eligibility
from .matching import send_alerts
from .models import BloodRequest

logger = logging.getLogger(__name__)


@shared_task
def send_donor_alerts(blood_request_id, notification_ids):
    """
    Email the donors notified for an approved request.
    Fire-and-forget: failures are logged and reported, never retried.
    """
    try:
        blood_request = BloodRequest.objects.get(pk=blood_request_id)
    except BloodRequest.DoesNotExist:
        logger.warning(f"Blood request {blood_request_id} not found, no alerts sent")
        return None

    notifications = list(
        DonorNotification.objects.filter(pk__in=notification_ids).select_related('donor', 'donor__user')
    )
    return send_alerts(blood_request, notifications).as_dict()


@shared_task
def refresh_donor_eligibility():
    """Nightly sweep so donor lists stay current between approvals."""
    return refresh_eligibility()
