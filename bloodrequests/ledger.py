# bloodrequests/ledger.py
"""
Requester side of the notification ledger.
"""
from django.utils import timezone

from donorlink.exceptions import NotFoundError
from .models import RequesterNotification


def record_acceptance(blood_request, donor_id):
    """Written once per request, inside the acceptance transaction."""
    return RequesterNotification.objects.create(
        requester_email=blood_request.requester_email,
        blood_request=blood_request,
        donor_id=donor_id,
    )


def list_requester_notifications(identity):
    """
    The caller's notifications, newest first, plus how many are unread.
    """
    queryset = RequesterNotification.objects.filter(
        requester_email=identity.email
    ).select_related('blood_request', 'donor', 'donor__donor_profile').order_by('-created_at')

    unread_count = queryset.filter(status=RequesterNotification.UNREAD).count()
    return queryset, unread_count


def mark_requester_notification_read(identity, notification_id):
    try:
        notification = RequesterNotification.objects.get(
            pk=notification_id, requester_email=identity.email
        )
    except RequesterNotification.DoesNotExist:
        raise NotFoundError('Notification not found')

    if notification.status == RequesterNotification.UNREAD:
        notification.status = RequesterNotification.READ
        notification.read_at = timezone.now()
        notification.save(update_fields=['status', 'read_at'])
    return notification


def mark_all_requester_notifications_read(identity):
    return RequesterNotification.objects.filter(
        requester_email=identity.email,
        status=RequesterNotification.UNREAD,
    ).update(status=RequesterNotification.READ, read_at=timezone.now())
