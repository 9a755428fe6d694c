# donors/ledger.py
"""
Donor side of the notification ledger.

A DonorNotification is the in-app record that a donor was asked to help with
a blood request. It is the source of truth for "was this donor notified",
whatever happened to the alert email.
"""
from django.db import IntegrityError, transaction
from django.utils import timezone

from donorlink.exceptions import NotFoundError, ValidationError
from donors.models import DonorNotification

VALID_STATUSES = [value for value, _ in DonorNotification.STATUS_CHOICES]


def open_notifications(blood_request, profiles):
    """
    Create one UNREAD notification per donor profile for ``blood_request``.

    A donor already notified for the request keeps their existing record.

    Returns:
        list[DonorNotification]: one notification per profile
    """
    notifications = []
    for profile in profiles:
        try:
            with transaction.atomic():
                notification, _ = DonorNotification.objects.get_or_create(
                    donor=profile,
                    blood_request=blood_request,
                )
        except IntegrityError:
            notification = DonorNotification.objects.get(donor=profile, blood_request=blood_request)
        notification.donor = profile
        notifications.append(notification)
    return notifications


def close_request_notifications(blood_request_id, exclude_id=None):
    """Close every open notification for a request. Returns the count closed."""
    queryset = DonorNotification.objects.filter(
        blood_request_id=blood_request_id
    ).exclude(status=DonorNotification.CLOSED)
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    return queryset.update(status=DonorNotification.CLOSED)


def list_donor_notifications(identity, status=None, mark_read=True):
    """
    The caller's notifications, newest first.

    Viewing the list moves UNREAD notifications to READ unless ``mark_read``
    is False.
    """
    if status and status not in VALID_STATUSES:
        raise ValidationError('Invalid status filter')

    if mark_read:
        DonorNotification.objects.filter(
            donor__user_id=identity.user_id,
            status=DonorNotification.UNREAD,
        ).update(status=DonorNotification.READ, read_at=timezone.now())

    queryset = DonorNotification.objects.filter(
        donor__user_id=identity.user_id
    ).select_related('blood_request')

    if status:
        queryset = queryset.filter(status=status)

    return queryset.order_by('-created_at')


def mark_donor_notification_read(identity, notification_id):
    try:
        notification = DonorNotification.objects.select_related('blood_request').get(
            pk=notification_id, donor__user_id=identity.user_id
        )
    except DonorNotification.DoesNotExist:
        raise NotFoundError('Notification not found')

    if notification.status == DonorNotification.UNREAD:
        notification.status = DonorNotification.READ
        notification.read_at = timezone.now()
        notification.save(update_fields=['status', 'read_at'])
    return notification
