# bloodrequests/acceptance.py
"""
Acceptance coordinator.

At most one donor is ever recorded against a blood request, however many
donors accept at the same moment from however many worker processes. The
guarantee comes from a single conditional UPDATE
(``... WHERE accepted_donor IS NULL``) executed by the database; everything
else a successful acceptance changes is written in the same transaction.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from donorlink.exceptions import AlreadyAcceptedError, ConflictError, NotFoundError, ValidationError
from donors.ledger import close_request_notifications
from donors.models import DonorNotification, DonorProfile
from .ledger import record_acceptance
from .models import BloodRequest

logger = logging.getLogger(__name__)


def check_acceptance(identity, notification_id):
    """
    Preconditions checked before the critical section.

    Returns the caller's notification (with its blood request and donor
    profile loaded) when the caller may try to accept.
    """
    try:
        notification = DonorNotification.objects.select_related(
            'blood_request', 'donor', 'donor__user'
        ).get(pk=notification_id, donor__user_id=identity.user_id)
    except DonorNotification.DoesNotExist:
        raise NotFoundError('Notification not found')

    if not notification.donor.is_available:
        raise ValidationError('You are currently unavailable to donate')

    blood_request = notification.blood_request
    if blood_request.accepted_donor_id is not None:
        raise AlreadyAcceptedError('This request has already been accepted')
    if notification.status == DonorNotification.CLOSED:
        raise ConflictError('This request is no longer open')

    if blood_request.status != BloodRequest.APPROVED:
        raise ValidationError('Only approved requests can be accepted')

    return notification


def commit_acceptance(identity, notification):
    """
    Claim the request for the caller and apply every consequence atomically.

    Raises ``AlreadyAcceptedError`` without changing anything when another
    donor claimed the request first, and ``ValidationError`` when the caller
    has meanwhile committed to another request.
    """
    now = timezone.now()
    request_id = notification.blood_request_id
    profile_id = notification.donor_id

    with transaction.atomic():
        claimed = BloodRequest.objects.filter(
            pk=request_id,
            status=BloodRequest.APPROVED,
            accepted_donor__isnull=True,
        ).update(
            accepted_donor_id=identity.user_id,
            status=BloodRequest.FULFILLED,
            accepted_at=now,
            updated_at=now,
        )

        if claimed == 0:
            logger.info(f"Donor {identity.user_id} lost the race for request #{request_id}")
            raise AlreadyAcceptedError()

        # 1. The donor must still be free; rolls back the claim otherwise
        committed = DonorProfile.objects.filter(pk=profile_id, is_available=True).update(
            is_available=False,
            availability_override=False,
            last_donation_date=timezone.localdate(now),
            donation_count=F('donation_count') + 1,
            updated_at=now,
        )
        if committed == 0:
            logger.info(f"Donor {identity.user_id} is no longer available for request #{request_id}")
            raise ValidationError('You are currently unavailable to donate')

        # 2. Close the winning notification
        DonorNotification.objects.filter(pk=notification.pk).update(
            status=DonorNotification.CLOSED,
            read_at=notification.read_at or now,
            accepted_at=now,
        )

        # 3. Every other notification for the request is moot now
        close_request_notifications(request_id, exclude_id=notification.pk)

        # 4. Tell the requester who is coming
        blood_request = BloodRequest.objects.select_related('accepted_donor').get(pk=request_id)
        requester_notification = record_acceptance(blood_request, identity.user_id)

        transaction.on_commit(lambda: send_requester_acceptance_email(blood_request.pk))

    logger.info(f"Request #{request_id} accepted by donor {identity.user_id}")
    notification.refresh_from_db()
    return notification, blood_request, requester_notification


def accept_request(identity, notification_id):
    notification = check_acceptance(identity, notification_id)
    return commit_acceptance(identity, notification)


def send_requester_acceptance_email(blood_request_id):
    """Best-effort email to the requester; the in-app notification already exists."""
    blood_request = BloodRequest.objects.select_related('accepted_donor').get(pk=blood_request_id)
    donor = blood_request.accepted_donor
    profile = DonorProfile.objects.filter(user=donor).first()

    message = f"""
A donor has accepted your blood request.

Request ID: #{blood_request.pk}
Blood Group: {blood_request.get_blood_group_display()}
Location: {blood_request.location}

DONOR DETAILS:
Name: {donor.display_name}
Email: {donor.email}
Phone: {profile.phone_number if profile and profile.phone_number else 'N/A'}

Please get in touch with the donor to coordinate the donation.
    """.strip()

    try:
        send_mail(
            subject=f"Donor Accepted - Blood Request #{blood_request.pk}",
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[blood_request.requester_email],
            fail_silently=False,
        )
    except Exception as exc:
        logger.error(f"Failed to email requester {blood_request.requester_email}: {exc}")
