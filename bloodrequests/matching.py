# bloodrequests/matching.py
"""
Matching engine, run once when a moderator approves a blood request.

1. Sweep donors whose cooldown has elapsed back to available
2. Pick available, verified donors with the same blood group
3. Write one in-app notification per donor
4. Email each donor; a failed email is reported, never rolled back
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import List

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.utils.html import escape

from donors.ledger import open_notifications
from donors.models import DonorProfile
from donors.registry import refresh_eligibility

# Logger setup
logger = logging.getLogger(__name__)

CELERY_DISPATCH = 'celery'


@dataclass
class AlertFailure:
    recipient: str
    error: str


@dataclass
class MatchResult:
    total: int
    sent: int = 0
    failures: List[AlertFailure] = field(default_factory=list)
    queued: bool = False

    def as_dict(self):
        return asdict(self)


def find_candidates(blood_request):
    """Available, verified donors whose blood group equals the request's."""
    return DonorProfile.objects.filter(
        blood_group=blood_request.blood_group,
        is_available=True,
        user__is_verified=True,
    ).select_related('user')


def match_donors(blood_request):
    """
    Refresh eligibility, then notify every candidate in-app.

    Returns:
        list[DonorNotification]: the notifications written for the request
    """
    refresh_eligibility()

    candidates = list(find_candidates(blood_request))
    logger.info(
        f"Found {len(candidates)} matching donors for request #{blood_request.pk} "
        f"({blood_request.blood_group})"
    )
    return open_notifications(blood_request, candidates)


def build_donor_alert(blood_request, donor):
    """Subject, plain text and HTML body of the alert sent to one donor."""
    group = blood_request.get_blood_group_display()
    subject = f"Urgent: {group} Blood Needed"

    details = [
        ('Blood Group', group),
        ('Patient', blood_request.patient_name or 'N/A'),
        ('Hospital', blood_request.hospital_name or 'N/A'),
        ('Location', blood_request.location),
        ('Units Needed', blood_request.units_needed),
        ('Urgency', blood_request.get_urgency_display()),
    ]
    contact = [
        ('Name', blood_request.requester_name),
        ('Phone', blood_request.requester_phone),
        ('Email', blood_request.requester_email),
    ]

    lines = [
        f"Dear {donor.user.display_name},",
        "",
        "A blood donation request matching your blood group has been approved.",
        "",
    ]
    lines += [f"{label}: {value}" for label, value in details]
    lines += ["", "Contact:"]
    lines += [f"{label}: {value}" for label, value in contact]
    if blood_request.additional_info:
        lines += ["", f"Additional Info: {blood_request.additional_info}"]
    lines += [
        "",
        f"Log in to accept: {settings.SITE_URL}/donor/notifications/",
        "",
        "Your donation can save a life!",
    ]
    message = "\n".join(lines)

    rows = ''.join(f"<li><strong>{escape(label)}:</strong> {escape(value)}</li>" for label, value in details)
    contact_rows = ''.join(f"<li><strong>{escape(label)}:</strong> {escape(value)}</li>" for label, value in contact)
    extra = (
        f"<p><strong>Additional Info:</strong> {escape(blood_request.additional_info)}</p>"
        if blood_request.additional_info else ''
    )
    html = (
        f"<p>Dear <strong>{escape(donor.user.display_name)}</strong>,</p>"
        f"<p>A blood donation request matching your blood group has been approved.</p>"
        f"<h3>Request Details</h3><ul>{rows}</ul>"
        f"<h3>Contact Information</h3><ul>{contact_rows}</ul>"
        f"{extra}"
        f"<p>If you can donate, please accept the request from your dashboard.</p>"
    )
    return subject, message, html


def send_donor_alert(notification):
    """Email one donor. Raises on delivery failure."""
    donor = notification.donor
    blood_request = notification.blood_request

    if not donor.user.email:
        raise ValueError(f"No email found for donor {donor.pk}")

    subject, message, html = build_donor_alert(blood_request, donor)
    send_mail(
        subject=subject,
        message=message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[donor.user.email],
        fail_silently=False,
        html_message=html,
    )


def send_alerts(blood_request, notifications):
    """
    Email every notified donor, collecting per-recipient failures.

    No retry: the in-app notification already exists either way.
    """
    result = MatchResult(total=len(notifications))

    for notification in notifications:
        notification.blood_request = blood_request
        recipient = notification.donor.user.email
        try:
            send_donor_alert(notification)
        except Exception as exc:
            logger.error(f"Failed to send alert to {recipient} for request #{blood_request.pk}: {exc}")
            result.failures.append(AlertFailure(recipient=recipient, error=str(exc)))
        else:
            logger.info(f"Alert sent to {recipient} for request #{blood_request.pk}")
            result.sent += 1

    logger.info(f"Emails sent for request #{blood_request.pk}: {result.sent}/{result.total}")
    return result


def dispatch_donor_alerts(blood_request, notifications):
    """
    Send alerts in-process, or queue them on a celery worker once the
    surrounding transaction commits when DONOR_ALERT_DISPATCH is 'celery'.
    """
    if settings.DONOR_ALERT_DISPATCH != CELERY_DISPATCH:
        return send_alerts(blood_request, notifications)

    from .tasks import send_donor_alerts

    notification_ids = [notification.pk for notification in notifications]
    if notification_ids:
        transaction.on_commit(
            lambda: send_donor_alerts.delay(blood_request.pk, notification_ids)
        )
    logger.info(f"Queued {len(notification_ids)} alert(s) for request #{blood_request.pk}")
    return MatchResult(total=len(notification_ids), queued=True)
