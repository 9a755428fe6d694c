# bloodrequests/store.py
"""
Request store: submission, listing and the moderator decision that moves a
blood request out of PENDING.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.utils import timezone

from accounts.models import CustomUser
from donorlink.exceptions import ConflictError, NotFoundError, ValidationError
from donors.ledger import close_request_notifications
from .matching import MatchResult, dispatch_donor_alerts, match_donors
from .models import BloodRequest
from .serializers import BloodRequestInputSerializer

logger = logging.getLogger(__name__)

VALID_STATUSES = [value for value, _ in BloodRequest.STATUS_CHOICES]

APPROVE = 'approve'
REJECT = 'reject'


@dataclass
class Decision:
    blood_request: BloodRequest
    match: Optional[MatchResult] = None


def create_request(identity, fields):
    """Submit a blood request on behalf of the caller. Starts PENDING."""
    serializer = BloodRequestInputSerializer(data=fields)
    if not serializer.is_valid():
        raise ValidationError.from_serializer(serializer.errors)

    blood_request = BloodRequest.objects.create(
        requester_email=identity.email,
        status=BloodRequest.PENDING,
        **serializer.validated_data
    )
    logger.info(f"Blood request #{blood_request.pk} created by {identity.email} ({blood_request.blood_group})")
    return blood_request


def _visible_requests(identity):
    queryset = BloodRequest.objects.select_related('moderator', 'accepted_donor')
    if not identity.is_reviewer:
        queryset = queryset.filter(requester_email=identity.email)
    return queryset


def list_requests(identity, status=None):
    """
    Reviewers see every request, everyone else only their own.
    """
    if status and status not in VALID_STATUSES:
        raise ValidationError('Invalid status filter')

    queryset = _visible_requests(identity)
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('-created_at')


def get_request(identity, request_id):
    try:
        return _visible_requests(identity).get(pk=request_id)
    except BloodRequest.DoesNotExist:
        raise NotFoundError('Request not found')


def set_decision(identity, request_id, decision):
    """
    Approve or reject a PENDING request.

    The status flip is a conditional update on ``status = PENDING`` so two
    moderators deciding at once cannot both win; the loser gets
    ``ConflictError``. Approval runs the matching engine exactly once: donor
    notifications are written in the same transaction and alert emails go
    out after it commits.
    """
    identity.require_role(*CustomUser.REVIEWER_ROLES)

    if decision not in (APPROVE, REJECT):
        raise ValidationError("Action must be 'approve' or 'reject'")

    now = timezone.now()
    new_status = BloodRequest.APPROVED if decision == APPROVE else BloodRequest.REJECTED

    with transaction.atomic():
        updated = BloodRequest.objects.filter(
            pk=request_id,
            status=BloodRequest.PENDING,
        ).update(
            status=new_status,
            moderator_id=identity.user_id,
            approved_at=now if decision == APPROVE else None,
            updated_at=now,
        )

        if not updated:
            current = BloodRequest.objects.filter(pk=request_id).values_list('status', flat=True).first()
            if current is None:
                raise NotFoundError('Request not found')
            raise ConflictError(f"Request is already {current.lower()}")

        blood_request = BloodRequest.objects.select_related('moderator').get(pk=request_id)

        if decision == APPROVE:
            notifications = match_donors(blood_request)
        else:
            close_request_notifications(blood_request.pk)
            notifications = None

    logger.info(f"Blood request #{request_id} {new_status.lower()} by moderator {identity.user_id}")

    if notifications is None:
        return Decision(blood_request=blood_request)

    return Decision(blood_request=blood_request, match=dispatch_donor_alerts(blood_request, notifications))
