# donors/registry.py
"""
Donor registry: one eligibility profile per user, automatic availability and
the eligibility sweep run before every matching pass.
"""
import logging
from functools import reduce
from operator import or_

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from algorithms import eligibility
from donorlink.exceptions import ConflictError, NotFoundError, ValidationError
from donors.models import BLOOD_GROUPS, DonorProfile
from donors.serializers import DonorProfileInputSerializer

# Logger setup
logger = logging.getLogger(__name__)


def compute_auto_availability(district, last_donation_date, today=None):
    """
    Availability a donor gets when it has not been set explicitly: no prior
    donation, or the cooldown has elapsed, in one of the eligible regions.
    """
    return eligibility.compute_auto_availability(
        district,
        last_donation_date,
        eligible_regions=settings.ELIGIBLE_REGIONS,
        today=today or timezone.localdate(),
        cooldown_days=settings.DONATION_COOLDOWN_DAYS,
    )


def _region_filter():
    regions = [region for region in settings.ELIGIBLE_REGIONS if region]
    if not regions:
        return Q()
    return reduce(or_, (Q(current_district__iexact=region) for region in regions))


def _validate(attrs, partial):
    serializer = DonorProfileInputSerializer(data=attrs, partial=partial)
    if not serializer.is_valid():
        raise ValidationError.from_serializer(serializer.errors)
    return dict(serializer.validated_data)


def get_profile(identity):
    try:
        return DonorProfile.objects.select_related('user').get(user_id=identity.user_id)
    except DonorProfile.DoesNotExist:
        raise NotFoundError('Donor profile not found')


def create_profile(identity, attrs):
    """Create the caller's profile. A user can only ever own one."""
    data = _validate(attrs, partial=False)

    if DonorProfile.objects.filter(user_id=identity.user_id).exists():
        raise ConflictError('Donor profile already exists')

    explicit = 'is_available' in data
    if explicit:
        is_available = data.pop('is_available')
    else:
        is_available = compute_auto_availability(
            data.get('current_district'), data.get('last_donation_date')
        )

    try:
        with transaction.atomic():
            profile = DonorProfile.objects.create(
                user_id=identity.user_id,
                is_available=is_available,
                availability_override=explicit,
                **data
            )
    except IntegrityError:
        # Lost a race against a concurrent create for the same user
        raise ConflictError('Donor profile already exists')

    logger.info(f"Donor profile created for user {identity.user_id} (available={is_available})")
    return profile


def update_profile(identity, attrs):
    """
    Update the caller's profile.

    An explicit ``is_available`` always wins and pins the value against the
    sweep. Otherwise a new donation date or district recomputes availability.
    """
    data = _validate(attrs, partial=True)
    profile = get_profile(identity)

    explicit = 'is_available' in data
    is_available = data.pop('is_available', None)

    for field, value in data.items():
        setattr(profile, field, value)

    if explicit:
        profile.is_available = is_available
        profile.availability_override = True
    elif 'last_donation_date' in data or 'current_district' in data:
        profile.is_available = compute_auto_availability(
            profile.current_district, profile.last_donation_date
        )
        profile.availability_override = False

    profile.save()
    logger.info(f"Donor profile {profile.pk} updated (available={profile.is_available})")
    return profile


def upsert_profile(identity, attrs, create=False):
    if create:
        return create_profile(identity, attrs)
    return update_profile(identity, attrs)


def refresh_eligibility(today=None):
    """
    Mark donors available again once their cooldown has elapsed.

    Only touches unavailable, non-overridden profiles with a recorded
    donation old enough; never makes anyone unavailable, so running it twice
    changes nothing the second time.

    Returns:
        int: number of profiles that became available
    """
    cutoff = eligibility.eligibility_cutoff(today or timezone.localdate(), settings.DONATION_COOLDOWN_DAYS)

    updated = DonorProfile.objects.filter(
        _region_filter(),
        is_available=False,
        availability_override=False,
        last_donation_date__lte=cutoff,
    ).update(is_available=True, updated_at=timezone.now())

    if updated:
        logger.info(f"Eligibility refresh: {updated} donor(s) available again (cutoff {cutoff})")
    return updated


def list_donors(blood_group=None, available_only=False, search=None):
    """Public directory of verified donors."""
    queryset = DonorProfile.objects.filter(user__is_verified=True).select_related('user')

    if blood_group and blood_group in BLOOD_GROUPS:
        queryset = queryset.filter(blood_group=blood_group)

    if available_only:
        queryset = queryset.filter(is_available=True)

    if search:
        queryset = queryset.filter(
            Q(user__name__icontains=search) | Q(user__username__icontains=search)
        )

    return queryset.order_by('-updated_at')
