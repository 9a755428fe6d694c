from datetime import date, timedelta
from unittest import mock

import pytest

from accounts.identity import Identity
from accounts.models import CustomUser
from donorlink.exceptions import ConflictError, NotFoundError, ValidationError
from donors import registry
from donors.models import DonorProfile
from tests.conftest import days_ago


@pytest.fixture
def donor_identity(make_user):
    return Identity.from_user(make_user(role=CustomUser.DONOR))


def test_create_profile_with_old_donation_is_available(donor_identity):
    profile = registry.create_profile(donor_identity, {
        'blood_group': 'A_POSITIVE',
        'last_donation_date': days_ago(91).isoformat(),
        'phone_number': '+880 1712-345678',
    })

    assert profile.is_available is True
    assert profile.availability_override is False
    assert profile.phone_number == '+8801712345678'


def test_create_profile_within_cooldown_is_unavailable(donor_identity):
    profile = registry.create_profile(donor_identity, {
        'blood_group': 'A_POSITIVE',
        'last_donation_date': days_ago(89).isoformat(),
    })

    assert profile.is_available is False


def test_create_profile_twice_conflicts(donor_identity):
    registry.create_profile(donor_identity, {'blood_group': 'B_POSITIVE'})

    with pytest.raises(ConflictError):
        registry.create_profile(donor_identity, {'blood_group': 'B_POSITIVE'})
    assert DonorProfile.objects.filter(user_id=donor_identity.user_id).count() == 1


def test_create_profile_rejects_unknown_blood_group(donor_identity):
    with pytest.raises(ValidationError) as excinfo:
        registry.create_profile(donor_identity, {'blood_group': 'C_POSITIVE'})
    assert 'blood_group' in str(excinfo.value.detail)


def test_create_profile_rejects_bad_phone(donor_identity):
    with pytest.raises(ValidationError):
        registry.create_profile(donor_identity, {'blood_group': 'O_POSITIVE', 'phone_number': '123'})


def test_explicit_availability_wins_on_create(donor_identity):
    profile = registry.create_profile(donor_identity, {
        'blood_group': 'A_POSITIVE',
        'is_available': False,
    })

    assert profile.is_available is False
    assert profile.availability_override is True


def test_explicit_availability_wins_within_cooldown(donor_identity):
    registry.create_profile(donor_identity, {
        'blood_group': 'A_POSITIVE',
        'last_donation_date': days_ago(10).isoformat(),
    })

    profile = registry.update_profile(donor_identity, {'is_available': True})

    assert profile.is_available is True
    assert profile.availability_override is True


def test_new_donation_date_recomputes_availability(donor_identity):
    registry.create_profile(donor_identity, {'blood_group': 'A_POSITIVE', 'is_available': False})

    profile = registry.update_profile(donor_identity, {'last_donation_date': days_ago(100).isoformat()})

    assert profile.is_available is True
    assert profile.availability_override is False


def test_update_without_profile_is_not_found(donor_identity):
    with pytest.raises(NotFoundError):
        registry.update_profile(donor_identity, {'department': 'CSE'})


def test_get_profile(donor_identity):
    registry.create_profile(donor_identity, {'blood_group': 'AB_NEGATIVE'})
    assert registry.get_profile(donor_identity).blood_group == 'AB_NEGATIVE'


def test_refresh_reenables_donors_past_cooldown(make_donor):
    due = make_donor(is_available=False, last_donation_date=days_ago(91))
    waiting = make_donor(is_available=False, last_donation_date=days_ago(89))
    pinned = make_donor(is_available=False, last_donation_date=days_ago(200), availability_override=True)
    available = make_donor(is_available=True, last_donation_date=days_ago(5))

    assert registry.refresh_eligibility() == 1

    for profile in (due, waiting, pinned, available):
        profile.refresh_from_db()
    assert due.is_available is True
    assert waiting.is_available is False
    assert pinned.is_available is False
    assert available.is_available is True


def test_refresh_is_idempotent(make_donor):
    make_donor(is_available=False, last_donation_date=days_ago(120))
    make_donor(is_available=False, last_donation_date=days_ago(30))

    assert registry.refresh_eligibility() == 1
    snapshot = list(DonorProfile.objects.order_by('pk').values_list('pk', 'is_available'))

    assert registry.refresh_eligibility() == 0
    assert list(DonorProfile.objects.order_by('pk').values_list('pk', 'is_available')) == snapshot


def test_refresh_cutoff_follows_local_date(make_donor):
    today = date(2026, 3, 1)
    due = make_donor(is_available=False, last_donation_date=today - timedelta(days=90))
    early = make_donor(is_available=False, last_donation_date=today - timedelta(days=89))

    with mock.patch('django.utils.timezone.localdate', return_value=today):
        assert registry.refresh_eligibility() == 1

    due.refresh_from_db()
    early.refresh_from_db()
    assert due.is_available is True
    assert early.is_available is False


def test_refresh_honours_eligible_regions(settings, make_donor):
    settings.ELIGIBLE_REGIONS = ['Sylhet']
    inside = make_donor(is_available=False, last_donation_date=days_ago(120), current_district='sylhet')
    outside = make_donor(is_available=False, last_donation_date=days_ago(120), current_district='Dhaka')

    assert registry.refresh_eligibility() == 1

    inside.refresh_from_db()
    outside.refresh_from_db()
    assert inside.is_available is True
    assert outside.is_available is False


def test_auto_availability_outside_regions(settings, donor_identity):
    settings.ELIGIBLE_REGIONS = ['Sylhet']

    profile = registry.create_profile(donor_identity, {
        'blood_group': 'O_POSITIVE',
        'current_district': 'Chittagong',
    })

    assert profile.is_available is False


def test_list_donors_only_shows_verified(make_donor):
    verified = make_donor(blood_group='A_POSITIVE')
    make_donor(blood_group='A_POSITIVE', is_verified=False)
    make_donor(blood_group='B_POSITIVE', is_available=False)

    assert list(registry.list_donors(blood_group='A_POSITIVE')) == [verified]
    assert registry.list_donors().count() == 2
    assert registry.list_donors(available_only=True).count() == 1


def test_list_donors_search_by_name(make_donor):
    donor = make_donor()
    donor.user.name = 'Nusrat Jahan'
    donor.user.save()
    make_donor()

    assert list(registry.list_donors(search='nusrat')) == [donor]
