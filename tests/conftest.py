import itertools
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.identity import Identity
from accounts.models import CustomUser
from bloodrequests import store
from bloodrequests.models import BloodRequest
from donors.models import DonorProfile


@pytest.fixture(autouse=True)
def donorlink_settings(settings):
    settings.DONOR_ALERT_DISPATCH = 'sync'
    settings.ELIGIBLE_REGIONS = []
    settings.DONATION_COOLDOWN_DAYS = 90
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    return settings


def days_ago(days):
    return timezone.localdate() - timedelta(days=days)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role=CustomUser.REQUESTER, is_verified=True, email=None, name=None):
        n = next(counter)
        email = email or f'{role.lower()}{n}@campus.example.edu'
        return CustomUser.objects.create_user(
            username=email,
            email=email,
            password='donate-safely-42',
            role=role,
            is_verified=is_verified,
            name=name or f'{role.title()} {n}',
        )
    return _make


@pytest.fixture
def make_donor(make_user):
    def _make(blood_group='O_NEGATIVE', is_available=True, is_verified=True,
              last_donation_date=None, **fields):
        user = make_user(role=CustomUser.DONOR, is_verified=is_verified)
        return DonorProfile.objects.create(
            user=user,
            blood_group=blood_group,
            is_available=is_available,
            last_donation_date=last_donation_date,
            phone_number=fields.pop('phone_number', '01712345678'),
            **fields
        )
    return _make


@pytest.fixture
def requester(make_user):
    return make_user(role=CustomUser.REQUESTER, email='rahim@campus.example.edu', name='Rahim')


@pytest.fixture
def moderator(make_user):
    return make_user(role=CustomUser.MODERATOR, name='Moderator')


@pytest.fixture
def requester_identity(requester):
    return Identity.from_user(requester)


@pytest.fixture
def moderator_identity(moderator):
    return Identity.from_user(moderator)


def request_fields(**overrides):
    fields = {
        'requester_name': 'Rahim',
        'requester_phone': '+880 1712-345678',
        'blood_group': 'O_NEGATIVE',
        'urgency': BloodRequest.URGENT,
        'location': 'City Hospital, Ward 5',
        'hospital_name': 'City Hospital',
        'units_needed': 2,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_request(requester_identity):
    def _make(**overrides):
        return store.create_request(requester_identity, request_fields(**overrides))
    return _make


@pytest.fixture
def approve(moderator_identity):
    def _approve(blood_request):
        return store.set_decision(moderator_identity, blood_request.pk, store.APPROVE)
    return _approve


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client
