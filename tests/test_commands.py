from io import StringIO
from unittest import mock

import pytest
from django.contrib import admin
from django.core.management import CommandError, call_command
from django.test import RequestFactory

from accounts.models import CustomUser
from donors.admin import DonorProfileAdmin
from donors.models import DonorProfile
from tests.conftest import days_ago

SHEET = """name,email,blood_group,phone_number,current_district,department,last_donation_date
Nusrat Jahan,nusrat@campus.example.edu,O-,01712 345678,Sylhet,CSE,{old}
Tanvir Ahmed,TANVIR@campus.example.edu,AB+,,Dhaka,EEE,
Broken Row,broken@campus.example.edu,Z+,,,,
,,A+,,,,
"""


@pytest.fixture
def donor_sheet(tmp_path):
    path = tmp_path / 'donors.csv'
    path.write_text(SHEET.format(old=days_ago(120).isoformat()))
    return path


def test_import_donors_creates_accounts_and_profiles(db, donor_sheet):
    out = StringIO()

    call_command('import_donors', str(donor_sheet), '--verified', stdout=out)

    assert 'Created: 2, Updated: 0, Skipped: 1' in out.getvalue()

    nusrat = DonorProfile.objects.get(user__email='nusrat@campus.example.edu')
    assert nusrat.blood_group == 'O_NEGATIVE'
    assert nusrat.phone_number == '01712345678'
    assert nusrat.is_available is True
    assert nusrat.user.role == CustomUser.DONOR
    assert nusrat.user.is_verified is True
    assert not nusrat.user.has_usable_password()

    assert DonorProfile.objects.get(user__email='tanvir@campus.example.edu').blood_group == 'AB_POSITIVE'
    assert not CustomUser.objects.filter(email='broken@campus.example.edu').exists()


def test_import_donors_updates_existing_profiles(db, donor_sheet):
    call_command('import_donors', str(donor_sheet), stdout=StringIO())
    out = StringIO()

    call_command('import_donors', str(donor_sheet), stdout=out)

    assert 'Created: 0, Updated: 2, Skipped: 1' in out.getvalue()
    assert DonorProfile.objects.count() == 2


def test_import_donors_missing_file(db, tmp_path):
    with pytest.raises(CommandError):
        call_command('import_donors', str(tmp_path / 'absent.csv'), stdout=StringIO())


def test_refresh_eligibility_command(make_donor):
    make_donor(is_available=False, last_donation_date=days_ago(100))
    out = StringIO()

    call_command('refresh_eligibility', stdout=out)

    assert '1 donor(s) marked available again.' in out.getvalue()
    assert DonorProfile.objects.filter(is_available=True).count() == 1


def test_admin_refresh_action(make_donor, make_user):
    due = make_donor(is_available=False, last_donation_date=days_ago(100))
    request = RequestFactory().post('/admin/donors/donorprofile/')
    request.user = make_user(role=CustomUser.ADMIN)
    model_admin = DonorProfileAdmin(DonorProfile, admin.site)

    with mock.patch.object(model_admin, 'message_user') as message_user:
        model_admin.refresh_donor_eligibility(request, DonorProfile.objects.all())

    due.refresh_from_db()
    assert due.is_available is True
    message_user.assert_called_once_with(request, '1 donor(s) marked available again.')
