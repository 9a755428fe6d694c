import pytest

from accounts.identity import Identity
from accounts.models import CustomUser
from bloodrequests import store
from bloodrequests.models import BloodRequest
from donorlink.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from donors.models import DonorNotification
from tests.conftest import request_fields


def test_create_request_starts_pending(requester_identity):
    blood_request = store.create_request(requester_identity, request_fields())

    assert blood_request.status == BloodRequest.PENDING
    assert blood_request.requester_email == 'rahim@campus.example.edu'
    assert blood_request.requester_phone == '+8801712345678'
    assert blood_request.accepted_donor is None
    assert blood_request.moderator is None


@pytest.mark.parametrize('overrides', [
    {'location': '   '},
    {'requester_name': ''},
    {'requester_phone': '12-34'},
    {'blood_group': 'Z_POSITIVE'},
    {'urgency': 'WHENEVER'},
    {'units_needed': 0},
])
def test_create_request_rejects_invalid_fields(requester_identity, overrides):
    with pytest.raises(ValidationError):
        store.create_request(requester_identity, request_fields(**overrides))
    assert not BloodRequest.objects.exists()


def test_create_request_requires_location(requester_identity):
    fields = request_fields()
    del fields['location']

    with pytest.raises(ValidationError) as excinfo:
        store.create_request(requester_identity, fields)
    assert 'location' in str(excinfo.value.detail)


def test_requesters_only_see_their_own(make_user, make_request, requester_identity, moderator_identity):
    mine = make_request()
    other = Identity.from_user(make_user())
    store.create_request(other, request_fields())

    assert list(store.list_requests(requester_identity)) == [mine]
    assert store.list_requests(moderator_identity).count() == 2


def test_list_requests_status_filter(make_request, approve, moderator_identity):
    approved = make_request()
    make_request()
    approve(approved)

    result = store.list_requests(moderator_identity, BloodRequest.APPROVED)
    assert [r.pk for r in result] == [approved.pk]


def test_list_requests_rejects_unknown_status(moderator_identity):
    with pytest.raises(ValidationError):
        store.list_requests(moderator_identity, 'LOST')


def test_get_request_hides_other_requesters(make_user, make_request):
    blood_request = make_request()
    stranger = Identity.from_user(make_user())

    with pytest.raises(NotFoundError):
        store.get_request(stranger, blood_request.pk)


def test_approve_sets_moderator_and_timestamp(make_request, moderator_identity):
    blood_request = make_request()

    decision = store.set_decision(moderator_identity, blood_request.pk, store.APPROVE)

    assert decision.blood_request.status == BloodRequest.APPROVED
    assert decision.blood_request.moderator_id == moderator_identity.user_id
    assert decision.blood_request.approved_at is not None
    assert decision.match is not None


def test_reject_does_not_match_donors(make_request, make_donor, moderator_identity, mailoutbox):
    make_donor(blood_group='O_NEGATIVE')
    blood_request = make_request()

    decision = store.set_decision(moderator_identity, blood_request.pk, store.REJECT)

    assert decision.blood_request.status == BloodRequest.REJECTED
    assert decision.match is None
    assert not DonorNotification.objects.exists()
    assert mailoutbox == []


def test_decision_on_missing_request(moderator_identity):
    with pytest.raises(NotFoundError):
        store.set_decision(moderator_identity, 9999, store.APPROVE)


def test_second_decision_conflicts(make_request, make_donor, moderator_identity):
    make_donor(blood_group='O_NEGATIVE')
    blood_request = make_request()
    store.set_decision(moderator_identity, blood_request.pk, store.APPROVE)

    with pytest.raises(ConflictError) as excinfo:
        store.set_decision(moderator_identity, blood_request.pk, store.APPROVE)

    assert 'approved' in str(excinfo.value.detail)
    assert DonorNotification.objects.filter(blood_request=blood_request).count() == 1


def test_decision_requires_reviewer_role(make_request, requester_identity):
    blood_request = make_request()

    with pytest.raises(ForbiddenError):
        store.set_decision(requester_identity, blood_request.pk, store.APPROVE)

    blood_request.refresh_from_db()
    assert blood_request.status == BloodRequest.PENDING


def test_admin_may_decide(make_user, make_request):
    admin_identity = Identity.from_user(make_user(role=CustomUser.ADMIN))
    blood_request = make_request()

    decision = store.set_decision(admin_identity, blood_request.pk, store.REJECT)
    assert decision.blood_request.status == BloodRequest.REJECTED


def test_unknown_action_is_invalid(make_request, moderator_identity):
    blood_request = make_request()

    with pytest.raises(ValidationError):
        store.set_decision(moderator_identity, blood_request.pk, 'maybe')
