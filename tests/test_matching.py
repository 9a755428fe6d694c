from unittest import mock

from django.core.mail import send_mail as real_send_mail

from bloodrequests.matching import find_candidates
from bloodrequests.tasks import send_donor_alerts
from donors.models import DonorNotification
from tests.conftest import days_ago


def test_approval_notifies_exact_candidate_set(make_donor, make_request, approve, mailoutbox):
    d1 = make_donor(blood_group='O_NEGATIVE')
    d2 = make_donor(blood_group='O_NEGATIVE')
    make_donor(blood_group='O_NEGATIVE', is_available=False, last_donation_date=days_ago(10))
    make_donor(blood_group='O_NEGATIVE', is_verified=False)
    make_donor(blood_group='A_POSITIVE')
    blood_request = make_request(blood_group='O_NEGATIVE')

    decision = approve(blood_request)

    notified = set(
        DonorNotification.objects.filter(blood_request=blood_request).values_list('donor_id', flat=True)
    )
    assert notified == {d1.pk, d2.pk}
    assert set(
        DonorNotification.objects.filter(blood_request=blood_request).values_list('status', flat=True)
    ) == {DonorNotification.UNREAD}

    assert decision.match.total == 2
    assert decision.match.sent == 2
    assert decision.match.failures == []
    assert sorted(m.to[0] for m in mailoutbox) == sorted([d1.user.email, d2.user.email])


def test_alert_email_has_request_details(make_donor, make_request, approve, mailoutbox):
    make_donor(blood_group='B_NEGATIVE')
    blood_request = make_request(blood_group='B_NEGATIVE', additional_info='<b>Thalassemia</b> patient')

    approve(blood_request)

    [message] = mailoutbox
    assert message.subject == 'Urgent: B- Blood Needed'
    assert 'City Hospital, Ward 5' in message.body
    assert '+8801712345678' in message.body
    html, mimetype = message.alternatives[0]
    assert mimetype == 'text/html'
    assert '&lt;b&gt;Thalassemia&lt;/b&gt;' in html


def test_eligibility_is_refreshed_before_matching(make_donor, make_request, approve):
    due = make_donor(blood_group='AB_POSITIVE', is_available=False, last_donation_date=days_ago(95))
    blood_request = make_request(blood_group='AB_POSITIVE')

    decision = approve(blood_request)

    due.refresh_from_db()
    assert due.is_available is True
    assert decision.match.total == 1


def test_no_candidates_still_approves(make_request, approve, mailoutbox):
    blood_request = make_request(blood_group='AB_NEGATIVE')

    decision = approve(blood_request)

    assert decision.match.total == 0
    assert decision.blood_request.status == 'APPROVED'
    assert mailoutbox == []


def test_email_failures_are_collected(make_donor, make_request, approve):
    good = make_donor(blood_group='O_NEGATIVE')
    bad = make_donor(blood_group='O_NEGATIVE')
    blood_request = make_request(blood_group='O_NEGATIVE')

    def flaky_send_mail(**kwargs):
        if kwargs['recipient_list'] == [bad.user.email]:
            raise ConnectionRefusedError('SMTP unavailable')
        return real_send_mail(**kwargs)

    with mock.patch('bloodrequests.matching.send_mail', side_effect=flaky_send_mail):
        decision = approve(blood_request)

    assert decision.match.total == 2
    assert decision.match.sent == 1
    [failure] = decision.match.failures
    assert failure.recipient == bad.user.email
    assert 'SMTP unavailable' in failure.error

    # In-app notifications stand regardless of email delivery
    assert DonorNotification.objects.filter(blood_request=blood_request).count() == 2
    assert DonorNotification.objects.filter(donor=good).exists()


def test_celery_dispatch_queues_after_commit(settings, make_donor, make_request, approve,
                                             django_capture_on_commit_callbacks, mailoutbox):
    settings.DONOR_ALERT_DISPATCH = 'celery'
    make_donor(blood_group='O_NEGATIVE')
    make_donor(blood_group='O_NEGATIVE')
    blood_request = make_request(blood_group='O_NEGATIVE')

    with mock.patch('bloodrequests.tasks.send_donor_alerts.delay') as delay:
        with django_capture_on_commit_callbacks(execute=True):
            decision = approve(blood_request)

    assert decision.match.queued is True
    assert decision.match.total == 2
    assert mailoutbox == []

    notification_ids = list(
        DonorNotification.objects.filter(blood_request=blood_request).values_list('pk', flat=True)
    )
    delay.assert_called_once()
    request_id, queued_ids = delay.call_args.args
    assert request_id == blood_request.pk
    assert sorted(queued_ids) == sorted(notification_ids)


def test_send_donor_alerts_task(settings, make_donor, make_request, approve, mailoutbox):
    settings.DONOR_ALERT_DISPATCH = 'celery'
    make_donor(blood_group='A_NEGATIVE')
    blood_request = make_request(blood_group='A_NEGATIVE')
    with mock.patch('bloodrequests.tasks.send_donor_alerts.delay'):
        approve(blood_request)
    ids = list(DonorNotification.objects.values_list('pk', flat=True))

    result = send_donor_alerts(blood_request.pk, ids)

    assert result['total'] == 1
    assert result['sent'] == 1
    assert len(mailoutbox) == 1


def test_send_donor_alerts_task_missing_request(db):
    assert send_donor_alerts(424242, []) is None


def test_find_candidates_ignores_other_groups(make_donor, make_request):
    match = make_donor(blood_group='B_POSITIVE')
    make_donor(blood_group='B_NEGATIVE')
    blood_request = make_request(blood_group='B_POSITIVE')

    assert list(find_candidates(blood_request)) == [match]
