# api/views.py
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.decorators import role_required
from accounts.models import CustomUser
from bloodrequests import acceptance, ledger as requester_ledger, store
from bloodrequests.serializers import BloodRequestSerializer, RequesterNotificationSerializer
from donorlink.exceptions import ValidationError
from donors import ledger as donor_ledger, registry
from donors.serializers import DonorNotificationSerializer, DonorSerializer, PublicDonorSerializer


def _flag(value, default):
    if value is None:
        return default
    return str(value).lower() not in ('false', '0', 'no')


# ============================================
# BLOOD REQUESTS
# ============================================
@api_view(['GET', 'POST'])
@role_required()
def blood_requests(request, identity):
    """
    POST: submit a blood request for the logged-in user
    GET:  reviewers see every request, others only their own (?status=)
    """
    if request.method == 'POST':
        blood_request = store.create_request(identity, request.data)
        return Response(
            {'success': True, 'request': BloodRequestSerializer(blood_request).data},
            status=status.HTTP_201_CREATED,
        )

    queryset = store.list_requests(identity, request.query_params.get('status'))
    return Response({'requests': BloodRequestSerializer(queryset, many=True).data})


@api_view(['GET'])
@role_required()
def blood_request_detail(request, request_id, identity):
    blood_request = store.get_request(identity, request_id)
    return Response({'request': BloodRequestSerializer(blood_request).data})


@api_view(['POST'])
@role_required(*CustomUser.REVIEWER_ROLES)
def decide_blood_request(request, request_id, identity):
    """Approve or reject a pending request: {"action": "approve" | "reject"}"""
    decision = store.set_decision(identity, request_id, request.data.get('action'))

    data = {
        'success': True,
        'request': BloodRequestSerializer(decision.blood_request).data,
    }
    if decision.match is not None:
        match = decision.match
        data.update({
            'donors_notified': match.total,
            'emails_sent': match.sent,
            'email_errors': [f"{failure.recipient}: {failure.error}" for failure in match.failures] or None,
            'alerts_queued': match.queued,
        })
    return Response(data)


# ============================================
# DONORS
# ============================================
@api_view(['GET'])
@permission_classes([AllowAny])
def donor_directory(request):
    """Public list of verified donors (?bloodGroup=&availableOnly=true&search=)"""
    queryset = registry.list_donors(
        blood_group=request.query_params.get('bloodGroup'),
        available_only=_flag(request.query_params.get('availableOnly'), False),
        search=request.query_params.get('search'),
    )
    return Response(PublicDonorSerializer(queryset, many=True).data)


@api_view(['GET', 'POST', 'PUT'])
@role_required()
def donor_profile(request, identity):
    if request.method == 'GET':
        profile = registry.get_profile(identity)
        return Response(DonorSerializer(profile).data)

    create = request.method == 'POST'
    profile = registry.upsert_profile(identity, request.data, create=create)
    return Response(
        DonorSerializer(profile).data,
        status=status.HTTP_201_CREATED if create else status.HTTP_200_OK,
    )


# ============================================
# DONOR NOTIFICATIONS
# ============================================
@api_view(['GET'])
@role_required()
def donor_notifications(request, identity):
    """Viewing the list marks unread notifications read unless ?markRead=false"""
    queryset = donor_ledger.list_donor_notifications(
        identity,
        status=request.query_params.get('status'),
        mark_read=_flag(request.query_params.get('markRead'), True),
    )
    return Response({'notifications': DonorNotificationSerializer(queryset, many=True).data})


@api_view(['POST'])
@role_required()
def accept_blood_request(request, notification_id, identity):
    notification, blood_request, _ = acceptance.accept_request(identity, notification_id)
    return Response({
        'success': True,
        'notification': DonorNotificationSerializer(notification).data,
        'request': BloodRequestSerializer(blood_request).data,
    })


# ============================================
# REQUESTER NOTIFICATIONS
# ============================================
@api_view(['GET', 'PATCH'])
@role_required()
def requester_notifications(request, identity):
    """
    GET:   notifications about accepted requests plus the unread count
    PATCH: {"notificationId": id} or {"markAllAsRead": true}
    """
    if request.method == 'GET':
        queryset, unread_count = requester_ledger.list_requester_notifications(identity)
        return Response({
            'notifications': RequesterNotificationSerializer(queryset, many=True).data,
            'unread_count': unread_count,
        })

    if _flag(request.data.get('markAllAsRead'), False):
        updated = requester_ledger.mark_all_requester_notifications_read(identity)
        return Response({'success': True, 'updated': updated})

    notification_id = request.data.get('notificationId')
    if notification_id in (None, ''):
        raise ValidationError('notificationId is required')
    try:
        notification_id = int(notification_id)
    except (TypeError, ValueError):
        raise ValidationError('notificationId must be an integer')

    notification = requester_ledger.mark_requester_notification_read(identity, notification_id)
    return Response({
        'success': True,
        'notification': RequesterNotificationSerializer(notification).data,
    })
