# api/urls.py
from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from . import views

app_name = 'api'

urlpatterns = [
    # Identity
    path('auth/token/', TokenObtainPairView.as_view(), name='token-obtain'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),

    # Blood requests
    path('blood-requests/', views.blood_requests, name='blood-requests'),
    path('blood-requests/<int:request_id>/', views.blood_request_detail, name='blood-request-detail'),
    path('blood-requests/<int:request_id>/decision/', views.decide_blood_request, name='blood-request-decision'),

    # Donors
    path('donors/', views.donor_directory, name='donor-directory'),
    path('donor/profile/', views.donor_profile, name='donor-profile'),
    path('donor/notifications/', views.donor_notifications, name='donor-notifications'),
    path('donor/notifications/<int:notification_id>/accept/', views.accept_blood_request, name='accept-blood-request'),

    # Requesters
    path('requester/notifications/', views.requester_notifications, name='requester-notifications'),
]

# Available endpoints:
# POST      /api/auth/token/                                  - Obtain JWT (role, is_verified claims)
# POST      /api/auth/token/refresh/                          - Refresh JWT
# GET/POST  /api/blood-requests/                              - List / create requests
# GET       /api/blood-requests/{id}/                         - Get a request
# POST      /api/blood-requests/{id}/decision/                - Approve / reject (moderator, admin)
# GET       /api/donors/                                      - Public verified donor directory
# GET/POST/PUT /api/donor/profile/                            - Own donor profile
# GET       /api/donor/notifications/                         - Own donor notifications
# POST      /api/donor/notifications/{id}/accept/             - Accept a blood request
# GET/PATCH /api/requester/notifications/                     - Requester notifications
