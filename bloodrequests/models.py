# bloodrequests/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from donors.models import BLOOD_GROUP_CHOICES


class BloodRequest(models.Model):
    URGENT = 'URGENT'
    MODERATE = 'MODERATE'
    NORMAL = 'NORMAL'

    URGENCY_CHOICES = [
        (URGENT, 'Urgent'),
        (MODERATE, 'Moderate'),
        (NORMAL, 'Normal'),
    ]

    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'
    FULFILLED = 'FULFILLED'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
        (FULFILLED, 'Fulfilled'),
    ]

    # Requester identity and contact
    requester_email = models.EmailField(db_index=True)
    requester_name = models.CharField(max_length=200)
    requester_phone = models.CharField(max_length=20)

    blood_group = models.CharField(max_length=12, choices=BLOOD_GROUP_CHOICES)
    urgency = models.CharField(max_length=10, choices=URGENCY_CHOICES, default=NORMAL)
    location = models.CharField(max_length=255)

    hospital_name = models.CharField(max_length=200, blank=True)
    patient_name = models.CharField(max_length=200, blank=True)
    units_needed = models.PositiveIntegerField(default=1)
    additional_info = models.TextField(blank=True)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    moderator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='moderated_requests'
    )
    accepted_donor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='accepted_requests'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"#{self.pk} {self.get_blood_group_display()} ({self.status})"

    @property
    def is_open(self):
        return self.status == self.APPROVED and self.accepted_donor_id is None

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Blood Request'
        verbose_name_plural = 'Blood Requests'
        constraints = [
            # accepted_donor is set exactly when the request is fulfilled
            models.CheckConstraint(
                condition=(
                    Q(status='FULFILLED', accepted_donor__isnull=False)
                    | (~Q(status='FULFILLED') & Q(accepted_donor__isnull=True))
                ),
                name='accepted_donor_iff_fulfilled',
            ),
        ]


class RequesterNotification(models.Model):
    """Tells a requester which donor accepted their blood request."""
    UNREAD = 'UNREAD'
    READ = 'READ'

    STATUS_CHOICES = [
        (UNREAD, 'Unread'),
        (READ, 'Read'),
    ]

    requester_email = models.EmailField(db_index=True)
    blood_request = models.OneToOneField(
        BloodRequest,
        on_delete=models.CASCADE,
        related_name='requester_notification'
    )
    donor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='requester_notifications_sent'
    )

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=UNREAD)
    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.requester_email} ← {self.donor.email} | Request #{self.blood_request_id}"

    class Meta:
        ordering = ['-created_at']
