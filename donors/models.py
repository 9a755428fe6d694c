from django.conf import settings
from django.db import models
from django.utils import timezone

from algorithms.eligibility import days_until_eligible


BLOOD_GROUP_CHOICES = [
    ('A_POSITIVE', 'A+'), ('A_NEGATIVE', 'A-'),
    ('B_POSITIVE', 'B+'), ('B_NEGATIVE', 'B-'),
    ('AB_POSITIVE', 'AB+'), ('AB_NEGATIVE', 'AB-'),
    ('O_POSITIVE', 'O+'), ('O_NEGATIVE', 'O-'),
]

BLOOD_GROUPS = [value for value, _ in BLOOD_GROUP_CHOICES]


# ---------------------------
# Donor Profile
# ---------------------------
class DonorProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='donor_profile'
    )

    blood_group = models.CharField(max_length=12, choices=BLOOD_GROUP_CHOICES, db_index=True)
    phone_number = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    current_district = models.CharField(max_length=100, blank=True)

    # Campus details
    student_id = models.CharField(max_length=50, blank=True)
    department = models.CharField(max_length=100, blank=True)
    academic_session = models.CharField(max_length=20, blank=True)

    profile_picture = models.URLField(max_length=500, blank=True)

    # Donation tracking
    donation_count = models.PositiveIntegerField(default=0)
    last_donation_date = models.DateField(null=True, blank=True)
    is_available = models.BooleanField(default=True)
    # True when is_available was written explicitly and the sweep must not touch it
    availability_override = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def days_until_eligible(self) -> int:
        return days_until_eligible(
            self.last_donation_date, timezone.localdate(), cooldown_days=settings.DONATION_COOLDOWN_DAYS
        )

    def __str__(self):
        return f"{self.user.email} ({self.get_blood_group_display()})"

    class Meta:
        verbose_name = "Donor Profile"
        verbose_name_plural = "Donor Profiles"
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['blood_group', 'is_available'], name='donor_group_available_idx'),
        ]


class DonorNotification(models.Model):
    UNREAD = 'UNREAD'
    READ = 'READ'
    CLOSED = 'CLOSED'

    STATUS_CHOICES = [
        (UNREAD, 'Unread'),
        (READ, 'Read'),
        (CLOSED, 'Closed'),
    ]

    donor = models.ForeignKey(
        DonorProfile,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    blood_request = models.ForeignKey(
        'bloodrequests.BloodRequest',
        on_delete=models.CASCADE,
        related_name='donor_notifications'
    )

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=UNREAD)
    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Notification → {self.donor.user.email} | Request #{self.blood_request_id} ({self.status})"

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['donor', 'blood_request'], name='unique_donor_notification_per_request'),
        ]
        indexes = [
            models.Index(fields=['blood_request', 'status'], name='donornotif_request_status_idx'),
            models.Index(fields=['donor', '-created_at'], name='donornotif_donor_created_idx'),
        ]
