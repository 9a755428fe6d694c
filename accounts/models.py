from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    DONOR = 'DONOR'
    REQUESTER = 'REQUESTER'
    MODERATOR = 'MODERATOR'
    ADMIN = 'ADMIN'

    ROLE_CHOICES = (
        (DONOR, 'Donor'),
        (REQUESTER, 'Requester'),
        (MODERATOR, 'Moderator'),
        (ADMIN, 'Admin'),
    )

    # Roles allowed to review blood requests
    REVIEWER_ROLES = (MODERATOR, ADMIN)

    role = models.CharField(
        max_length=15,
        choices=ROLE_CHOICES,
        default=REQUESTER
    )
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150, blank=True)

    # Set by a moderator once the student identity has been checked
    is_verified = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.username} ({self.role})"

    @property
    def display_name(self):
        return self.name or self.get_full_name() or self.username
