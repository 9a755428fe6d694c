# donors/management/commands/import_donors.py
"""
Django management command to import donors from a CSV or Excel sheet
Usage: python manage.py import_donors path/to/donors.xlsx [--verified]
"""
from pathlib import Path

import pandas as pd
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.identity import Identity
from donorlink.exceptions import DonorLinkError
from donors.models import BLOOD_GROUP_CHOICES, DonorProfile
from donors.registry import create_profile, update_profile

User = get_user_model()

# Sheets usually carry the short labels (A+, O-); the registry stores the long codes
BLOOD_GROUP_BY_LABEL = {label: value for value, label in BLOOD_GROUP_CHOICES}

PROFILE_COLUMNS = [
    'phone_number', 'address', 'current_district', 'student_id',
    'department', 'academic_session', 'last_donation_date',
]


def _cell(row, column):
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class Command(BaseCommand):
    help = 'Import donor accounts and profiles from a CSV or Excel file'

    def add_arguments(self, parser):
        parser.add_argument('path', type=str, help='Path to the .csv or .xlsx file')
        parser.add_argument(
            '--verified',
            action='store_true',
            help='Mark newly created accounts as verified',
        )

    def read_sheet(self, path):
        if not path.exists():
            raise CommandError(f'File not found: {path}')
        if path.suffix.lower() == '.csv':
            return pd.read_csv(path, dtype=str)
        return pd.read_excel(path, dtype=str)

    def handle(self, *args, **options):
        path = Path(options['path'])
        self.stdout.write(self.style.WARNING(f'Starting import from {path}...'))

        df = self.read_sheet(path)
        self.stdout.write(f'Found {len(df)} rows in file')

        # Rows without an email cannot own an account
        df = df.dropna(subset=['email'])

        created_count = 0
        updated_count = 0
        skipped_count = 0

        for index, row in df.iterrows():
            line = index + 2
            email = _cell(row, 'email').lower()

            raw_group = _cell(row, 'blood_group') or ''
            blood_group = BLOOD_GROUP_BY_LABEL.get(raw_group.upper(), raw_group.upper())

            attrs = {'blood_group': blood_group}
            for column in PROFILE_COLUMNS:
                value = _cell(row, column)
                if value is not None:
                    attrs[column] = str(value)

            try:
                with transaction.atomic():
                    user, user_created = User.objects.get_or_create(
                        email=email,
                        defaults={
                            'username': email,
                            'name': _cell(row, 'name') or '',
                            'role': User.DONOR,
                            'is_verified': options['verified'],
                        }
                    )
                    if user_created:
                        # Donors set their own password through the reset flow
                        user.set_unusable_password()
                        user.save(update_fields=['password'])

                    identity = Identity.from_user(user)
                    if DonorProfile.objects.filter(user=user).exists():
                        update_profile(identity, attrs)
                        updated_count += 1
                        self.stdout.write(f'↻ Updated: {email} ({blood_group})')
                    else:
                        create_profile(identity, attrs)
                        created_count += 1
                        self.stdout.write(f'✓ Created: {email} ({blood_group})')
            except DonorLinkError as e:
                skipped_count += 1
                self.stdout.write(self.style.ERROR(f'✗ Skipping row {line}: {e.detail}'))

        self.stdout.write(
            self.style.SUCCESS(
                f'Import complete! Created: {created_count}, '
                f'Updated: {updated_count}, Skipped: {skipped_count}'
            )
        )
