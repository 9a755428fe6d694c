# donors/management/commands/refresh_eligibility.py
"""
Re-enable donors whose donation cooldown has elapsed.
Usage: python manage.py refresh_eligibility
"""
from django.core.management.base import BaseCommand

from donors.registry import refresh_eligibility


class Command(BaseCommand):
    help = 'Mark donors available again once their donation cooldown has elapsed'

    def handle(self, *args, **options):
        updated = refresh_eligibility()
        self.stdout.write(self.style.SUCCESS(f'{updated} donor(s) marked available again.'))
