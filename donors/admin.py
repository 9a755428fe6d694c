from django.contrib import admin

from .models import DonorProfile, DonorNotification
from .registry import refresh_eligibility


@admin.register(DonorProfile)
class DonorProfileAdmin(admin.ModelAdmin):
    list_display   = ['user', 'blood_group', 'current_district', 'donation_count', 'is_available', 'availability_override', 'last_donation_date']
    list_filter    = ['blood_group', 'is_available', 'availability_override', 'user__is_verified']
    search_fields  = ['user__email', 'user__name', 'phone_number', 'student_id']
    ordering       = ['-updated_at']
    readonly_fields = ['donation_count', 'created_at', 'updated_at']

    fieldsets = (
        ('Donor', {
            'fields': ('user', 'blood_group', 'phone_number', 'address', 'current_district')
        }),
        ('Campus', {
            'fields': ('student_id', 'department', 'academic_session', 'profile_picture'),
            'classes': ('collapse',),
        }),
        ('Availability', {
            'fields': ('donation_count', 'last_donation_date', 'is_available', 'availability_override')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    actions = ['refresh_donor_eligibility']

    @admin.action(description='Refresh eligibility (re-enable donors past the cooldown)')
    def refresh_donor_eligibility(self, request, queryset):
        updated = refresh_eligibility()
        self.message_user(request, f'{updated} donor(s) marked available again.')


@admin.register(DonorNotification)
class DonorNotificationAdmin(admin.ModelAdmin):
    list_display  = ['donor', 'blood_request', 'status', 'created_at', 'read_at', 'accepted_at']
    list_filter   = ['status']
    search_fields = ['donor__user__email', 'blood_request__location']
    ordering      = ['-created_at']
    readonly_fields = ['created_at', 'read_at', 'accepted_at']
