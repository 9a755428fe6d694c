# bloodrequests/admin.py
from django.contrib import admin

from .models import BloodRequest, RequesterNotification


@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'requester_email', 'blood_group', 'urgency', 'status', 'accepted_donor', 'created_at']
    list_filter = ['status', 'blood_group', 'urgency']
    search_fields = ['requester_email', 'requester_name', 'patient_name', 'hospital_name', 'location']
    ordering = ['-created_at']
    # Status changes go through the API so matching and acceptance rules apply
    readonly_fields = ['status', 'moderator', 'accepted_donor', 'created_at', 'updated_at', 'approved_at', 'accepted_at']

    fieldsets = (
        ('Requester', {
            'fields': ('requester_name', 'requester_email', 'requester_phone')
        }),
        ('Request', {
            'fields': ('blood_group', 'urgency', 'location', 'hospital_name', 'patient_name', 'units_needed', 'additional_info')
        }),
        ('Lifecycle', {
            'fields': ('status', 'moderator', 'accepted_donor', 'approved_at', 'accepted_at')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )


@admin.register(RequesterNotification)
class RequesterNotificationAdmin(admin.ModelAdmin):
    list_display = ['requester_email', 'blood_request', 'donor', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['requester_email', 'donor__email']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'read_at']
