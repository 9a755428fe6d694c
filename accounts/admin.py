from django.contrib import admin
from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'is_verified', 'is_staff')
    search_fields = ('email', 'name', 'username')
    list_filter = ('role', 'is_verified', 'is_staff')

    actions = ['mark_verified']

    @admin.action(description='Mark selected users as verified')
    def mark_verified(self, request, queryset):
        updated = queryset.update(is_verified=True)
        self.message_user(request, f'{updated} user(s) marked as verified.')
