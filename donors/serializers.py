# donors/serializers.py
from rest_framework import serializers

from algorithms.contact import normalize_phone
from bloodrequests.serializers import BloodRequestSerializer
from .models import BLOOD_GROUP_CHOICES, DonorProfile, DonorNotification


class DonorProfileInputSerializer(serializers.Serializer):
    """Validates the attributes a donor may write on their own profile."""
    blood_group = serializers.ChoiceField(choices=BLOOD_GROUP_CHOICES)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    current_district = serializers.CharField(max_length=100, required=False, allow_blank=True)
    student_id = serializers.CharField(max_length=50, required=False, allow_blank=True)
    department = serializers.CharField(max_length=100, required=False, allow_blank=True)
    academic_session = serializers.CharField(max_length=20, required=False, allow_blank=True)
    profile_picture = serializers.URLField(max_length=500, required=False, allow_blank=True)
    last_donation_date = serializers.DateField(required=False, allow_null=True)
    is_available = serializers.BooleanField(required=False)

    def validate_phone_number(self, value):
        if not value:
            return value
        phone = normalize_phone(value)
        if phone is None:
            raise serializers.ValidationError("Enter a valid phone number (10-15 digits).")
        return phone


class DonorSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)
    name = serializers.CharField(source='user.display_name', read_only=True)
    is_verified = serializers.BooleanField(source='user.is_verified', read_only=True)
    blood_group_display = serializers.CharField(source='get_blood_group_display', read_only=True)

    class Meta:
        model = DonorProfile
        fields = [
            'id', 'name', 'email', 'is_verified',
            'blood_group', 'blood_group_display', 'phone_number', 'address',
            'current_district', 'student_id', 'department', 'academic_session',
            'profile_picture', 'donation_count', 'last_donation_date',
            'is_available', 'availability_override', 'days_until_eligible',
            'created_at', 'updated_at',
        ]


class PublicDonorSerializer(serializers.ModelSerializer):
    """Directory view of a verified donor."""
    name = serializers.CharField(source='user.display_name', read_only=True)
    blood_group_display = serializers.CharField(source='get_blood_group_display', read_only=True)

    class Meta:
        model = DonorProfile
        fields = [
            'id', 'name', 'blood_group', 'blood_group_display', 'current_district',
            'department', 'profile_picture', 'is_available', 'last_donation_date',
        ]


class DonorNotificationSerializer(serializers.ModelSerializer):
    blood_request = BloodRequestSerializer(read_only=True)

    class Meta:
        model = DonorNotification
        fields = ['id', 'status', 'created_at', 'read_at', 'accepted_at', 'blood_request']
