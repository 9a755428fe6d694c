# bloodrequests/serializers.py
from rest_framework import serializers

from algorithms.contact import normalize_phone
from donors.models import BLOOD_GROUP_CHOICES
from .models import BloodRequest, RequesterNotification


class BloodRequestInputSerializer(serializers.Serializer):
    """Fields a requester submits when asking for blood."""
    requester_name = serializers.CharField(max_length=200)
    requester_phone = serializers.CharField(max_length=40)
    blood_group = serializers.ChoiceField(choices=BLOOD_GROUP_CHOICES)
    urgency = serializers.ChoiceField(choices=BloodRequest.URGENCY_CHOICES)
    location = serializers.CharField(max_length=255)

    hospital_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    patient_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    units_needed = serializers.IntegerField(min_value=1, required=False, default=1)
    additional_info = serializers.CharField(required=False, allow_blank=True)

    def validate_requester_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("This field may not be blank.")
        return value

    def validate_requester_phone(self, value):
        phone = normalize_phone(value)
        if phone is None:
            raise serializers.ValidationError("Enter a valid phone number (10-15 digits).")
        return phone

    def validate_location(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("This field may not be blank.")
        return value


class BloodRequestSerializer(serializers.ModelSerializer):
    blood_group_display = serializers.CharField(source='get_blood_group_display', read_only=True)
    moderator_name = serializers.SerializerMethodField()
    accepted_donor_name = serializers.SerializerMethodField()

    class Meta:
        model = BloodRequest
        fields = [
            'id',
            'requester_name',
            'requester_email',
            'requester_phone',
            'blood_group',
            'blood_group_display',
            'urgency',
            'location',
            'hospital_name',
            'patient_name',
            'units_needed',
            'additional_info',
            'status',
            'moderator',
            'moderator_name',
            'accepted_donor',
            'accepted_donor_name',
            'created_at',
            'updated_at',
            'approved_at',
            'accepted_at',
        ]

    def get_moderator_name(self, obj):
        return obj.moderator.display_name if obj.moderator else None

    def get_accepted_donor_name(self, obj):
        return obj.accepted_donor.display_name if obj.accepted_donor else None


class RequesterNotificationSerializer(serializers.ModelSerializer):
    blood_request = BloodRequestSerializer(read_only=True)
    donor = serializers.SerializerMethodField()

    class Meta:
        model = RequesterNotification
        fields = ['id', 'status', 'created_at', 'read_at', 'blood_request', 'donor']

    def get_donor(self, obj):
        """Contact details of the donor who accepted."""
        donor = obj.donor
        profile = getattr(donor, 'donor_profile', None)
        return {
            'id': donor.pk,
            'name': donor.display_name,
            'email': donor.email,
            'phone_number': profile.phone_number if profile else None,
            'blood_group': profile.blood_group if profile else None,
            'current_district': profile.current_district if profile else None,
            'profile_picture': profile.profile_picture if profile else None,
        }
