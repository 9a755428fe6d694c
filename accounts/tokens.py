# accounts/tokens.py
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer


class DonorLinkTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Embeds the identity claims the API relies on into the access token."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['role'] = user.role
        token['is_verified'] = user.is_verified
        return token
