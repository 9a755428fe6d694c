# accounts/identity.py
"""
Caller identity passed explicitly into every request store, registry and
acceptance call, so the core logic never reads the logged-in user from
ambient state.
"""
from dataclasses import dataclass

from accounts.models import CustomUser
from donorlink.exceptions import AuthError, ForbiddenError


@dataclass(frozen=True)
class Identity:
    user_id: int
    email: str
    role: str
    is_verified: bool = False

    @classmethod
    def from_user(cls, user):
        """Build an identity from an authenticated Django user."""
        if user is None or not user.is_authenticated:
            raise AuthError()
        return cls(
            user_id=user.pk,
            email=user.email,
            role=user.role,
            is_verified=user.is_verified,
        )

    @property
    def is_reviewer(self) -> bool:
        return self.role in CustomUser.REVIEWER_ROLES

    def require_role(self, *roles):
        if self.role not in roles:
            raise ForbiddenError()
