# donorlink/exceptions.py
"""
Error taxonomy shared by the registry, request store, matching engine and
acceptance coordinator.

Every error is a DRF ``APIException`` so the API layer can render it straight
into an ``{"error": ...}`` response with the right status code.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class DonorLinkError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'error'


class ValidationError(DonorLinkError):
    """Malformed or missing input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid'

    @classmethod
    def from_serializer(cls, errors):
        """Collapse DRF serializer errors into a single readable message."""
        for field, messages in errors.items():
            message = messages[0] if isinstance(messages, list) and messages else messages
            if field == 'non_field_errors':
                return cls(str(message))
            return cls(f"{field}: {message}")
        return cls()


class AuthError(DonorLinkError):
    """No identity attached to the call."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Unauthorized'
    default_code = 'not_authenticated'


class ForbiddenError(AuthError):
    """Identity present but the role is not allowed."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied'
    default_code = 'permission_denied'


class NotFoundError(DonorLinkError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class ConflictError(DonorLinkError):
    """The operation is not allowed in the entity's current state."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict'
    default_code = 'conflict'


class AlreadyAcceptedError(ConflictError):
    """Another donor has already been recorded against the blood request."""
    default_detail = 'Request already accepted by another donor'
    default_code = 'already_accepted'


class DependencyError(DonorLinkError):
    """Storage or external service failure. Detail is never shown to callers."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'dependency_error'
