from functools import wraps

from accounts.identity import Identity


def role_required(*allowed_roles):
    """
    Role-based decorator for DRF function views.

    Resolves the caller's ``Identity`` and hands it to the view as the
    ``identity`` keyword argument. Raises ``AuthError`` (401) for anonymous
    callers and ``ForbiddenError`` (403) for roles outside ``allowed_roles``.
    With no roles given any authenticated caller is accepted.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            identity = Identity.from_user(getattr(request, 'user', None))

            if allowed_roles:
                identity.require_role(*allowed_roles)

            kwargs['identity'] = identity
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator
