from __future__ import annotations

from functools import wraps

from flask import g, request

from ..core.exceptions import AuthenticationError, AuthorizationError


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authentication required")
    return token.strip()


def build_guards(container):
    """Return (login_required, admin_required) decorators bound to the container.

    The authenticated employee is put on ``flask.g.employee``. Domain errors are
    raised and turned into JSON by the app-wide error handler.
    """

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.employee = container.auth_service.employee_for_token(_bearer_token())
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            employee = container.auth_service.employee_for_token(_bearer_token())
            # role comes from the stored employee, not from the token
            if not employee.is_admin:
                raise AuthorizationError("Admin access required")
            g.employee = employee
            return view(*args, **kwargs)

        return wrapper

    return login_required, admin_required
