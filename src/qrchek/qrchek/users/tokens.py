from __future__ import annotations

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.exceptions import AuthenticationError


class TokenService:
    """Signs and checks the bearer token the mobile client sends back."""

    def __init__(self, secret_key: str, *, max_age_seconds: int):
        self._serializer = URLSafeTimedSerializer(secret_key, salt="qrchek-auth")
        self._max_age = int(max_age_seconds)

    def issue(self, employee_id: int) -> str:
        return self._serializer.dumps({"id": int(employee_id)})

    def verify(self, token: str) -> int:
        try:
            payload = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired as e:
            raise AuthenticationError("Invalid or expired token") from e
        except BadSignature as e:
            raise AuthenticationError("Invalid or expired token") from e

        try:
            return int(payload["id"])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationError("Invalid or expired token") from e
