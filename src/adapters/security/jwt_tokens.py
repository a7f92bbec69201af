"""
JWT session token adapter - Implements TokenIssuer protocol.

Session tokens are HS256-signed JWTs verified on each request without a
server-side lookup. Claims: sub (user id), email, role, firstName,
lastName, iat, exp.
"""

from datetime import timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from src.domain.exceptions import DomainError
from src.domain.user import User, utcnow


class JoseTokenIssuer:
    """
    Implements TokenIssuer protocol via python-jose.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 15) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = timedelta(minutes=expires_minutes)
        self.expires_label = f"{expires_minutes}m"

    def issue(self, user: User) -> str:
        now = utcnow()
        claims = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature and expiry, returning the claims.

        Raises:
            DomainError(UNAUTHORIZED): Expired, tampered or malformed token
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise DomainError.unauthorized("Access token has expired") from e
        except JWTError as e:
            raise DomainError.unauthorized("Invalid access token") from e

        if "sub" not in claims:
            raise DomainError.unauthorized("Invalid access token")
        return claims
