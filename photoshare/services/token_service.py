"""
Photoshare Backend - Token Service
===================================

What:  Issues and verifies stateless bearer tokens.
How:   HS256 JWTs (python-jose) carrying the user ID in `sub` and an `exp`
       claim TOKEN_TTL_DAYS after issuance, signed with JWT_SECRET.
Who:   UserService.login issues; the authorization guard verifies.

There is no server-side session table: a token stays valid until it expires.
Rotating JWT_SECRET invalidates every outstanding token.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from photoshare.config import settings
from photoshare.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


class TokenService:
    """
    Signs and validates bearer tokens.

    Args:
        secret:        HMAC key. Defaults to settings.jwt_secret.
        algorithm:     JWS algorithm. Defaults to settings.jwt_algorithm.
        expires_delta: Token lifetime. Defaults to settings.token_ttl_days.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
    ):
        self.secret = secret if secret is not None else settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expires_delta = (
            expires_delta
            if expires_delta is not None
            else timedelta(days=settings.token_ttl_days)
        )

    def issue(self, user_id: uuid.UUID) -> str:
        """Return a signed token for `user_id`."""
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> uuid.UUID:
        """
        Validate `token` and return the user ID it was issued for.

        Raises:
            InvalidTokenError: token missing, malformed, expired, signed with a
                different key, or carrying no usable subject.
        """
        if not token:
            raise InvalidTokenError(message="Missing token")

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise InvalidTokenError(message="Token has expired")
        except JWTError as e:
            logger.debug("Token rejected: %s", str(e))
            raise InvalidTokenError()

        subject = payload.get("sub")
        if not subject:
            raise InvalidTokenError(message="Invalid token payload")
        try:
            return uuid.UUID(str(subject))
        except ValueError:
            raise InvalidTokenError(message="Invalid token payload")


token_service = TokenService()
