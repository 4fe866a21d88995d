"""
Token Service
Issues and validates signed bearer tokens (JWT, HMAC).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt import PyJWTError

from app.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

# Claims carried from one token to its refreshed successor
IDENTITY_CLAIMS = ("id", "email", "role")
PROFILE_CLAIMS = ("firstName", "lastName", "profileImageUrl", "phoneNumber", "phoneCountryCode")


class TokenService:
    """
    Creates and verifies JWTs bound to one audience and issuer.

    Tokens are signed, not encrypted: never put secrets in the claims.
    """

    def __init__(
        self,
        secret: str,
        audience: str,
        issuer: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=30),
    ):
        self.secret = secret
        self.audience = audience
        self.issuer = issuer
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, claims: Dict[str, Any], ttl: Optional[timedelta] = None) -> str:
        """Create a new token. `claims` must at least hold id, email and role."""
        missing = [name for name in IDENTITY_CLAIMS if not claims.get(name)]
        if missing:
            raise ValueError(f"Token claims missing: {', '.join(missing)}")

        now = datetime.now(timezone.utc)
        payload = {key: value for key, value in claims.items() if value is not None}
        payload.update({
            "iat": now,
            "nbf": now,
            "exp": now + (ttl or self.ttl),
            "aud": self.audience,
            "iss": self.issuer,
        })
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """Decode and validate a token; raises InvalidTokenError on any failure."""
        if not token:
            raise InvalidTokenError("Missing or invalid token")
        try:
            return jwt.decode(
                token,
                self.secret,
                # Pinned: a token claiming any other algorithm is rejected
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "nbf", "aud", "iss"]},
            )
        except PyJWTError as e:
            logger.info(f"Token rejected: {e.__class__.__name__}")
            raise InvalidTokenError("Missing or invalid token") from e

    def refresh(self, token: str) -> str:
        """
        Issue a fresh token for the identity in `token`.
        The old token stays valid until it expires.
        """
        decoded = self.verify(token)
        claims = {key: decoded[key] for key in IDENTITY_CLAIMS + PROFILE_CLAIMS if key in decoded}
        return self.issue(claims)

    @staticmethod
    def claims_for(user) -> Dict[str, Any]:
        """Token claims for a user DTO."""
        role = user.role.value if hasattr(user.role, "value") else user.role
        return {
            "id": user.id,
            "email": user.email,
            "role": role,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "profileImageUrl": user.profile_image_url,
            "phoneNumber": user.phone_number,
            "phoneCountryCode": user.phone_country_code,
        }
