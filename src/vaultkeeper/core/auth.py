"""
Credential primitives: bcrypt password hashing and HS256 JWT issuance/validation.

Access and refresh tokens are signed with distinct secrets, so a refresh
token never validates as an access token and vice versa.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

import bcrypt
import jwt

from .exceptions import (
    HashingFailure,
    InvalidTokenSignature,
    MalformedToken,
    PasswordTooLong,
    TokenExpired,
    TokenGenerationFailure,
    UnexpectedSigningMethod,
)

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
TOKEN_ISSUER = "vaultkeeper"

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise PasswordTooLong()
    return encoded


def hash_password(password: str, cost: int) -> str:
    """
    Hash a password with bcrypt at the given work factor.

    Raises:
        PasswordTooLong: UTF-8 encoding exceeds 72 bytes
        HashingFailure: bcrypt rejected the input (e.g. cost out of range)
    """
    encoded = _password_bytes(password)
    try:
        hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=cost))
    except (ValueError, TypeError) as e:
        raise HashingFailure(f"error hashing password: {e}") from e
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Constant-time bcrypt comparison. A malformed stored hash never matches.

    Raises:
        PasswordTooLong: UTF-8 encoding exceeds 72 bytes
    """
    encoded = _password_bytes(password)
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    username: str
    expires_at: datetime
    issuer: str


class TokenService:
    """
    Issues and verifies signed, time-bound tokens.

    Claims carried: userID, userName, exp, iss.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=30),
    ):
        self._secrets = {
            TokenKind.ACCESS: access_secret,
            TokenKind.REFRESH: refresh_secret,
        }
        self._ttls = {
            TokenKind.ACCESS: access_ttl,
            TokenKind.REFRESH: refresh_ttl,
        }

    def ttl(self, kind: TokenKind) -> timedelta:
        return self._ttls[kind]

    def issue(self, user_id: int, username: str, kind: TokenKind) -> str:
        """
        Sign a token for the user.

        Raises:
            TokenGenerationFailure: If the secret is empty or signing fails
        """
        secret = self._secrets[kind]
        if not secret:
            raise TokenGenerationFailure("secret key cannot be empty")

        payload = {
            "userID": int(user_id),
            "userName": username,
            "exp": datetime.now(timezone.utc) + self._ttls[kind],
            "iss": TOKEN_ISSUER,
        }
        try:
            return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise TokenGenerationFailure(f"jwt generation error: {e}") from e

    def verify(self, token: str, kind: TokenKind = TokenKind.ACCESS) -> TokenClaims:
        """
        Validate signature, algorithm and expiry of a token.

        Raises:
            UnexpectedSigningMethod: Header alg is not HS256
            InvalidTokenSignature: Signature does not match the secret
            TokenExpired: exp is in the past
            MalformedToken: Anything else (bad encoding, missing claims)
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[TOKEN_ALGORITHM],
                issuer=TOKEN_ISSUER,
                options={"require": ["exp", "iss"]},
            )
        except jwt.InvalidAlgorithmError as e:
            raise UnexpectedSigningMethod(str(e)) from e
        except jwt.InvalidSignatureError as e:
            raise InvalidTokenSignature(str(e)) from e
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise MalformedToken(str(e)) from e

        try:
            user_id = int(payload["userID"])
            username = str(payload["userName"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedToken(f"missing identity claims: {e}") from e

        return TokenClaims(
            user_id=user_id,
            username=username,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            issuer=payload["iss"],
        )
