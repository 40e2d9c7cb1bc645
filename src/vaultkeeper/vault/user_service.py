# Vault - User Service
#
# Registration, login and token refresh. Register and login also hand back
# the user's secret phrase, derived from the stored bcrypt hash. The phrase
# is the encryption key for every record the user stores.

import asyncio
import logging
from typing import Optional

from ..core.audit_log import AuditLogger, EventSeverity, EventType, get_audit_logger
from ..core.auth import TokenKind, TokenService, hash_password, verify_password
from ..core.exceptions import InvalidCredentials, PasswordTooLong, UserAlreadyExists, UserNotFound
from .encryption import EncryptionService
from .models import AuthTokens, User

logger = logging.getLogger(__name__)


class UserService:
    """
    Identity operations backed by a user repository.

    Repository contract:
        create(username, password_hash) -> None  (UserAlreadyExists on duplicate)
        get_by_username(username) -> User        (UserNotFound if absent)
    """

    def __init__(
        self,
        user_repository,
        token_service: TokenService,
        encryption: EncryptionService = EncryptionService(),
        bcrypt_cost: int = 4,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.users = user_repository
        self.tokens = token_service
        self.encryption = encryption
        self.bcrypt_cost = bcrypt_cost
        self.audit = audit_logger or get_audit_logger()

    def _issue_tokens(self, user: User) -> AuthTokens:
        return AuthTokens(
            access_token=self.tokens.issue(user.id, user.username, TokenKind.ACCESS),
            refresh_token=self.tokens.issue(user.id, user.username, TokenKind.REFRESH),
            secret_phrase=self.encryption.generate_secret_phrase(user.password_hash),
        )

    async def register(self, username: str, password: str) -> AuthTokens:
        """
        Create a user and sign them in.

        The phrase returned here equals the one every later login returns,
        because both derive from the same stored hash.

        Raises:
            UserAlreadyExists: Username is taken
            PasswordTooLong: Password exceeds 72 bytes
            HashingFailure: Password could not be hashed
            TokenGenerationFailure: Tokens could not be signed
        """
        # bcrypt is CPU bound; keep it off the event loop
        password_hash = await asyncio.to_thread(hash_password, password, self.bcrypt_cost)

        try:
            await self.users.create(username, password_hash)
        except UserAlreadyExists:
            self.audit.log_event(
                EventType.USER_REGISTER_FAILED,
                EventSeverity.INFO,
                "Registration rejected: username taken",
                user_context={"username": username},
            )
            raise

        user = await self.users.get_by_username(username)
        tokens = self._issue_tokens(user)

        logger.info(f"Registered user {user.id}")
        self.audit.log_event(
            EventType.USER_REGISTERED,
            EventSeverity.INFO,
            "User registered",
            user_context={"user_id": user.id, "username": username},
        )
        return tokens

    async def login(self, username: str, password: str) -> AuthTokens:
        """
        Check credentials and issue fresh tokens plus the secret phrase.

        Raises:
            UserNotFound: No such username
            InvalidCredentials: Password does not match
            PasswordTooLong: Password exceeds 72 bytes
            TokenGenerationFailure: Tokens could not be signed
        """
        try:
            user = await self.users.get_by_username(username)
        except UserNotFound:
            self._log_failed_login(username, "unknown user")
            raise

        try:
            matches = await asyncio.to_thread(verify_password, password, user.password_hash)
        except PasswordTooLong:
            self._log_failed_login(username, "password too long")
            raise
        if not matches:
            self._log_failed_login(username, "bad password")
            raise InvalidCredentials()

        tokens = self._issue_tokens(user)
        self.audit.log_event(
            EventType.USER_LOGIN,
            EventSeverity.INFO,
            "User logged in",
            user_context={"user_id": user.id, "username": username},
        )
        return tokens

    async def refresh(self, refresh_token: str) -> AuthTokens:
        """
        Trade a valid refresh token for a new access token.

        The refresh token itself is returned unchanged and no secret phrase
        is included; the client keeps the phrase it already has.

        Raises:
            TokenError: Refresh token is missing, expired, or invalid
            TokenGenerationFailure: Access token could not be signed
        """
        claims = self.tokens.verify(refresh_token, TokenKind.REFRESH)
        access_token = self.tokens.issue(claims.user_id, claims.username, TokenKind.ACCESS)

        self.audit.log_event(
            EventType.TOKEN_REFRESHED,
            EventSeverity.INFO,
            "Access token refreshed",
            user_context={"user_id": claims.user_id, "username": claims.username},
        )
        return AuthTokens(access_token=access_token, refresh_token=refresh_token)

    def _log_failed_login(self, username: str, reason: str):
        logger.info(f"Login failed: {reason}")
        self.audit.log_event(
            EventType.USER_LOGIN_FAILED,
            EventSeverity.ALERT,
            f"Login failed: {reason}",
            user_context={"username": username},
        )
