# API Errors - Domain exception -> HTTP status
#
#   UserNotFound, RecordNotFound           404
#   InvalidCredentials, TokenError         401
#   UserAlreadyExists                      409
#   EmptyUpdate, PasswordTooLong           400
#   anything else (hashing, signing, crypto, storage)  500

import logging

from fastapi import HTTPException, status

from ..core.exceptions import (
    EmptyUpdate,
    InvalidCredentials,
    PasswordTooLong,
    RecordNotFound,
    TokenError,
    UserAlreadyExists,
    UserNotFound,
    VaultError,
)

logger = logging.getLogger(__name__)

_STATUS_MAP = (
    (UserNotFound, status.HTTP_404_NOT_FOUND),
    (RecordNotFound, status.HTTP_404_NOT_FOUND),
    (InvalidCredentials, status.HTTP_401_UNAUTHORIZED),
    (UserAlreadyExists, status.HTTP_409_CONFLICT),
    (EmptyUpdate, status.HTTP_400_BAD_REQUEST),
    (PasswordTooLong, status.HTTP_400_BAD_REQUEST),
)


def http_error(exc: VaultError) -> HTTPException:
    """Translate a domain exception for the client."""
    if isinstance(exc, TokenError):
        return HTTPException(status.HTTP_401_UNAUTHORIZED, "unauthorized")

    for exc_type, code in _STATUS_MAP:
        if isinstance(exc, exc_type):
            return HTTPException(code, str(exc))

    # Internal failures: keep details server-side
    logger.error(f"Request failed: {type(exc).__name__}: {exc}")
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")
