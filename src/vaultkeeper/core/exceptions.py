"""
VaultKeeper Exception Classes
"""


class VaultError(Exception):
    """Base exception for vault operations"""
    pass


# ── Identity ────────────────────────────────────────────────────────

class IdentityError(VaultError):
    """Base exception for registration and login failures"""
    pass


class UserNotFound(IdentityError):
    """Raised when no user exists with the requested username"""

    def __init__(self, message: str = "user not found"):
        super().__init__(message)


class UserAlreadyExists(IdentityError):
    """Raised when registering a username that is already taken"""

    def __init__(self, message: str = "user already exists"):
        super().__init__(message)


class InvalidCredentials(IdentityError):
    """Raised when the password does not match the stored hash"""

    def __init__(self, message: str = "invalid login or password"):
        super().__init__(message)


class HashingFailure(IdentityError):
    """Raised when the password cannot be hashed"""
    pass


class PasswordTooLong(IdentityError):
    """Raised when a password exceeds bcrypt's 72-byte input limit"""

    def __init__(self, message: str = "password must not exceed 72 bytes"):
        super().__init__(message)


class TokenGenerationFailure(IdentityError):
    """Raised when a JWT cannot be signed"""
    pass


# ── Tokens ──────────────────────────────────────────────────────────

class TokenError(VaultError):
    """Base exception for rejected access/refresh tokens.

    Every subclass is reported to the client as plain "unauthorized";
    the subclass only tells the server log what went wrong.
    """
    reason = "invalid token"


class MissingToken(TokenError):
    reason = "missing token"


class UnexpectedSigningMethod(TokenError):
    reason = "unexpected signing method"


class InvalidTokenSignature(TokenError):
    reason = "signature verification failed"


class TokenExpired(TokenError):
    reason = "token expired"


class MalformedToken(TokenError):
    reason = "malformed token"


# ── Crypto ──────────────────────────────────────────────────────────

class CryptoError(VaultError):
    """Base exception for field encryption/decryption failures"""
    pass


class InvalidCiphertext(CryptoError):
    """Raised when a ciphertext token cannot be decoded or is shorter than a nonce"""
    pass


class AuthenticationFailed(CryptoError):
    """Raised when the GCM tag check fails (wrong key or corrupted data)"""
    pass


# ── Storage ─────────────────────────────────────────────────────────

class StorageError(VaultError):
    """Base exception for conditions the repositories report distinctly"""
    pass


class RecordNotFound(StorageError):
    """Raised when an update affected zero rows"""
    pass


class EmptyUpdate(VaultError):
    """Raised when an update carries no fields to change"""
    pass
