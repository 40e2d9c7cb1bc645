# Vault Module - Encrypted Personal Records
#
# Per-field AES-256-GCM encryption keyed by the user's secret phrase
# Record services for cards, login/password pairs, notes and binary data
# Registration, login and token refresh

from .encryption import EncryptionService
from .services import (
    BinaryService,
    CardService,
    EncryptedRecordService,
    LoginPasswordService,
    NoteService,
    VaultServices,
    build_services,
)
from .user_service import UserService

__all__ = [
    "EncryptionService",
    "EncryptedRecordService",
    "CardService",
    "LoginPasswordService",
    "NoteService",
    "BinaryService",
    "UserService",
    "VaultServices",
    "build_services",
]
