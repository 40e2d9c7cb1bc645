# Vault - Record Services
#
# Per-field envelope encryption for the four record types:
#   Card           number, cvv, exp_date, card_holder_name   (bank_name plaintext)
#   LoginPassword  username, password                        (app_name plaintext)
#   Note           title, text_data
#   BinaryData     title (text), data (bytes)
#
# Every sensitive field is encrypted on its own with a fresh nonce before it
# reaches the repository, and decrypted after it leaves. The secret phrase
# is a parameter of every call; nothing is cached between requests.

import dataclasses
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from ..core.audit_log import AuditLogger, EventSeverity, EventType, get_audit_logger
from ..core.auth import TokenService
from ..core.exceptions import CryptoError, EmptyUpdate
from .encryption import EncryptionService
from .models import DecryptedBatch
from .user_service import UserService

logger = logging.getLogger(__name__)


class EncryptedRecordService:
    """
    Shared create/update/list logic for a record type.

    Subclasses declare which fields are stored as plaintext, which are
    encrypted text and which are encrypted bytes.

    Repository contract:
        create(record) -> int                       (new record id)
        update(record_id, user_id, changes) -> None (RecordNotFound on 0 rows)
        get_all_by_user(user_id) -> list of records (ciphertext)
    """

    record_type = "record"
    plain_fields: Tuple[str, ...] = ()
    text_fields: Tuple[str, ...] = ()
    binary_fields: Tuple[str, ...] = ()

    def __init__(
        self,
        repository,
        encryption: EncryptionService = EncryptionService(),
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.repository = repository
        self.encryption = encryption
        self.audit = audit_logger or get_audit_logger()

    @property
    def sensitive_fields(self) -> Tuple[str, ...]:
        return self.text_fields + self.binary_fields

    @property
    def updatable_fields(self) -> Tuple[str, ...]:
        return self.plain_fields + self.sensitive_fields

    def _encrypt_values(self, values: Dict[str, Any], key: str) -> Dict[str, Any]:
        """Encrypt sensitive entries of a field mapping, one call per field."""
        encrypted = {}
        for name, value in values.items():
            if name in self.text_fields:
                encrypted[name] = self.encryption.encrypt(value, key)
            elif name in self.binary_fields:
                encrypted[name] = self.encryption.encrypt_binary(value, key)
            else:
                encrypted[name] = value
        return encrypted

    def decrypt_record(self, record, key: str):
        """
        Return a plaintext copy of a stored record.

        Raises:
            CryptoError: If any sensitive field fails to decrypt
        """
        values = {}
        for name in self.text_fields:
            values[name] = self.encryption.decrypt(getattr(record, name), key)
        for name in self.binary_fields:
            values[name] = self.encryption.decrypt_binary(getattr(record, name), key)
        return dataclasses.replace(record, **values)

    async def create(self, record, key: str) -> int:
        """
        Encrypt the sensitive fields of a record and store it.

        Any encryption or storage failure aborts the whole operation.

        Returns:
            ID of the stored record
        """
        sensitive = {name: getattr(record, name) for name in self.sensitive_fields}
        encrypted = dataclasses.replace(record, **self._encrypt_values(sensitive, key))

        record_id = await self.repository.create(encrypted)

        self.audit.log_record_event(
            EventType.RECORD_CREATED,
            self.record_type,
            record.user_id,
            details={"record_id": record_id},
        )
        return record_id

    async def update(
        self,
        record_id: int,
        user_id: int,
        changes: Dict[str, Any],
        key: str,
    ) -> None:
        """
        Encrypt and apply a partial update to one of the user's records.

        Args:
            record_id: Record to update
            user_id: Owner; records of other users are never touched
            changes: Field name -> new plaintext value. None values are ignored.
            key: Secret phrase

        Raises:
            ValueError: If changes name a field this record type does not have
            EmptyUpdate: If nothing is left to change
            RecordNotFound: If no such record belongs to the user
        """
        unknown = set(changes) - set(self.updatable_fields)
        if unknown:
            raise ValueError(f"unknown {self.record_type} fields: {sorted(unknown)}")

        changes = {name: value for name, value in changes.items() if value is not None}
        if not changes:
            raise EmptyUpdate(f"no {self.record_type} fields to update")

        await self.repository.update(record_id, user_id, self._encrypt_values(changes, key))

        self.audit.log_record_event(
            EventType.RECORD_UPDATED,
            self.record_type,
            user_id,
            details={"record_id": record_id, "fields": sorted(changes)},
        )

    async def get_all_with_report(self, user_id: int, key: str) -> DecryptedBatch:
        """
        Fetch and decrypt all of the user's records, best effort.

        A record that fails to decrypt (stale key, corrupted ciphertext) is
        dropped from the result and counted in `skipped`.
        """
        stored = await self.repository.get_all_by_user(user_id)

        batch = DecryptedBatch()
        skipped_ids = []
        for record in stored:
            try:
                batch.records.append(self.decrypt_record(record, key))
            except CryptoError as e:
                skipped_ids.append(record.id)
                logger.debug(f"Dropping {self.record_type} {record.id}: {type(e).__name__}")
        batch.skipped = len(skipped_ids)

        self.audit.log_record_event(
            EventType.RECORD_ACCESSED,
            self.record_type,
            user_id,
            details={"returned": len(batch.records)},
        )

        if skipped_ids:
            logger.warning(
                f"Skipped {len(skipped_ids)} of {len(stored)} {self.record_type} "
                f"records for user {user_id} (decryption failed)"
            )
            self.audit.log_record_event(
                EventType.RECORD_DECRYPT_SKIPPED,
                self.record_type,
                user_id,
                details={"record_ids": skipped_ids, "total": len(stored)},
                severity=EventSeverity.INVESTIGATE,
            )
        return batch

    async def get_all_by_user(self, user_id: int, key: str) -> List:
        """Decrypted records of the user; undecryptable ones are silently omitted."""
        batch = await self.get_all_with_report(user_id, key)
        return batch.records


class CardService(EncryptedRecordService):
    """Bank cards. The bank name stays readable; the card data does not."""

    record_type = "card"
    plain_fields = ("bank_name",)
    text_fields = ("number", "cvv", "exp_date", "card_holder_name")


class LoginPasswordService(EncryptedRecordService):
    """Login/password pairs keyed by application name."""

    record_type = "logopass"
    plain_fields = ("app_name",)
    text_fields = ("username", "password")


class NoteService(EncryptedRecordService):
    record_type = "note"
    text_fields = ("title", "text_data")


class BinaryService(EncryptedRecordService):
    """Arbitrary files. The payload is encrypted as raw bytes (no base64)."""

    record_type = "binary"
    text_fields = ("title",)
    binary_fields = ("data",)


@dataclass
class VaultServices:
    """Everything the HTTP layer needs, built once at startup."""
    tokens: TokenService
    users: UserService
    cards: CardService
    logopass: LoginPasswordService
    notes: NoteService
    binaries: BinaryService


def build_services(repos, settings, audit_logger: Optional[AuditLogger] = None) -> VaultServices:
    """
    Wire services over a repository factory.

    Args:
        repos: Object exposing users, cards, logopass, notes, binaries repositories
        settings: Settings (token secrets, TTLs, bcrypt cost)
        audit_logger: Audit logger shared by all services
    """
    audit = audit_logger or get_audit_logger()
    token_service = TokenService(
        access_secret=settings.access_secret,
        refresh_secret=settings.refresh_secret,
        access_ttl=timedelta(minutes=settings.access_ttl_minutes),
        refresh_ttl=timedelta(days=settings.refresh_ttl_days),
    )
    return VaultServices(
        tokens=token_service,
        users=UserService(
            repos.users,
            token_service,
            bcrypt_cost=settings.bcrypt_cost,
            audit_logger=audit,
        ),
        cards=CardService(repos.cards, audit_logger=audit),
        logopass=LoginPasswordService(repos.logopass, audit_logger=audit),
        notes=NoteService(repos.notes, audit_logger=audit),
        binaries=BinaryService(repos.binaries, audit_logger=audit),
    )
