from typing import Optional

import redis

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.config import LedgerSettings
from DV_Ledger.dv_shared.log import get_logger
from DV_Ledger.dv_shared.types import EncryptedRecord
from DV_Ledger.dv_core import validation
from DV_Ledger.dv_core.registry import VaultRegistry
from DV_Ledger.dv_core.transaction import run_transaction

LOG = get_logger("records")


class RecordStore:
    def __init__(self, client: redis.Redis, settings: LedgerSettings, registry: VaultRegistry):
        self.db: redis.Redis = client
        self.settings = settings
        self.registry = registry

    def _record_key(self, owner: str, index: int) -> str:
        return f"{config.RECORD_KEY_PREFIX}:{owner}:{index}"

    def _validate_record_fields(
        self,
        content_hash: str,
        encrypted_blob: bytes,
        category_tag: str,
        proof_signature: str,
    ) -> None:
        validation.validate_fixed_text("content_hash", content_hash, config.CONTENT_HASH_LENGTH)
        validation.validate_fixed_text("proof_signature", proof_signature, config.PROOF_SIGNATURE_LENGTH)
        validation.validate_blob(encrypted_blob)
        validation.validate_bounded_text("category_tag", category_tag, config.MAX_TAG_LENGTH)

    def _serialize_record(self, record: EncryptedRecord) -> dict:
        return {
            "content_hash": record.content_hash,
            "encrypted_blob": bytes(record.encrypted_blob),
            "category_tag": record.category_tag,
            "is_accessible": "1" if record.is_accessible else "0",
            "proof_signature": record.proof_signature,
        }

    def _deserialize_record(self, data: dict[bytes, bytes]) -> EncryptedRecord:
        return EncryptedRecord(
            content_hash=data[b"content_hash"].decode(),
            encrypted_blob=data[b"encrypted_blob"],
            category_tag=data[b"category_tag"].decode(),
            is_accessible=data[b"is_accessible"] == b"1",
            proof_signature=data[b"proof_signature"].decode(),
        )

    def _read_record(self, conn, owner: str, index: int) -> Optional[EncryptedRecord]:
        data = conn.hgetall(self._record_key(owner, index))
        if not data:
            return None
        return self._deserialize_record(data)

    # ─── Write Operations ───

    def store_encrypted_data(
        self,
        caller: str,
        content_hash: str,
        encrypted_blob: bytes,
        category_tag: str,
        proof_signature: str,
    ) -> int:
        validation.validate_account(caller)
        vault_key = self.registry._vault_key(caller)

        def body(pipe) -> int:
            vault = self.registry._require_vault(pipe, caller)
            self._validate_record_fields(content_hash, encrypted_blob, category_tag, proof_signature)

            index = vault.total_entries + 1
            record = EncryptedRecord(
                content_hash=content_hash,
                encrypted_blob=bytes(encrypted_blob),
                category_tag=category_tag,
                is_accessible=True,
                proof_signature=proof_signature,
            )
            pipe.multi()
            pipe.hset(self._record_key(caller, index), mapping=self._serialize_record(record))
            pipe.hset(vault_key, "total_entries", str(index))
            pipe.hincrby(config.LEDGER_STATS_KEY, "records_stored", 1)
            return index

        index = run_transaction(self.db, "store_encrypted_data", body, vault_key)
        LOG.info("record_stored", owner=caller, index=index, category_tag=category_tag)
        return index

    def toggle_data_visibility(self, caller: str, index: int) -> bool:
        """Flip visibility of one of the caller's own records; returns the new flag."""
        validation.validate_account(caller)
        vault_key = self.registry._vault_key(caller)
        record_key = self._record_key(caller, index)

        def body(pipe) -> bool:
            vault = self.registry._require_vault(pipe, caller)
            validation.validate_index(index)
            if index > vault.total_entries:
                raise errors.RecordNotFoundError(caller, index)
            record = self._read_record(pipe, caller, index)
            if record is None:
                raise errors.RecordNotFoundError(caller, index)

            visible = not record.is_accessible
            pipe.multi()
            pipe.hset(record_key, "is_accessible", "1" if visible else "0")
            return visible

        visible = run_transaction(self.db, "toggle_data_visibility", body, vault_key, record_key)
        LOG.info("visibility_toggled", owner=caller, index=index, is_accessible=visible)
        return visible

    # ─── Query Operations ───

    def get_encrypted_record(self, owner: str, index: int) -> Optional[EncryptedRecord]:
        try:
            return self._read_record(self.db, owner, index)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("get_encrypted_record")

    def list_records(self, owner: str) -> list[tuple[int, EncryptedRecord]]:
        try:
            vault = self.registry._read_vault(self.db, owner)
            if vault is None or vault.total_entries == 0:
                return []

            indices = range(1, vault.total_entries + 1)
            pipe = self.db.pipeline(transaction=False)
            for index in indices:
                pipe.hgetall(self._record_key(owner, index))
            results = pipe.execute()

            return [
                (index, self._deserialize_record(data))
                for index, data in zip(indices, results)
                if data
            ]
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("list_records")
