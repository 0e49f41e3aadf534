import os

import fakeredis
import pytest

from DV_Ledger.dv_shared.config import LedgerSettings
from DV_Ledger.dv_core.ledger import DataVaultLedger

SYSTEM_OWNER = "admin"


@pytest.fixture
def ledger_client():
    r = fakeredis.FakeRedis()
    yield r
    r.flushdb()
    r.close()


@pytest.fixture
def settings():
    return LedgerSettings(system_owner=SYSTEM_OWNER)


@pytest.fixture
def ledger(ledger_client, settings):
    return DataVaultLedger(ledger_client, settings)


@pytest.fixture
def registry(ledger):
    return ledger.registry


@pytest.fixture
def records(ledger):
    return ledger.records


@pytest.fixture
def access(ledger):
    return ledger.access


@pytest.fixture
def balances(ledger):
    return ledger.balances


@pytest.fixture
def height(ledger):
    return ledger.height


@pytest.fixture
def admin():
    return SYSTEM_OWNER


@pytest.fixture
def sample_record():
    return {
        "content_hash": "h" * 64,
        "encrypted_blob": os.urandom(128),
        "category_tag": "medical",
        "proof_signature": "p" * 64,
    }


@pytest.fixture
def alice_vault(ledger):
    """Alice owns a vault priced at 100 with one stored record."""
    ledger.create_storage("alice", 100)
    ledger.store_encrypted_data("alice", "h" * 64, b"blob", "cat", "p" * 64)
    return "alice"


@pytest.fixture
def funded_bob(ledger, admin):
    ledger.mint(admin, "bob", 1_000)
    return "bob"
