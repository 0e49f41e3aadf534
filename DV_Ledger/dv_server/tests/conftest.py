import base64
import os

import fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from DV_Ledger.dv_shared.config import LedgerSettings
from DV_Ledger.dv_core.ledger import DataVaultLedger
from DV_Ledger.dv_server import runtime
from DV_Ledger.dv_server.api import app

ADMIN = "admin"


@pytest.fixture
def ledger():
    """Inject a fakeredis-backed ledger into the runtime so the API uses it."""
    client = fakeredis.FakeRedis()
    runtime.ledger = DataVaultLedger(client, LedgerSettings(system_owner=ADMIN))
    yield runtime.ledger
    runtime.ledger = None
    client.flushdb()
    client.close()


@pytest_asyncio.fixture
async def client(ledger):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def record_body():
    return {
        "content_hash": "h" * 64,
        "encrypted_blob_b64": base64.b64encode(os.urandom(64)).decode(),
        "category_tag": "genomics",
        "proof_signature": "p" * 64,
    }


def caller(account: str) -> dict:
    return {"X-Caller-Id": account}


@pytest.fixture
def as_caller():
    return caller


@pytest.fixture
def admin():
    return ADMIN
