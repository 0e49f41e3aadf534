"""
FastAPI endpoints for the data-vault ledger.

The authenticated caller identity arrives in the X-Caller-Id header; the
host gateway is responsible for authenticating it. Encrypted blobs are
base64-encoded in HTTP transport and decoded to bytes before they reach
the ledger.
"""

import base64
import binascii
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from DV_Ledger.dv_server import runtime
from DV_Ledger.dv_shared.errors import (
    ConcurrencyError,
    InsufficientFundsError,
    LedgerError,
    LedgerUnavailableError,
)
from DV_Ledger.dv_shared.log import get_logger

LOG = get_logger("api")


# ── Pydantic request/response models ──


class HeightRequest(BaseModel):
    height: int


class MintRequest(BaseModel):
    account: str
    amount: int


class TransferRequest(BaseModel):
    recipient: str
    amount: int


class FeeRequest(BaseModel):
    fee: int


class StoreRecordRequest(BaseModel):
    content_hash: str
    encrypted_blob_b64: str
    category_tag: str
    proof_signature: str


class AccessRequest(BaseModel):
    owner: str
    index: int
    reason: str


class OkResponse(BaseModel):
    ok: bool = True


class HeightResponse(BaseModel):
    height: int


class BalanceResponse(BaseModel):
    account: str
    balance: int


class StoreRecordResponse(BaseModel):
    index: int


class VisibilityResponse(BaseModel):
    index: int
    is_accessible: bool


class VaultOut(BaseModel):
    creation_height: int
    total_entries: int
    access_price: int


class RecordOut(BaseModel):
    index: int
    content_hash: str
    encrypted_blob_b64: str
    category_tag: str
    is_accessible: bool
    proof_signature: str


class RecordListResponse(BaseModel):
    records: list[RecordOut] = Field(default_factory=list)


class InteractionOut(BaseModel):
    timestamp: int
    request_reason: str
    payment_amount: int


class StatsResponse(BaseModel):
    vaults_created: int
    records_stored: int
    access_requests: int
    total_paid: int


class HealthResponse(BaseModel):
    status: str
    ledger_connected: bool
    chain_height: int


# ── App lifecycle ──


@asynccontextmanager
async def lifespan(app: FastAPI):
    runtime.start()
    yield
    runtime.stop()


app = FastAPI(title="DV Ledger", version="1.0.0", lifespan=lifespan)


def _error_body(exc: Exception, code: int) -> dict:
    return {"error": type(exc).__name__, "code": code, "detail": str(exc)}


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    return JSONResponse(status_code=exc.code, content=_error_body(exc, exc.code))


async def insufficient_funds_handler(request: Request, exc: InsufficientFundsError) -> JSONResponse:
    return JSONResponse(status_code=402, content=_error_body(exc, exc.code))


async def concurrency_error_handler(request: Request, exc: ConcurrencyError) -> JSONResponse:
    return JSONResponse(status_code=409, content=_error_body(exc, 409))


async def unavailable_handler(request: Request, exc: LedgerUnavailableError) -> JSONResponse:
    LOG.error("ledger_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content=_error_body(exc, 503))


app.add_exception_handler(LedgerError, ledger_error_handler)
app.add_exception_handler(InsufficientFundsError, insufficient_funds_handler)
app.add_exception_handler(ConcurrencyError, concurrency_error_handler)
app.add_exception_handler(LedgerUnavailableError, unavailable_handler)


def _decode_blob(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422, detail="encrypted_blob_b64 is not valid base64")


def _record_out(index: int, record) -> RecordOut:
    return RecordOut(
        index=index,
        content_hash=record.content_hash,
        encrypted_blob_b64=base64.b64encode(record.encrypted_blob).decode(),
        category_tag=record.category_tag,
        is_accessible=record.is_accessible,
        proof_signature=record.proof_signature,
    )


# ── Admin ──


@app.post("/v1/admin/height", response_model=OkResponse)
def update_chain_height(req: HeightRequest, x_caller_id: str = Header(...)):
    runtime.get_ledger().update_chain_height(x_caller_id, req.height)
    return OkResponse()


@app.get("/v1/height", response_model=HeightResponse)
def get_chain_height():
    return HeightResponse(height=runtime.get_ledger().get_chain_height())


@app.post("/v1/admin/mint", response_model=BalanceResponse)
def mint(req: MintRequest, x_caller_id: str = Header(...)):
    balance = runtime.get_ledger().mint(x_caller_id, req.account, req.amount)
    return BalanceResponse(account=req.account, balance=balance)


# ── Vaults ──


@app.post("/v1/vaults", response_model=OkResponse)
def create_storage(req: FeeRequest, x_caller_id: str = Header(...)):
    runtime.get_ledger().create_storage(x_caller_id, req.fee)
    return OkResponse()


@app.put("/v1/vaults/fee", response_model=OkResponse)
def update_access_fee(req: FeeRequest, x_caller_id: str = Header(...)):
    runtime.get_ledger().update_access_fee(x_caller_id, req.fee)
    return OkResponse()


@app.get("/v1/vaults/{account}", response_model=VaultOut)
def get_storage_info(account: str):
    vault = runtime.get_ledger().get_storage_info(account)
    if vault is None:
        raise HTTPException(status_code=404, detail=f"Vault for {account} not found")
    return VaultOut(
        creation_height=vault.creation_height,
        total_entries=vault.total_entries,
        access_price=vault.access_price,
    )


@app.get("/v1/vaults/{owner}/records", response_model=RecordListResponse)
def list_records(owner: str):
    records = runtime.get_ledger().list_records(owner)
    return RecordListResponse(records=[_record_out(i, r) for i, r in records])


# ── Records ──


@app.post("/v1/records", response_model=StoreRecordResponse)
def store_encrypted_data(req: StoreRecordRequest, x_caller_id: str = Header(...)):
    index = runtime.get_ledger().store_encrypted_data(
        x_caller_id,
        req.content_hash,
        _decode_blob(req.encrypted_blob_b64),
        req.category_tag,
        req.proof_signature,
    )
    return StoreRecordResponse(index=index)


@app.post("/v1/records/{index}/toggle", response_model=VisibilityResponse)
def toggle_data_visibility(index: int, x_caller_id: str = Header(...)):
    visible = runtime.get_ledger().toggle_data_visibility(x_caller_id, index)
    return VisibilityResponse(index=index, is_accessible=visible)


@app.get("/v1/records/{owner}/{index}", response_model=RecordOut)
def get_encrypted_record(owner: str, index: int):
    record = runtime.get_ledger().get_encrypted_record(owner, index)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record {owner}/{index} not found")
    return _record_out(index, record)


# ── Access ──


@app.post("/v1/access", response_model=OkResponse)
def request_data_access(req: AccessRequest, x_caller_id: str = Header(...)):
    runtime.get_ledger().request_data_access(x_caller_id, req.owner, req.index, req.reason)
    return OkResponse()


@app.get("/v1/interactions/{owner}/{requester}/{index}", response_model=InteractionOut)
def get_interaction_log(owner: str, requester: str, index: int):
    interaction = runtime.get_ledger().get_interaction_log(owner, requester, index)
    if interaction is None:
        raise HTTPException(status_code=404, detail="Interaction not found")
    return InteractionOut(
        timestamp=interaction.timestamp,
        request_reason=interaction.request_reason,
        payment_amount=interaction.payment_amount,
    )


# ── Balances ──


@app.get("/v1/balances/{account}", response_model=BalanceResponse)
def get_balance(account: str):
    return BalanceResponse(account=account, balance=runtime.get_ledger().get_balance(account))


@app.post("/v1/transfers", response_model=OkResponse)
def transfer(req: TransferRequest, x_caller_id: str = Header(...)):
    runtime.get_ledger().transfer(x_caller_id, req.recipient, req.amount)
    return OkResponse()


# ── Reporting ──


@app.get("/v1/stats", response_model=StatsResponse)
def get_stats():
    s = runtime.get_ledger().get_stats()
    return StatsResponse(
        vaults_created=s.vaults_created,
        records_stored=s.records_stored,
        access_requests=s.access_requests,
        total_paid=s.total_paid,
    )


@app.get("/v1/health", response_model=HealthResponse)
def health():
    if runtime.ledger is None:
        return HealthResponse(status="degraded", ledger_connected=False, chain_height=0)
    h = runtime.ledger.health()
    return HealthResponse(
        status="ok" if h.ledger_connected else "degraded",
        ledger_connected=h.ledger_connected,
        chain_height=h.chain_height,
    )
