from dataclasses import dataclass

@dataclass
class VaultInfo:
    creation_height: int
    total_entries:   int
    access_price:    int

@dataclass
class EncryptedRecord:
    content_hash:    str
    encrypted_blob:  bytes
    category_tag:    str
    is_accessible:   bool
    proof_signature: str

@dataclass
class Interaction:
    timestamp:      int
    request_reason: str
    payment_amount: int

@dataclass
class LedgerStats:
    vaults_created:  int
    records_stored:  int
    access_requests: int
    total_paid:      int

@dataclass
class OwnerSummary:
    owner:              str
    total_entries:      int
    accessible_entries: int
    access_price:       int
    balance:            int

@dataclass
class HealthStatus:
    ledger_connected: bool
    ledger_key_count: int
    chain_height:     int
