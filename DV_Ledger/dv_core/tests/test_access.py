import pytest

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.types import Interaction


# ── Validation order ──

def test_self_access_rejected(access, alice_vault):
    with pytest.raises(errors.InvalidInputError) as exc:
        access.request_data_access(alice_vault, alice_vault, 1, "mine")
    assert exc.value.code == 422


@pytest.mark.parametrize("index,reason", [(1, "ok"), (0, ""), (99, "x" * 100)])
def test_self_access_rejected_regardless_of_state(access, alice_vault, index, reason):
    with pytest.raises(errors.InvalidInputError):
        access.request_data_access(alice_vault, alice_vault, index, reason)


def test_self_access_rejected_without_vault(access):
    with pytest.raises(errors.InvalidInputError):
        access.request_data_access("carol", "carol", 1, "x")


def test_owner_without_vault_not_found(access, funded_bob):
    with pytest.raises(errors.NotFoundError):
        access.request_data_access(funded_bob, "ghost", 1, "research")


def test_not_found_checked_before_input(access, funded_bob):
    with pytest.raises(errors.NotFoundError):
        access.request_data_access(funded_bob, "ghost", 0, "")


def test_index_zero_invalid(access, alice_vault, funded_bob):
    with pytest.raises(errors.InvalidInputError):
        access.request_data_access(funded_bob, alice_vault, 0, "research")


@pytest.mark.parametrize("reason", ["", "r" * (config.MAX_REASON_LENGTH + 1), None, "\ud800"])
def test_bad_reason_invalid(ledger, access, alice_vault, funded_bob, reason):
    with pytest.raises(errors.InvalidInputError):
        access.request_data_access(funded_bob, alice_vault, 1, reason)
    assert access.get_interaction_log(alice_vault, funded_bob, 1) is None
    assert ledger.get_balance(funded_bob) == 1_000


def test_unencodable_owner_not_found(access, funded_bob):
    with pytest.raises(errors.NotFoundError):
        access.request_data_access(funded_bob, "\ud800", 1, "research")


def test_unencodable_caller_invalid(access, alice_vault):
    with pytest.raises(errors.InvalidInputError):
        access.request_data_access("\udc80bob", alice_vault, 1, "research")


def test_index_beyond_entries(access, alice_vault, funded_bob):
    with pytest.raises(errors.RecordNotFoundError) as exc:
        access.request_data_access(funded_bob, alice_vault, 2, "research")
    assert exc.value.code == 403


def test_missing_record_at_allocated_index(access, records, ledger_client, alice_vault, funded_bob):
    ledger_client.delete(records._record_key(alice_vault, 1))
    with pytest.raises(errors.RecordNotFoundError):
        access.request_data_access(funded_bob, alice_vault, 1, "research")


def test_inaccessible_record_denied(access, records, alice_vault, funded_bob):
    records.toggle_data_visibility(alice_vault, 1)
    with pytest.raises(errors.AccessDeniedError) as exc:
        access.request_data_access(funded_bob, alice_vault, 1, "research")
    assert exc.value.code == 401


# ── Success ──

def test_access_logs_and_pays(ledger, access, admin, alice_vault, funded_bob):
    ledger.update_chain_height(admin, 12)
    assert access.request_data_access(funded_bob, alice_vault, 1, "research") is True

    assert access.get_interaction_log(alice_vault, funded_bob, 1) == Interaction(
        timestamp=12, request_reason="research", payment_amount=100
    )
    assert ledger.get_balance(funded_bob) == 900
    assert ledger.get_balance(alice_vault) == 100


def test_repeat_request_overwrites_entry(ledger, access, admin, ledger_client, alice_vault, funded_bob):
    access.request_data_access(funded_bob, alice_vault, 1, "research")
    ledger.update_chain_height(admin, 40)
    access.request_data_access(funded_bob, alice_vault, 1, "again")

    entry = access.get_interaction_log(alice_vault, funded_bob, 1)
    assert entry == Interaction(timestamp=40, request_reason="again", payment_amount=100)
    assert len(ledger_client.keys(f"{config.INTERACTION_KEY_PREFIX}:*")) == 1
    assert ledger.get_balance(funded_bob) == 800


def test_payment_uses_current_fee(ledger, access, alice_vault, funded_bob):
    ledger.update_access_fee(alice_vault, 250)
    access.request_data_access(funded_bob, alice_vault, 1, "research")
    assert access.get_interaction_log(alice_vault, funded_bob, 1).payment_amount == 250
    assert ledger.get_balance(alice_vault) == 250


def test_logged_amount_unchanged_by_later_fee_change(ledger, access, alice_vault, funded_bob):
    access.request_data_access(funded_bob, alice_vault, 1, "research")
    ledger.update_access_fee(alice_vault, 999)
    assert access.get_interaction_log(alice_vault, funded_bob, 1).payment_amount == 100


def test_entries_keyed_by_requester(ledger, access, admin, alice_vault, funded_bob):
    ledger.mint(admin, "carol", 500)
    access.request_data_access(funded_bob, alice_vault, 1, "bob-reason")
    access.request_data_access("carol", alice_vault, 1, "carol-reason")

    assert access.get_interaction_log(alice_vault, funded_bob, 1).request_reason == "bob-reason"
    assert access.get_interaction_log(alice_vault, "carol", 1).request_reason == "carol-reason"


def test_access_updates_stats(ledger, access, alice_vault, funded_bob):
    access.request_data_access(funded_bob, alice_vault, 1, "one")
    access.request_data_access(funded_bob, alice_vault, 1, "two")
    stats = ledger.get_stats()
    assert stats.access_requests == 2
    assert stats.total_paid == 200


# ── Atomic payment logging ──

def test_insufficient_funds_leaves_no_log(ledger, access, alice_vault):
    with pytest.raises(errors.InsufficientFundsError) as exc:
        access.request_data_access("pauper", alice_vault, 1, "research")
    assert exc.value.code == 1

    assert access.get_interaction_log(alice_vault, "pauper", 1) is None
    assert ledger.get_balance("pauper") == 0
    assert ledger.get_balance(alice_vault) == 0
    assert ledger.get_stats().access_requests == 0


def test_insufficient_funds_keeps_previous_entry(ledger, access, admin, alice_vault):
    ledger.mint(admin, "dave", 150)
    access.request_data_access("dave", alice_vault, 1, "first")
    before = access.get_interaction_log(alice_vault, "dave", 1)

    ledger.update_chain_height(admin, 99)
    with pytest.raises(errors.InsufficientFundsError):
        access.request_data_access("dave", alice_vault, 1, "second")

    assert access.get_interaction_log(alice_vault, "dave", 1) == before
    assert ledger.get_balance("dave") == 50


def test_exact_balance_is_enough(ledger, access, admin, alice_vault):
    ledger.mint(admin, "erin", 100)
    assert access.request_data_access("erin", alice_vault, 1, "exact") is True
    assert ledger.get_balance("erin") == 0


# ── Query ──

def test_get_interaction_log_absent(access):
    assert access.get_interaction_log("alice", "bob", 1) is None
