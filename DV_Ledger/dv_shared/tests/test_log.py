import io

import pytest

from DV_Ledger.dv_shared.log import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    configure_logging()


def test_renders_key_value_line():
    stream = io.StringIO()
    configure_logging(stream=stream)
    get_logger("test").info("vault_created", owner="alice", fee=100)

    line = stream.getvalue().strip()
    assert "[INFO] vault_created" in line
    assert "component=test" in line
    assert "fee=100" in line
    assert "owner=alice" in line


def test_debug_filtered_unless_enabled():
    stream = io.StringIO()
    configure_logging(stream=stream)
    get_logger("test").debug("watch_conflict")
    assert stream.getvalue() == ""

    configure_logging(debug=True, stream=stream)
    get_logger("test").debug("watch_conflict")
    assert "[DEBUG] watch_conflict" in stream.getvalue()


def test_payload_fields_dropped():
    stream = io.StringIO()
    configure_logging(stream=stream)
    get_logger("test").info("record_stored", encrypted_blob=b"secret", proof_signature="p" * 64)

    out = stream.getvalue()
    assert "secret" not in out
    assert "proof_signature" not in out
