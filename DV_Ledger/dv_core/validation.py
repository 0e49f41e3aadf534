from DV_Ledger.dv_shared import config, errors


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_storable_text(value: str) -> bool:
    """True when ``value`` survives the UTF-8 encoding Redis applies to every key and field."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def validate_account(account, field: str = "caller") -> None:
    if not isinstance(account, str) or not account:
        raise errors.InvalidInputError(field, "account must be a non-empty string")
    if config.KEY_SEPARATOR in account:
        raise errors.InvalidInputError(field, f"account may not contain '{config.KEY_SEPARATOR}'")
    if not is_storable_text(account):
        raise errors.InvalidInputError(field, "must be valid UTF-8 text")


def validate_fee(fee, min_fee: int, max_fee: int) -> None:
    if not _is_int(fee) or fee < min_fee or fee > max_fee:
        raise errors.InvalidPriceError(fee, min_fee, max_fee)


def validate_index(index) -> None:
    if not _is_int(index) or index <= 0:
        raise errors.InvalidInputError("index", f"{index!r} is not a 1-based record index")


def validate_height(height, max_height: int) -> None:
    if not _is_int(height) or height <= 0 or height > max_height:
        raise errors.InvalidInputError("height", f"{height!r} must be within [1, {max_height}]")


def validate_fixed_text(field: str, value, length: int) -> None:
    if not isinstance(value, str) or len(value) != length:
        raise errors.InvalidInputError(field, f"must be exactly {length} characters")
    if not is_storable_text(value):
        raise errors.InvalidInputError(field, "must be valid UTF-8 text")


def validate_bounded_text(field: str, value, max_length: int) -> None:
    if not isinstance(value, str) or not value or len(value) > max_length:
        raise errors.InvalidInputError(field, f"must be 1..{max_length} characters")
    if not is_storable_text(value):
        raise errors.InvalidInputError(field, "must be valid UTF-8 text")


def validate_blob(blob) -> None:
    if not isinstance(blob, (bytes, bytearray)) or not blob or len(blob) > config.MAX_BLOB_BYTES:
        raise errors.InvalidInputError("encrypted_blob", f"must be 1..{config.MAX_BLOB_BYTES} bytes")


def validate_amount(amount) -> None:
    if not _is_int(amount) or amount <= 0:
        raise errors.InvalidInputError("amount", f"{amount!r} must be a positive integer")
