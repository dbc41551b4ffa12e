# ecocred/utils/addresses.py
import hashlib
import re

from ecocred.errors import InvalidArgumentError

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
NULL_ADDRESS = "0x" + "0" * 40


def normalize_address(value, field: str = "address") -> str:
    """Validates a hex account address and returns its lowercase form."""
    if not isinstance(value, str) or not ADDRESS_PATTERN.match(value):
        raise InvalidArgumentError(f"{field} is not a valid address: {value!r}")
    return value.lower()


def is_address(value) -> bool:
    return isinstance(value, str) and bool(ADDRESS_PATTERN.match(value))


def contract_address(name: str) -> str:
    """Deterministic pseudo-address for an in-process ledger contract."""
    digest = hashlib.sha256(f"ecocred:contract:{name}".encode("utf-8")).hexdigest()
    return "0x" + digest[-40:]
