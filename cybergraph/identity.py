"""Address normalization, validation and identity deduplication."""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

from .errors import InvalidAddressError

if TYPE_CHECKING:
    from .models import Identity

_EVM_ADDRESS = re.compile(r"^0x[0-9a-f]{40}$")


def normalize_address(value: Optional[str]) -> str:
    """Normalize an address for use as a map/dedup key."""
    return str(value or "").strip().lower()


def is_valid_address(value: Optional[str]) -> bool:
    """Return True for a hex EVM address (any letter case)."""
    return bool(_EVM_ADDRESS.match(normalize_address(value)))


def require_valid_address(value: Optional[str]) -> str:
    """Return the normalized address or raise ``InvalidAddressError``."""
    if not is_valid_address(value):
        raise InvalidAddressError(f"not a valid address: {value!r}")
    return normalize_address(value)


def format_address(address: Optional[str], *, head: int = 6, tail: int = 4) -> str:
    """Shorten an address for display, e.g. ``0x1234...abcd``."""
    text = str(address or "")
    if len(text) <= head + tail + 3:
        return text
    return f"{text[:head]}...{text[-tail:]}"


def merge_identities(existing: Iterable["Identity"], incoming: Iterable["Identity"]) -> Tuple["Identity", ...]:
    """Concatenate ``existing`` and ``incoming`` keeping the first entry per address.

    Order of first occurrence is preserved, so re-merging a page that was
    already merged returns the same sequence.
    """
    seen = set()
    merged = []
    for identity in (*existing, *incoming):
        if identity.address in seen:
            continue
        seen.add(identity.address)
        merged.append(identity)
    return tuple(merged)
