# orders/services/order_numbers.py

"""
ORDER NUMBER GENERATION

Format: ORD-<epoch milliseconds>-<9 random base36 chars>, upper-cased.
Collisions are possible in theory; uniqueness is enforced by the
(store, order_number) constraint and create_order() retries on conflict.
"""

from __future__ import annotations

import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 9


def generate_order_number(*, now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"ORD-{now_ms}-{suffix}"
