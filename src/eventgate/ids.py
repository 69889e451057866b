"""Identifier and clock helpers."""

import time
from uuid import uuid4


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


def now_ms() -> int:
    return time.time_ns() // 1_000_000
