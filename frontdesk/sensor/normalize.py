"""
Turn a raw capture payload into the identifier string stored and looked up.

Precedence: a plain string is used verbatim, then a ``template`` field,
then a ``data`` field.  Anything else is serialised to compact JSON and
hashed with the 31-multiplier rolling hash over UTF-16 code units, wrapped
to a signed 32-bit integer; the absolute value in base 36 is followed by
the capture time in milliseconds, also base 36.  The hash must stay
bit-for-bit identical or previously stored identifiers stop matching.
"""
from __future__ import annotations

import json
import math
import time
from collections.abc import Mapping
from typing import Any, Optional

_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


def to_base36(value: int) -> str:
    """Lower-case base 36 rendering of a non-negative integer."""
    if value < 0:
        raise ValueError('to_base36 expects a non-negative integer')
    if value == 0:
        return '0'
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_DIGITS[rem])
    return ''.join(reversed(out))


def rolling_hash(text: str) -> int:
    """``hash = hash * 31 + code_unit`` wrapped to signed 32 bits."""
    units = text.encode('utf-16-le')
    h = 0
    for i in range(0, len(units), 2):
        h = (h * 31 + (units[i] | units[i + 1] << 8)) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return h


def _field(payload: Any, name: str) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(name)
    return getattr(payload, name, None)


def _js_numbers(value: Any) -> Any:
    """Render floats the way ``JSON.stringify`` does: ``80.0`` as ``80``, NaN and infinities as null."""
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if isinstance(value, Mapping):
        return {k: _js_numbers(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_js_numbers(v) for v in value]
    return value


def serialize_payload(payload: Any) -> str:
    """Compact JSON in insertion order, matching the capture service's own encoding."""
    if not isinstance(payload, (Mapping, list, tuple, int, float, bool)) and hasattr(payload, '__dict__'):
        payload = vars(payload)
    return json.dumps(_js_numbers(payload), separators=(',', ':'), ensure_ascii=False, default=str)


def hashed_identifier(payload: Any, now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return to_base36(abs(rolling_hash(serialize_payload(payload)))) + to_base36(now_ms)


def normalize_capture(payload: Any, now_ms: Optional[int] = None) -> str:
    """Return the biometric identifier for ``payload``.

    ``now_ms`` pins the capture wall-clock time used by the hash fallback;
    it defaults to the current time.
    """
    if payload is None:
        raise ValueError('empty capture payload')
    if isinstance(payload, str):
        return payload
    for name in ('template', 'data'):
        value = _field(payload, name)
        if value:
            return value if isinstance(value, str) else serialize_payload(value)
    return hashed_identifier(payload, now_ms)
