"""Placeholder tokens and the binding table behind every parameterized value."""

import math
import random
import re
import string
from typing import Any, Dict, Optional

from .mappings import token_prefix, default_token_length, token_length_bounds, param_types

_rng = random.SystemRandom()
_rx_number = re.compile(r'^-?\d+(?:\.\d+)?$')


def clamp(val: int, low: int, high: int) -> int:
    """Clamp val into [low, high]."""
    return low if val < low else high if val > high else val


def make_token(length: int = default_token_length, prefix: str = token_prefix) -> str:
    """Mint a random lowercase placeholder token such as ':qhdzpa'."""
    size = clamp(length, *token_length_bounds)
    return prefix + ''.join(_rng.choice(string.ascii_lowercase) for _ in range(size))


def make_id(length: int = 4) -> str:
    """Mint a random numeric identifier for pooled builders."""
    size = clamp(length, *token_length_bounds)
    return ''.join(_rng.choice(string.digits) for _ in range(size))


def to_number(value: Any) -> Any:
    """Coerce to an int/float, falling back to 0 for anything non-numeric."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and not math.isfinite(value) else value
    if isinstance(value, str) and _rx_number.match(value.strip()):
        text = value.strip()
        return float(text) if '.' in text else int(text)
    return 0


def bind_type_for(sql_type: str) -> str:
    """Map a driver column type name (e.g. 'LONG', 'VARCHAR(20)') to a bind type."""
    base = sql_type.split('(')[0].strip().upper()
    return param_types.get(base, 'str')


def is_sequence(value: Any) -> bool:
    """True for lists/tuples, which are rendered inline instead of bound."""
    return isinstance(value, (list, tuple))


class BindingTable:
    """Ordered token -> value map with an optional token -> type map."""
    __slots__ = ('values', 'types', 'token_length')

    def __init__(self, token_length: int = default_token_length):
        self.values: Dict[str, Any] = {}
        self.types: Dict[str, Any] = {}
        self.token_length = token_length

    def add(self, value: Any, bind_type: Optional[Any] = None) -> str:
        """Record value under a fresh token and return the token."""
        token = make_token(self.token_length)
        while token in self.values:
            token = make_token(self.token_length)
        self.values[token] = value
        if bind_type is not None:
            self.types[token] = bind_type
        return token

    def clear(self):
        """Drop every binding."""
        self.values = {}
        self.types = {}

    def __len__(self) -> int:
        return len(self.values)

    def __contains__(self, token: str) -> bool:
        return token in self.values
