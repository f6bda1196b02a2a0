"""Lenient field decoding shared by the provider normalizers."""

import math
from typing import Any, Optional, Tuple


def safe_float(value: Any, default: float = 0.0) -> float:
    """Convert a number or numeric string to float, else ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            result = float(value.replace('%', '').strip())
        except ValueError:
            return default
        return result if math.isfinite(result) else default
    return default


def safe_int(value: Any, default: int = 0) -> int:
    """Leading-integer parse ("12", "12.7", " 12 ") else ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            result = float(text)
        except ValueError:
            return default
        return int(result) if math.isfinite(result) else default
    return default


def parse_record(record: Any) -> Optional[Tuple[int, int]]:
    """Parse a "W-L" string into (wins, losses); None when it is not one."""
    if not isinstance(record, str):
        return None
    parts = record.split('-')
    if len(parts) != 2:
        return None
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        return None
