import re
from typing import Any

from ..errors import ValidationFailed

_INTEGRAL_SUFFIX = re.compile(r"^(\d+)\.0*$")


def normalize_id(value: Any) -> str | None:
    """Canonical string form for registration ids, ITS numbers and first-choice values.

    ``123``, ``123.0``, ``"123"``, ``"123.0"`` and ``" 123 "`` all normalize to
    ``"123"``. Digits are otherwise kept as given, so ``"0123"`` stays ``"0123"``.
    Blank values become ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    v = str(value).strip()
    if not v:
        return None
    m = _INTEGRAL_SUFFIX.match(v)
    if m:
        return m.group(1)
    return v


def same_id(a: Any, b: Any) -> bool:
    na = normalize_id(a)
    return na is not None and na == normalize_id(b)


def require_id(value: Any, field: str) -> str:
    normalized = normalize_id(value)
    if normalized is None:
        raise ValidationFailed(f"Missing {field}")
    return normalized


def require_taruf_id(value: Any) -> int:
    normalized = normalize_id(value)
    if normalized is None:
        raise ValidationFailed("Missing taruf_id")
    try:
        taruf_id = int(normalized)
    except ValueError:
        raise ValidationFailed("taruf_id must be an integer") from None
    if taruf_id <= 0:
        raise ValidationFailed("taruf_id must be positive")
    return taruf_id
