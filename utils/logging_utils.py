from typing import Any, Dict, Iterable, Mapping

SENSITIVE_KEY_PARTS = ("token", "session", "secret", "password", "cookie")
MAX_LOGGED_LENGTH = 80


def is_sensitive(key: str) -> bool:
    key = key.lower()
    return any(part in key for part in SENSITIVE_KEY_PARTS)


def mask_value(value: Any) -> Any:
    if not isinstance(value, str):
        return '***'
    if len(value) > 12:
        return value[:4] + '...' + value[-4:]
    return '***'


def shorten(value: Any, limit: int = MAX_LOGGED_LENGTH) -> Any:
    if isinstance(value, str) and len(value) > limit:
        return value[: limit - 3] + '...'
    return value


def sanitize_payload(payload: Mapping, allowed_keys: Iterable[str]) -> Dict:
    """Return a copy of payload with only allowed keys, long strings shortened and credentials masked."""
    result = {}
    for key in allowed_keys:
        if key in payload:
            value = payload[key]
            result[key] = mask_value(value) if is_sensitive(key) else shorten(value)
    return result
