from __future__ import annotations

import re
from contextvars import ContextVar, Token

MAX_CORRELATION_ID_LENGTH = 128
_CORRELATION_ID_RE = re.compile(r"^[A-Za-z0-9._:-]+$")

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def clean_correlation_id(raw: str | None) -> str | None:
    """Return the caller-supplied id when it is safe to echo and log, else ``None``."""
    if raw is None:
        return None
    value = raw.strip()
    if not value or len(value) > MAX_CORRELATION_ID_LENGTH or not _CORRELATION_ID_RE.match(value):
        return None
    return value


def set_correlation_id(value: str | None) -> Token[str | None]:
    return correlation_id_var.set(value)


def reset_correlation_id(token: Token[str | None]) -> None:
    correlation_id_var.reset(token)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()
