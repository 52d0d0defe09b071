"""Error normalizer — folds any native failure shape into ``{code, message}``.

The bridge reports failures inconsistently: bare strings, dicts with only a
``message``, objects with a numeric ``code`` attribute, or plain exceptions.
``normalize`` turns all of them into an ``ErrorInfo``; ``to_error`` goes one
step further and builds the matching ``BridgeError`` subclass.

Already-normalized values pass straight through so one layer can re-raise
another layer's error without wrapping it twice.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from plusbridge.core.errors import ERROR_CLASSES, BridgeError
from plusbridge.models.errors import (
    UNKNOWN_ERROR_CODE,
    UNKNOWN_ERROR_MESSAGE,
    ErrorInfo,
    ErrorKind,
)


def _coerce_code(value: Any) -> int | None:
    # bool is an int subclass but never a meaningful error code
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    return None


def _coerce_message(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    return text or None


def normalize(
    raw: Any,
    fallback_code: int = UNKNOWN_ERROR_CODE,
    fallback_message: str = UNKNOWN_ERROR_MESSAGE,
) -> ErrorInfo:
    """Return an ``ErrorInfo`` for *raw*, filling gaps from the fallbacks.

    The result always has an integer ``code`` and a non-empty ``message``.
    """
    if isinstance(raw, BridgeError):
        return raw.info
    if isinstance(raw, ErrorInfo):
        return raw

    code: Any = None
    message: Any = None

    if isinstance(raw, str):
        message = raw
    elif isinstance(raw, Mapping):
        code = raw.get("code")
        message = raw.get("message")
    elif isinstance(raw, BaseException):
        code = getattr(raw, "code", None)
        message = getattr(raw, "message", None) or str(raw)
    elif raw is not None:
        code = getattr(raw, "code", None)
        message = getattr(raw, "message", None)

    resolved_code = _coerce_code(code)
    resolved_message = _coerce_message(message)
    return ErrorInfo(
        code=resolved_code if resolved_code is not None else fallback_code,
        message=(
            resolved_message
            or _coerce_message(fallback_message)
            or UNKNOWN_ERROR_MESSAGE
        ),
    )


def to_error(
    raw: Any,
    fallback_code: int = UNKNOWN_ERROR_CODE,
    fallback_message: str = UNKNOWN_ERROR_MESSAGE,
    *,
    kind: ErrorKind = ErrorKind.OPERATION_FAILED,
) -> BridgeError:
    """Build the ``BridgeError`` for *raw*.

    An existing ``BridgeError`` is returned as-is. Otherwise the exception
    class for *kind* is instantiated from the normalized info, and an
    original exception is chained as ``__cause__``.
    """
    if isinstance(raw, BridgeError):
        return raw

    info = normalize(raw, fallback_code, fallback_message)
    error = ERROR_CLASSES[kind](info.message, code=info.code)
    if isinstance(raw, BaseException):
        error.__cause__ = raw
    return error
