"""Error codes and structured error model for the supportkit-mime package.

``ErrorCode`` lists every fatal and non-fatal condition the extraction
engine and the backfill runner can report.  ``IngestError`` is the
Pydantic model that carries one of those codes with its context.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes for supportkit-mime.

    Fatal codes use an ``E_`` prefix; warnings use ``W_``.
    Values equal their names for stable metric/alerting strings.
    """

    # Body pre-flight errors
    E_MIME_EMPTY_BODY = "E_MIME_EMPTY_BODY"
    E_MIME_BODY_TOO_LARGE = "E_MIME_BODY_TOO_LARGE"

    # Backfill store errors
    E_BACKFILL_FETCH_FAILED = "E_BACKFILL_FETCH_FAILED"
    E_BACKFILL_WRITE_FAILED = "E_BACKFILL_WRITE_FAILED"

    # Warnings (non-fatal, the engine degraded and carried on)
    W_MIME_BOUNDARY_MISMATCH = "W_MIME_BOUNDARY_MISMATCH"
    W_MIME_UNTERMINATED = "W_MIME_UNTERMINATED"
    W_MIME_DEPTH_LIMIT = "W_MIME_DEPTH_LIMIT"
    W_MIME_CHARSET_FALLBACK = "W_MIME_CHARSET_FALLBACK"
    W_MIME_DECODE_FAILED = "W_MIME_DECODE_FAILED"
    W_MIME_HTML_ONLY = "W_MIME_HTML_ONLY"
    W_MIME_NO_TEXT_PART = "W_MIME_NO_TEXT_PART"
    W_MIME_NUL_BYTES = "W_MIME_NUL_BYTES"


class IngestError(BaseModel):
    """Structured error with code, message, and context.

    ``message_id`` identifies the stored message a backfill error belongs
    to; it stays ``None`` for errors raised on a bare body.
    """

    code: ErrorCode
    message: str
    stage: str | None = None
    recoverable: bool = False
    message_id: str | None = None

    @property
    def is_fatal(self) -> bool:
        return self.code.value.startswith("E_")
