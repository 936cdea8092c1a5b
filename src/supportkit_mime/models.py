"""Pydantic models and enumerations for the supportkit-mime package.

Contains the extraction output (``ExtractionResult``), the inbound decoder
output (``DecodedBody``), and the types exchanged with a message store by
the backfill runner (``StoredMessage``, ``BackfillDetail``,
``BackfillResult``).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from supportkit_mime.errors import IngestError

__all__ = [
    "TransferEncoding",
    "BackfillStatus",
    "ExtractionResult",
    "DecodedBody",
    "StoredMessage",
    "BackfillDetail",
    "BackfillResult",
]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TransferEncoding(str, Enum):
    """Content-Transfer-Encoding of a MIME part, as far as decoding cares."""

    QUOTED_PRINTABLE = "quoted-printable"
    BASE64 = "base64"
    IDENTITY = "identity"

    @classmethod
    def from_header(cls, value: str | None) -> TransferEncoding:
        """Map a raw header value; anything unrecognised passes through."""
        if not value:
            return cls.IDENTITY
        normalized = value.strip().strip("\"'").lower()
        if normalized == cls.QUOTED_PRINTABLE.value:
            return cls.QUOTED_PRINTABLE
        if normalized == cls.BASE64.value:
            return cls.BASE64
        return cls.IDENTITY


class BackfillStatus(str, Enum):
    """Outcome recorded for each message visited by the backfill runner."""

    UPDATED = "updated"
    WOULD_UPDATE = "would_update"
    NO_HTML_FOUND = "no_html_found"
    REJECTED = "rejected"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class ExtractionResult(BaseModel):
    """Clean representation of a raw email body.

    ``text_content`` is always populated when the input was: a found
    text/plain part, else the HTML part converted to text, else the raw
    input unchanged.  ``html_content`` is only set from a real text/html
    part.
    """

    text_content: str = ""
    html_content: str | None = None
    has_attachments: bool = False
    attachment_count: int = 0
    warnings: list[str] = []


class DecodedBody(BaseModel):
    """Result of decoding a freshly fetched inbound body."""

    text: str = ""
    html: str | None = None
    has_attachments: bool = False
    attachment_count: int = 0


# ---------------------------------------------------------------------------
# Backfill
# ---------------------------------------------------------------------------


class StoredMessage(BaseModel):
    """A message record as read from the message store."""

    id: str
    body_text: str | None = None
    body_html: str | None = None
    conversation_id: str | None = None


class BackfillDetail(BaseModel):
    """Per-message line of a backfill report."""

    id: str
    status: BackfillStatus
    html_length: int | None = None
    warnings: list[str] = []


class BackfillResult(BaseModel):
    """Final report of one ``BackfillRunner.run()`` call."""

    parser_version: str = ""
    tenant_id: str | None = None
    dry_run: bool = False
    total_checked: int = 0
    updated: int = 0
    skipped_no_mime: int = 0
    skipped_no_html: int = 0
    skipped_rejected: int = 0
    errors: int = 0
    details: list[BackfillDetail] = []
    error_details: list[IngestError] = []
    processing_time_seconds: float = 0.0
