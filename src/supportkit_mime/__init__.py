"""supportkit-mime -- MIME body extraction for stored support messages.

Re-exports all public types: extractor, decoding primitives, HTML
fallback, display cleaner, inbound decoder, backfill runner, config,
models, errors, and the message store protocol.
"""

from supportkit_mime.backfill import BackfillRunner
from supportkit_mime.config import MimeProcessorConfig
from supportkit_mime.decoding import (
    DecodeOutcome,
    decode_b64,
    decode_payload,
    decode_qp,
    decode_transfer,
    normalize_charset,
    resolve_codec,
)
from supportkit_mime.display import (
    EMPTY_BODY_PLACEHOLDER,
    clean_message_body,
    collapse_forwarded_content,
    is_renderable_html,
    truncate_long_urls,
)
from supportkit_mime.errors import ErrorCode, IngestError
from supportkit_mime.extractor import MimeExtractor, contains_mime_data, extract
from supportkit_mime.html_strip import html_to_text
from supportkit_mime.inbound import decode_inbound_body, remove_quoted_content
from supportkit_mime.models import (
    BackfillDetail,
    BackfillResult,
    BackfillStatus,
    DecodedBody,
    ExtractionResult,
    StoredMessage,
    TransferEncoding,
)
from supportkit_mime.protocols import MessageStore
from supportkit_mime.security import BodySecurityScanner
from supportkit_mime.tokenizer import MimeLeaf, MimeMultipart, MimeTreeBuilder

__all__ = [
    # Extractor
    "MimeExtractor",
    "extract",
    "contains_mime_data",
    # Tokenizer
    "MimeTreeBuilder",
    "MimeLeaf",
    "MimeMultipart",
    # Decoding
    "DecodeOutcome",
    "decode_qp",
    "decode_b64",
    "decode_transfer",
    "decode_payload",
    "normalize_charset",
    "resolve_codec",
    # HTML
    "html_to_text",
    "is_renderable_html",
    # Display
    "clean_message_body",
    "collapse_forwarded_content",
    "truncate_long_urls",
    "EMPTY_BODY_PLACEHOLDER",
    # Inbound
    "decode_inbound_body",
    "remove_quoted_content",
    # Backfill
    "BackfillRunner",
    "MessageStore",
    # Security
    "BodySecurityScanner",
    # Config
    "MimeProcessorConfig",
    # Errors
    "ErrorCode",
    "IngestError",
    # Models
    "TransferEncoding",
    "BackfillStatus",
    "ExtractionResult",
    "DecodedBody",
    "StoredMessage",
    "BackfillDetail",
    "BackfillResult",
]
