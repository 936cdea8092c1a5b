"""MIME body extractor -- raw stored body to clean text and HTML.

Composes the tokenizer (:mod:`supportkit_mime.tokenizer`), the transfer
decoders (:mod:`supportkit_mime.decoding`) and the HTML fallback
(:mod:`supportkit_mime.html_strip`).  Pure: no I/O, no shared state, safe
to call from any number of threads.
"""

from __future__ import annotations

import logging
import re

from supportkit_mime.config import MimeProcessorConfig
from supportkit_mime.decoding import decode_transfer
from supportkit_mime.errors import ErrorCode
from supportkit_mime.html_strip import html_to_text
from supportkit_mime.models import ExtractionResult
from supportkit_mime.tokenizer import MimeLeaf, MimeTreeBuilder, iter_leaves

logger = logging.getLogger("supportkit_mime")

_TEXT_PLAIN = "text/plain"
_TEXT_HTML = "text/html"
_SAMPLE_CHARS = 200

_MIME_MARKERS = (
    re.compile(r"Content-Type:\s*multipart/", re.IGNORECASE),
    re.compile(r"Content-Type:\s*text/html", re.IGNORECASE),
    re.compile(r"^--[A-Za-z0-9_-]+\r?\n", re.MULTILINE),
)


def contains_mime_data(text: str | None) -> bool:
    """Return True if *text* still carries MIME structure worth re-parsing."""
    if not text:
        return False
    return any(marker.search(text) for marker in _MIME_MARKERS)


class MimeExtractor:
    """Extract text, HTML and attachment facts from a raw email body.

    Parameters
    ----------
    config:
        Engine configuration. Uses defaults when *None*.
    """

    def __init__(self, config: MimeProcessorConfig | None = None) -> None:
        self._config = config or MimeProcessorConfig()

    def extract(self, raw: str) -> ExtractionResult:
        """Parse *raw* and return its :class:`ExtractionResult`.

        Never raises on malformed input: a body that is not MIME, declares
        a boundary it never uses, or contains no recognisable text part
        comes back unchanged as ``text_content``.
        """
        if not raw:
            return ExtractionResult()

        config = self._config
        builder = MimeTreeBuilder(max_depth=config.max_nesting_depth)
        tree = builder.build(raw)
        warnings: list[ErrorCode] = list(builder.warnings)

        if tree is None:
            return ExtractionResult(text_content=raw, warnings=_codes(warnings))

        text_candidate: str | None = None
        html_candidate: str | None = None
        attachment_count = 0

        for leaf in iter_leaves(tree):
            if leaf.headers.is_attachment:
                attachment_count += 1
                continue

            content_type = leaf.headers.content_type
            if leaf.opaque or content_type not in (_TEXT_PLAIN, _TEXT_HTML):
                continue

            decoded = self._decode_leaf(leaf, warnings)
            if not decoded:
                continue
            if content_type == _TEXT_PLAIN:
                text_candidate = self._pick(text_candidate, decoded)
            else:
                html_candidate = self._pick(html_candidate, decoded)

        if text_candidate is not None:
            text_content = text_candidate
        elif html_candidate is not None:
            # markup with no visible text (e.g. a lone <img>) keeps the raw body
            text_content = html_to_text(html_candidate) or raw
            warnings.append(ErrorCode.W_MIME_HTML_ONLY)
        else:
            text_content = raw
            warnings.append(ErrorCode.W_MIME_NO_TEXT_PART)

        logger.debug(
            "supportkit_mime | boundary=%s | parts=%d | attachments=%d | "
            "has_text=%s | has_html=%s",
            tree.boundary,
            len(tree.parts),
            attachment_count,
            text_candidate is not None,
            html_candidate is not None,
        )

        return ExtractionResult(
            text_content=text_content,
            html_content=html_candidate,
            has_attachments=attachment_count > 0,
            attachment_count=attachment_count,
            warnings=_codes(warnings),
        )

    def _decode_leaf(self, leaf: MimeLeaf, warnings: list[ErrorCode]) -> str:
        if leaf.content is None:
            return ""
        headers = leaf.headers
        charset = headers.charset or self._config.default_charset
        outcome = decode_transfer(leaf.content, headers.transfer_encoding, charset)

        if not outcome.ok:
            warnings.append(ErrorCode.W_MIME_DECODE_FAILED)
        elif outcome.fallback:
            warnings.append(ErrorCode.W_MIME_CHARSET_FALLBACK)

        if self._config.log_sample_data:
            logger.debug(
                "supportkit_mime | content_type=%s | charset=%s | sample=%r",
                headers.content_type,
                outcome.codec or charset,
                outcome.text[:_SAMPLE_CHARS],
            )
        return outcome.text

    def _pick(self, current: str | None, found: str) -> str:
        if self._config.duplicate_part_policy == "first" and current is not None:
            return current
        return found


def _codes(warnings: list[ErrorCode]) -> list[str]:
    """Deduplicate warning codes, keeping first-seen order."""
    return list(dict.fromkeys(code.value for code in warnings))


def extract(raw: str, config: MimeProcessorConfig | None = None) -> ExtractionResult:
    """Convenience wrapper around :meth:`MimeExtractor.extract`."""
    return MimeExtractor(config).extract(raw)
