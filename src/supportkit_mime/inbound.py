"""Fetch-time decoding of inbound message bodies.

Wraps the extractor with the fallbacks the mail fetcher needs for bodies
that arrive without MIME structure (bare base64 or quoted-printable), and
drops the quoted previous conversation from the text.
"""

from __future__ import annotations

import logging
import re

from supportkit_mime.config import MimeProcessorConfig
from supportkit_mime.decoding import decode_b64, decode_qp
from supportkit_mime.extractor import MimeExtractor
from supportkit_mime.models import DecodedBody

logger = logging.getLogger("supportkit_mime")

_BASE64_BODY = re.compile(r"^[A-Za-z0-9+/=\s]+$")
_LINE_SPLIT = re.compile(r"\r?\n")
_QUOTED_LINE = re.compile(r"^\s*>")
_QUOTED_CONTENT = re.compile(r"^\s*>+\s*(.*)")


def remove_quoted_content(text: str) -> str:
    """Drop everything from the first ``>``-quoted line on.

    New content sits above the quotes.  When every line is quoted, the
    de-prefixed quoted lines are returned instead of nothing.
    """
    if not text:
        return ""

    lines = _LINE_SPLIT.split(text)
    kept: list[str] = []
    for line in lines:
        if _QUOTED_LINE.match(line):
            break
        kept.append(line)

    result = "\n".join(kept).strip()
    if result:
        return result

    quoted: list[str] = []
    for line in lines:
        match = _QUOTED_CONTENT.match(line)
        if match and match.group(1).strip():
            quoted.append(match.group(1).strip())
    logger.debug("supportkit_mime | stage=inbound | detail=all lines quoted")
    return "\n".join(quoted)


def decode_inbound_body(
    body: str | None, config: MimeProcessorConfig | None = None
) -> DecodedBody:
    """Decode a freshly fetched body into text, HTML and attachment facts."""
    if not body:
        return DecodedBody()

    extracted = MimeExtractor(config).extract(body)
    text = extracted.text_content

    if text == body and _BASE64_BODY.match(body.strip()):
        text = decode_b64(body)
    if text == body:
        text = decode_qp(body)

    return DecodedBody(
        text=remove_quoted_content(text),
        html=extracted.html_content,
        has_attachments=extracted.has_attachments,
        attachment_count=extracted.attachment_count,
    )
