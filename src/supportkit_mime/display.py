"""Display-time cleaning of message bodies for the conversation view.

:func:`clean_message_body` is the light, synchronous path used when a
message has no persisted HTML: it finds the text part, unescapes
quoted-printable at string level (no charset handling), strips leftover
MIME header and boundary lines and collapses blank lines.  It never
raises, and an empty body renders as :data:`EMPTY_BODY_PLACEHOLDER`.

:func:`is_renderable_html` decides whether a persisted HTML body can be
shown as-is instead.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

from supportkit_mime.config import MimeProcessorConfig
from supportkit_mime.decoding import b64_to_bytes, decode_qp_text
from supportkit_mime.html_strip import html_to_text
from supportkit_mime.models import TransferEncoding
from supportkit_mime.tokenizer import MimeTreeBuilder, iter_leaves

logger = logging.getLogger("supportkit_mime")

EMPTY_BODY_PLACEHOLDER = "(Sem conteudo)"
FORWARDED_MARKER = "[... email original/encaminhado omitido ...]"
TRUNCATED_URL_SUFFIX = "... [link truncado]"

_TEXT_PLAIN = "text/plain"
_TEXT_HTML = "text/html"

_BLANK_LINE = re.compile(r"\n[ \t]*\n")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_RESIDUAL_ENCODING = re.compile(
    r"^Content-Transfer-Encoding:\s*([^\s;]+)", re.IGNORECASE | re.MULTILINE
)
_RESIDUAL_HEADER_LINE = re.compile(
    r"^(?:Content-Type|Content-Transfer-Encoding|MIME-Version):.*$",
    re.IGNORECASE | re.MULTILINE,
)
_BOUNDARY_LINE = re.compile(r"^--[^\n]+--?$", re.MULTILINE)

_FORWARD_SEPARATORS = (
    re.compile(
        r"^-{3,}\s*(?:Forwarded|Original|Původní|Oorspronkelijk|Originale|"
        r"Original-Nachricht|Mensaje original|Message original|Mensagem original)"
        r"[^-]*-{3,}.*$",
        re.IGNORECASE | re.MULTILINE,
    ),
    re.compile(r"^>+\s*.*$", re.MULTILINE),
    re.compile(r"^On\s+.+wrote:$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Em\s+.+escreveu:$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Le\s+.+a écrit\s*:$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Am\s+.+schrieb.*:$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^El\s+.+escribió:$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Dne\s+.+napsal.*:$", re.IGNORECASE | re.MULTILINE),
)

_URL = re.compile(r"https?://[^\s)>\]\"']+", re.IGNORECASE)

_HTML_MIME_HEADER = re.compile(r"Content-(?:Type|Transfer-Encoding):", re.IGNORECASE)
_HTML_BOUNDARY_LINE = re.compile(r"^--[A-Za-z0-9_-]+\r?$", re.MULTILINE)
_HTML_BASE64_RUN = re.compile(r"[A-Za-z0-9+/=]{50,}")
_HTML_TAG = re.compile(r"<[a-z][a-z0-9]*[^>]*>", re.IGNORECASE)
_MAX_BASE64_RATIO = 0.3


def _decode_inline(content: str, encoding: TransferEncoding) -> str:
    if encoding is TransferEncoding.QUOTED_PRINTABLE:
        return decode_qp_text(content)
    if encoding is TransferEncoding.BASE64:
        data = b64_to_bytes(content)
        return data.decode("latin-1") if data is not None else content
    return content


def _strip_residual_mime(text: str) -> str:
    encoding = _RESIDUAL_ENCODING.search(text)
    pieces = _BLANK_LINE.split(text, maxsplit=1)
    if len(pieces) == 2:
        text = _decode_inline(
            pieces[1].strip(),
            TransferEncoding.from_header(encoding.group(1) if encoding else None),
        )
    text = _RESIDUAL_HEADER_LINE.sub("", text)
    text = _BOUNDARY_LINE.sub("", text)
    return text.strip()


def _clean(body: str, config: MimeProcessorConfig) -> str:
    cleaned = body.replace("\r\n", "\n").strip()

    tree = MimeTreeBuilder(max_depth=config.max_nesting_depth).build(cleaned)
    if tree is not None:
        text_content = ""
        html_content = ""
        for leaf in iter_leaves(tree):
            content_type = leaf.headers.content_type
            if leaf.opaque or leaf.content is None:
                continue
            if content_type == _TEXT_PLAIN:
                text_content = _decode_inline(leaf.content, leaf.headers.transfer_encoding)
            elif content_type == _TEXT_HTML and not text_content:
                html_content = _decode_inline(leaf.content, leaf.headers.transfer_encoding)

        if text_content:
            cleaned = text_content
        elif html_content:
            cleaned = html_to_text(html_content, list_breaks=True)

    if "Content-Type:" in cleaned or "Content-Transfer-Encoding:" in cleaned:
        cleaned = _strip_residual_mime(cleaned)

    cleaned = _EXCESS_NEWLINES.sub("\n\n", cleaned).strip()

    if config.collapse_forwarded:
        cleaned = collapse_forwarded_content(cleaned)
    if config.truncate_urls:
        cleaned = truncate_long_urls(cleaned, config.max_url_length)
    return cleaned


def clean_message_body(
    body: str | None, config: MimeProcessorConfig | None = None
) -> str:
    """Return display text for a stored message body.

    Parameters
    ----------
    body:
        The stored ``body_text``; may be None.
    config:
        Engine configuration. Uses defaults when *None*.

    Returns
    -------
    str
        Cleaned text, or :data:`EMPTY_BODY_PLACEHOLDER` when nothing is left.
    """
    if not body:
        return EMPTY_BODY_PLACEHOLDER

    try:
        cleaned = _clean(body, config or MimeProcessorConfig())
    except Exception:
        logger.warning(
            "supportkit_mime | stage=display | detail=cleaner failed, showing stored body",
            exc_info=True,
        )
        cleaned = body.strip()

    return cleaned or EMPTY_BODY_PLACEHOLDER


def collapse_forwarded_content(text: str) -> str:
    """Keep only the text above the first forward or quote separator."""
    starts = sorted(
        match.start()
        for match in (separator.search(text) for separator in _FORWARD_SEPARATORS)
        if match is not None
    )
    for start in starts:
        before = text[:start].strip()
        if before:
            return f"{before}\n\n{FORWARDED_MARKER}"
    return text


def truncate_long_urls(text: str, max_length: int = 80) -> str:
    """Shorten URLs longer than *max_length* (tracking links and the like)."""

    def _shorten(match: re.Match[str]) -> str:
        url = match.group(0)
        if len(url) <= max_length:
            return url
        try:
            parts = urlsplit(url)
            host = parts.hostname
        except ValueError:
            host = None
        if host:
            return f"{parts.scheme}://{host}/{TRUNCATED_URL_SUFFIX}"
        return url[:max_length] + TRUNCATED_URL_SUFFIX

    return _URL.sub(_shorten, text)


def is_renderable_html(html: str | None) -> bool:
    """Return True if *html* looks like real HTML rather than raw MIME."""
    if not html:
        return False
    if _HTML_MIME_HEADER.search(html):
        return False
    if _HTML_BOUNDARY_LINE.search(html):
        return False

    base64_chars = sum(len(run) for run in _HTML_BASE64_RUN.findall(html))
    if base64_chars / len(html) > _MAX_BASE64_RATIO:
        return False

    return _HTML_TAG.search(html) is not None
