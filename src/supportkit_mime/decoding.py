"""Transfer-decoding primitives for MIME part content.

Quoted-printable and base64 content is first turned into raw bytes and then
decoded as text with the part's declared charset.  Every stage reports a
:class:`DecodeOutcome` instead of raising, and the caller picks the
fallback.  The composed chain used by :func:`decode_qp` and
:func:`decode_b64` is:

1. the declared charset (normalised, strict decoding),
2. UTF-8 (strict decoding),
3. the original, undecoded text.
"""

from __future__ import annotations

import base64
import binascii
import codecs
import re
from dataclasses import dataclass

from supportkit_mime.models import TransferEncoding

DEFAULT_CHARSET = "utf-8"

_CHARSET_JUNK = re.compile(r"[^a-z0-9-]")
_SOFT_LINE_BREAK = re.compile(r"=\r?\n")
_QP_ESCAPE = re.compile(r"=([0-9A-Fa-f]{2})")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of one decoding step.

    ``ok`` is False when every attempt failed and ``text`` is the original
    input.  ``fallback`` is True when the declared charset could not be
    used and UTF-8 was used instead.
    """

    text: str
    ok: bool = True
    codec: str | None = None
    fallback: bool = False


# ---------------------------------------------------------------------------
# Charset handling
# ---------------------------------------------------------------------------


def normalize_charset(charset: str | None, default: str = DEFAULT_CHARSET) -> str:
    """Lowercase *charset* and drop anything but letters, digits and hyphens.

    Absorbs real-world variants such as ``UTF-8``, ``"utf8"`` or
    ``iso-8859-1;``.  An empty result falls back to *default*.
    """
    if not charset:
        return default
    normalized = _CHARSET_JUNK.sub("", charset.lower())
    return normalized or default


def resolve_codec(charset: str | None) -> str | None:
    """Return the Python codec name for *charset*, or None if unknown."""
    try:
        info = codecs.lookup(normalize_charset(charset))
    except LookupError:
        return None
    # bytes-to-bytes codecs such as "base64" are not text encodings
    if not getattr(info, "_is_text_encoding", True):
        return None
    return info.name


def try_decode(data: bytes, codec: str) -> str | None:
    """Strictly decode *data* with *codec*; None when that is impossible."""
    try:
        return data.decode(codec)
    except (UnicodeDecodeError, LookupError):
        return None


def decode_payload(data: bytes, charset: str | None, original: str) -> DecodeOutcome:
    """Decode raw bytes as text: declared charset, then UTF-8, then *original*."""
    codec = resolve_codec(charset)
    if codec is not None:
        text = try_decode(data, codec)
        if text is not None:
            return DecodeOutcome(text=text, codec=codec)

    if codec != "utf-8":
        text = try_decode(data, "utf-8")
        if text is not None:
            return DecodeOutcome(text=text, codec="utf-8", fallback=True)

    return DecodeOutcome(text=original, ok=False)


# ---------------------------------------------------------------------------
# Byte-level decoders
# ---------------------------------------------------------------------------


def _encode_literal(chunk: str, codec: str | None) -> bytes:
    if not chunk:
        return b""
    if chunk.isascii():
        return chunk.encode("ascii")
    # Literal non-ASCII text is stored already decoded; re-encode it with
    # the part's own charset so it survives the final decode unchanged.
    try:
        return chunk.encode(codec or DEFAULT_CHARSET)
    except (UnicodeEncodeError, LookupError):
        return chunk.encode(DEFAULT_CHARSET, errors="replace")


def qp_to_bytes(text: str, codec: str | None = None) -> bytes:
    """Undo quoted-printable escaping and return the raw byte sequence.

    Soft line breaks (``=`` followed by a line ending) are removed first.
    Each ``=XX`` with two hex digits becomes that byte; any other ``=`` is
    kept as a literal character.
    """
    joined = _SOFT_LINE_BREAK.sub("", text)
    out = bytearray()
    pos = 0
    for match in _QP_ESCAPE.finditer(joined):
        out += _encode_literal(joined[pos : match.start()], codec)
        out.append(int(match.group(1), 16))
        pos = match.end()
    out += _encode_literal(joined[pos:], codec)
    return bytes(out)


def b64_to_bytes(text: str) -> bytes | None:
    """Strip whitespace and strictly base64-decode *text*.

    Returns None for wrong padding, characters outside the alphabet, or
    non-ASCII input.
    """
    compact = _WHITESPACE.sub("", text)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        return None


def decode_qp_text(text: str) -> str:
    """String-level quoted-printable unescape with no charset handling.

    Each ``=XX`` becomes the code point ``0xXX``.  Used where speed matters
    more than multi-byte correctness.
    """
    joined = _SOFT_LINE_BREAK.sub("", text)
    return _QP_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), joined)


# ---------------------------------------------------------------------------
# Composed decoders
# ---------------------------------------------------------------------------


def decode_transfer(
    content: str,
    encoding: TransferEncoding,
    charset: str | None = DEFAULT_CHARSET,
) -> DecodeOutcome:
    """Decode *content* according to its Content-Transfer-Encoding."""
    if encoding is TransferEncoding.QUOTED_PRINTABLE:
        data = qp_to_bytes(content, resolve_codec(charset))
    elif encoding is TransferEncoding.BASE64:
        data = b64_to_bytes(content)
        if data is None:
            return DecodeOutcome(text=content, ok=False)
    else:
        return DecodeOutcome(text=content)
    return decode_payload(data, charset, content)


def decode_qp(text: str, charset: str | None = DEFAULT_CHARSET) -> str:
    """Decode quoted-printable *text*; never raises."""
    return decode_transfer(text, TransferEncoding.QUOTED_PRINTABLE, charset).text


def decode_b64(text: str, charset: str | None = DEFAULT_CHARSET) -> str:
    """Decode base64 *text*; malformed input comes back unchanged."""
    return decode_transfer(text, TransferEncoding.BASE64, charset).text
