"""Tests for supportkit_mime.decoding."""

from __future__ import annotations

import base64
import quopri

import pytest

from supportkit_mime.decoding import (
    DecodeOutcome,
    b64_to_bytes,
    decode_b64,
    decode_payload,
    decode_qp,
    decode_qp_text,
    decode_transfer,
    normalize_charset,
    qp_to_bytes,
    resolve_codec,
)
from supportkit_mime.models import TransferEncoding


class TestCharsets:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("UTF-8", "utf-8"),
            ('"utf8"', "utf8"),
            ("iso-8859-1;", "iso-8859-1"),
            ("Windows-1252", "windows-1252"),
        ],
    )
    def test_normalize_charset(self, raw, expected):
        assert normalize_charset(raw) == expected

    def test_normalize_empty_uses_default(self):
        assert normalize_charset(None) == "utf-8"
        assert normalize_charset("***") == "utf-8"
        assert normalize_charset("", default="latin-1") == "latin-1"

    def test_resolve_codec_aliases(self):
        assert resolve_codec("UTF8") == "utf-8"
        assert resolve_codec("latin1") == "iso8859-1"

    def test_resolve_codec_unknown(self):
        assert resolve_codec("x-unknown-charset") is None

    def test_resolve_codec_rejects_bytes_codecs(self):
        """Codecs such as base64 are not text encodings."""
        assert resolve_codec("base64") is None


class TestDecodePayload:
    def test_declared_charset(self):
        outcome = decode_payload(b"caf\xe9", "windows-1252", "original")
        assert outcome == DecodeOutcome(text="café", codec="cp1252")

    def test_unknown_charset_falls_back_to_utf8(self):
        outcome = decode_payload("café".encode("utf-8"), "x-unknown", "original")
        assert outcome.text == "café"
        assert outcome.fallback is True
        assert outcome.ok is True

    def test_undecodable_returns_original(self):
        outcome = decode_payload(b"\xff\xfe\xfa", "utf-8", "original")
        assert outcome.ok is False
        assert outcome.text == "original"


class TestQuotedPrintable:
    def test_utf8_multibyte(self):
        assert decode_qp("Ol=C3=A1 mundo", "utf-8") == "Olá mundo"

    def test_soft_line_breaks(self):
        assert decode_qp("Hello=\r\nWorld=\nAgain") == "HelloWorldAgain"

    def test_latin1(self):
        assert decode_qp("caf=E9", "iso-8859-1") == "café"

    def test_invalid_escape_kept_literal(self):
        assert decode_qp("a=zz b=4", "utf-8") == "a=zz b=4"

    def test_non_ascii_literal_preserved(self):
        """Already-decoded characters survive next to escapes."""
        assert decode_qp("café =C3=A9", "utf-8") == "café é"

    def test_invalid_bytes_return_original(self):
        """=E9 is not valid UTF-8 on its own."""
        assert decode_qp("caf=E9", "utf-8") == "caf=E9"

    def test_round_trip_with_quopri(self):
        """Text encoded by quopri decodes back to the original."""
        original = "Olá, tudo bem? A entrega de = R$ 50,00 chegou. " * 5
        encoded = quopri.encodestring(original.encode("utf-8")).decode("ascii")
        assert "=\n" in encoded
        assert decode_qp(encoded, "utf-8") == original

    def test_qp_to_bytes(self):
        assert qp_to_bytes("A=3DB=\nC") == b"A=BC"

    def test_string_level_decode(self):
        """No charset handling: each escape becomes one code point."""
        assert decode_qp_text("caf=E9") == "café"
        assert decode_qp_text("Ol=C3=A1") == "OlÃ¡"


class TestBase64:
    def test_decode(self):
        assert decode_b64("SGVsbG8gV29ybGQ=") == "Hello World"

    def test_round_trip_wrapped_lines(self):
        """Line-wrapped base64 decodes after whitespace removal."""
        original = "Seu pedido foi enviado. Código de rastreio: BR123. " * 4
        encoded = base64.encodebytes(original.encode("utf-8")).decode("ascii")
        assert "\n" in encoded.strip()
        assert decode_b64(encoded, "utf-8") == original

    def test_declared_charset(self):
        encoded = base64.b64encode("Ação".encode("iso-8859-1")).decode("ascii")
        assert decode_b64(encoded, "iso-8859-1") == "Ação"

    def test_malformed_returns_original(self):
        assert decode_b64("not base64 at all!") == "not base64 at all!"

    def test_binary_payload_returns_original(self):
        """Bytes that are not text in any tried charset are left encoded."""
        encoded = base64.b64encode(b"\xff\xfe\xfa\xfb").decode("ascii")
        assert decode_b64(encoded) == encoded

    def test_b64_to_bytes_bad_padding(self):
        assert b64_to_bytes("SGVsbG8") is None

    def test_b64_to_bytes_non_ascii(self):
        assert b64_to_bytes("SGVsbG8=é") is None


class TestDecodeTransfer:
    def test_identity_passthrough(self):
        outcome = decode_transfer("plain =C3 text", TransferEncoding.IDENTITY)
        assert outcome.text == "plain =C3 text"
        assert outcome.ok is True

    def test_failed_base64_reports_not_ok(self):
        outcome = decode_transfer("%%%", TransferEncoding.BASE64)
        assert outcome.ok is False
        assert outcome.text == "%%%"
