"""Shared fixtures for supportkit-mime tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from supportkit_mime.models import StoredMessage


# ---------------------------------------------------------------------------
# Raw body fixtures
# ---------------------------------------------------------------------------

ALTERNATIVE_BODY = (
    'Content-Type: multipart/alternative; boundary="abc"\r\n'
    "\r\n"
    "--abc\r\n"
    "Content-Type: text/plain\r\n"
    "\r\n"
    "Hello\r\n"
    "--abc\r\n"
    "Content-Type: text/html\r\n"
    "\r\n"
    "<p>Hello</p>\r\n"
    "--abc--"
)

MIXED_BODY = """Content-Type: multipart/mixed; boundary="outer"

--outer
Content-Type: multipart/alternative; boundary="inner"

--inner
Content-Type: text/plain; charset=utf-8
Content-Transfer-Encoding: quoted-printable

Ol=C3=A1, segue o pedido em anexo.
--inner
Content-Type: text/html; charset=utf-8

<p>Ol&aacute;, segue o pedido em anexo.</p>
--inner--
--outer
Content-Type: image/png; name="logo.png"
Content-Transfer-Encoding: base64

iVBORw0KGgo=
--outer
Content-Type: application/pdf; name="pedido.pdf"
Content-Disposition: attachment; filename="pedido.pdf"
Content-Transfer-Encoding: base64

JVBERi0xLjQ=
--outer--
"""

HTML_ONLY_BODY = """Content-Type: multipart/alternative; boundary="h1"

--h1
Content-Type: text/html; charset=utf-8

<style>p { color: red; }</style><p>Hello &amp; welcome</p><br>Bye
--h1--
"""

TEXT_ONLY_MIME_BODY = """Content-Type: multipart/mixed; boundary="t1"

--t1
Content-Type: text/plain; charset=utf-8

Just text
--t1--
"""

PLAIN_BODY = "Hi team,\nthe order arrived today.\n\nThanks"


@pytest.fixture
def alternative_body() -> str:
    """multipart/alternative with a text and an HTML part (CRLF)."""
    return ALTERNATIVE_BODY


@pytest.fixture
def mixed_body() -> str:
    """multipart/mixed: nested alternative plus two binary attachments."""
    return MIXED_BODY


@pytest.fixture
def html_only_body() -> str:
    """Multipart body whose only text part is text/html."""
    return HTML_ONLY_BODY


@pytest.fixture
def text_only_mime_body() -> str:
    """Multipart body with a text/plain part and no HTML."""
    return TEXT_ONLY_MIME_BODY


@pytest.fixture
def plain_body() -> str:
    """Body with no MIME structure at all."""
    return PLAIN_BODY


# ---------------------------------------------------------------------------
# Mock backends
# ---------------------------------------------------------------------------


@pytest.fixture
def stored_messages() -> list[StoredMessage]:
    """One message for every backfill outcome."""
    return [
        StoredMessage(id="m1", body_text=ALTERNATIVE_BODY, conversation_id="c1"),
        StoredMessage(id="m2", body_text=PLAIN_BODY, conversation_id="c1"),
        StoredMessage(id="m3", body_text=TEXT_ONLY_MIME_BODY, conversation_id="c2"),
        StoredMessage(id="m4", body_text="   ", conversation_id="c2"),
    ]


@pytest.fixture
def mock_store(stored_messages: list[StoredMessage]) -> MagicMock:
    """Mock satisfying the MessageStore protocol."""
    store = MagicMock()
    store.fetch_missing_html.return_value = stored_messages
    store.update_message.return_value = None
    return store
