"""Backend protocols for the supportkit-mime package.

Defines ``MessageStore``, the interface the backfill runner reads stored
messages from and writes recovered HTML back to.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from supportkit_mime.models import StoredMessage


@runtime_checkable
class MessageStore(Protocol):
    """Interface for message persistence (e.g. a ``messages`` table)."""

    def fetch_missing_html(
        self, limit: int, shop_id: str | None = None
    ) -> list[StoredMessage]:
        """Return up to *limit* messages with ``body_html`` null and ``body_text`` set.

        Newest first.  When *shop_id* is given, only messages of that
        shop's conversations.
        """
        ...

    def update_message(
        self,
        message_id: str,
        body_html: str,
        has_attachments: bool,
        attachment_count: int,
    ) -> None:
        """Persist extraction results on the message keyed by *message_id*."""
        ...
