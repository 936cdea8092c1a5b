"""Pre-flight checks for stored message bodies.

Validates emptiness, size and embedded NUL characters before a body is
handed to the extractor by a batch job.
"""

from __future__ import annotations

import logging

from supportkit_mime.config import MimeProcessorConfig
from supportkit_mime.errors import ErrorCode, IngestError

logger = logging.getLogger("supportkit_mime")


class BodySecurityScanner:
    """Run pre-flight checks on a raw message body.

    Returns a list of errors/warnings.  Fatal errors (``E_*`` codes)
    mean the body should not be processed further.
    """

    def __init__(self, config: MimeProcessorConfig) -> None:
        self.config = config

    def scan(self, body: str | None, message_id: str | None = None) -> list[IngestError]:
        """Run all pre-flight checks.

        Returns
        -------
        list[IngestError]
            A list of errors/warnings.  Fatal errors have codes starting
            with ``E_``.
        """
        errors: list[IngestError] = []

        # 1. Empty body
        if not body or not body.strip():
            errors.append(
                IngestError(
                    code=ErrorCode.E_MIME_EMPTY_BODY,
                    message="Body is empty",
                    stage="security",
                    message_id=message_id,
                )
            )
            return errors

        # 2. Size
        size = len(body.encode("utf-8", errors="replace"))
        max_bytes = self.config.max_body_size_mb * 1024 * 1024
        if size > max_bytes:
            errors.append(
                IngestError(
                    code=ErrorCode.E_MIME_BODY_TOO_LARGE,
                    message=f"Body size {size} bytes exceeds limit of {max_bytes} bytes",
                    stage="security",
                    message_id=message_id,
                )
            )
            return errors

        # 3. NUL characters (usually binary data pasted into a text column)
        if "\x00" in body:
            errors.append(
                IngestError(
                    code=ErrorCode.W_MIME_NUL_BYTES,
                    message="Body contains NUL characters",
                    stage="security",
                    recoverable=True,
                    message_id=message_id,
                )
            )

        return errors
