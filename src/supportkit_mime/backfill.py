"""BackfillRunner -- re-extract HTML for stored messages that lack it.

Walks messages whose ``body_html`` is missing but whose ``body_text``
still holds raw MIME, runs them through: pre-flight checks, MIME
detection, extraction, and persistence via a :class:`MessageStore`.
"""

from __future__ import annotations

import logging
import time

from supportkit_mime.config import MimeProcessorConfig
from supportkit_mime.errors import ErrorCode, IngestError
from supportkit_mime.extractor import MimeExtractor, contains_mime_data
from supportkit_mime.models import (
    BackfillDetail,
    BackfillResult,
    BackfillStatus,
    StoredMessage,
)
from supportkit_mime.protocols import MessageStore
from supportkit_mime.security import BodySecurityScanner

logger = logging.getLogger("supportkit_mime")


class BackfillRunner:
    """Batch job that populates ``body_html`` from raw stored bodies.

    Parameters
    ----------
    store:
        Backend the messages are read from and written back to.
    config:
        Engine configuration. Uses defaults when *None*.
    """

    def __init__(
        self,
        store: MessageStore,
        config: MimeProcessorConfig | None = None,
    ) -> None:
        self._config = config or MimeProcessorConfig()
        self._store = store
        self._security_scanner = BodySecurityScanner(self._config)
        self._extractor = MimeExtractor(self._config)

    def run(
        self,
        limit: int | None = None,
        shop_id: str | None = None,
        dry_run: bool | None = None,
    ) -> BackfillResult:
        """Process one batch of messages.

        Parameters
        ----------
        limit:
            Maximum number of messages to fetch; defaults to
            ``config.backfill_limit``.
        shop_id:
            Restrict the batch to one shop's conversations.
        dry_run:
            Report what would change without writing; defaults to
            ``config.dry_run``.

        Returns
        -------
        BackfillResult
            Counters and per-message details.  Store failures are reported
            here, never raised.
        """
        overall_start = time.monotonic()
        config = self._config
        if limit is None:
            limit = config.backfill_limit
        if dry_run is None:
            dry_run = config.dry_run

        result = BackfillResult(
            parser_version=config.parser_version,
            tenant_id=config.tenant_id,
            dry_run=dry_run,
        )

        # ==============================================================
        # Step 1: Fetch candidates
        # ==============================================================
        try:
            messages = self._store.fetch_missing_html(limit, shop_id)
        except Exception as exc:
            logger.error(
                "supportkit_mime | stage=fetch | code=%s | detail=%s",
                ErrorCode.E_BACKFILL_FETCH_FAILED.value,
                str(exc),
            )
            result.errors = 1
            result.error_details.append(
                IngestError(
                    code=ErrorCode.E_BACKFILL_FETCH_FAILED,
                    message=f"Failed to fetch messages: {exc}",
                    stage="fetch",
                )
            )
            result.processing_time_seconds = time.monotonic() - overall_start
            return result

        result.total_checked = len(messages)

        # ==============================================================
        # Step 2: Process each message independently
        # ==============================================================
        for message in messages:
            self._process_message(message, dry_run, result)

        result.processing_time_seconds = time.monotonic() - overall_start
        logger.info(
            "supportkit_mime | stage=backfill | dry_run=%s | checked=%d | updated=%d | "
            "no_mime=%d | no_html=%d | rejected=%d | errors=%d",
            dry_run,
            result.total_checked,
            result.updated,
            result.skipped_no_mime,
            result.skipped_no_html,
            result.skipped_rejected,
            result.errors,
        )
        return result

    def _process_message(
        self, message: StoredMessage, dry_run: bool, result: BackfillResult
    ) -> None:
        body = message.body_text

        # Pre-flight checks
        issues = self._security_scanner.scan(body, message_id=message.id)
        fatal = [e for e in issues if e.is_fatal]
        if fatal:
            logger.debug(
                "supportkit_mime | id=%s | code=%s | detail=%s",
                message.id,
                fatal[0].code.value,
                fatal[0].message,
            )
            result.skipped_rejected += 1
            result.details.append(
                BackfillDetail(id=message.id, status=BackfillStatus.REJECTED)
            )
            result.error_details.extend(fatal)
            return

        for issue in issues:
            logger.warning(
                "supportkit_mime | id=%s | code=%s | detail=%s",
                message.id,
                issue.code.value,
                issue.message,
            )
        result.error_details.extend(issues)

        if not contains_mime_data(body):
            result.skipped_no_mime += 1
            return

        # Extraction
        extracted = self._extractor.extract(body)
        if not extracted.html_content:
            result.skipped_no_html += 1
            result.details.append(
                BackfillDetail(
                    id=message.id,
                    status=BackfillStatus.NO_HTML_FOUND,
                    warnings=extracted.warnings,
                )
            )
            return

        html_length = len(extracted.html_content)
        if dry_run:
            result.updated += 1
            result.details.append(
                BackfillDetail(
                    id=message.id,
                    status=BackfillStatus.WOULD_UPDATE,
                    html_length=html_length,
                    warnings=extracted.warnings,
                )
            )
            return

        # Persistence
        try:
            self._store.update_message(
                message.id,
                extracted.html_content,
                extracted.has_attachments,
                extracted.attachment_count,
            )
        except Exception as exc:
            logger.error(
                "supportkit_mime | id=%s | code=%s | detail=%s",
                message.id,
                ErrorCode.E_BACKFILL_WRITE_FAILED.value,
                str(exc),
            )
            result.errors += 1
            result.details.append(
                BackfillDetail(
                    id=message.id,
                    status=BackfillStatus.ERROR,
                    warnings=extracted.warnings,
                )
            )
            result.error_details.append(
                IngestError(
                    code=ErrorCode.E_BACKFILL_WRITE_FAILED,
                    message=f"Failed to update message: {exc}",
                    stage="persist",
                    recoverable=True,
                    message_id=message.id,
                )
            )
            return

        result.updated += 1
        result.details.append(
            BackfillDetail(
                id=message.id,
                status=BackfillStatus.UPDATED,
                html_length=html_length,
                warnings=extracted.warnings,
            )
        )
