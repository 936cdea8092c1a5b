"""Tests for supportkit_mime.errors."""

from supportkit_mime.errors import ErrorCode, IngestError


class TestErrorCodes:
    def test_error_codes_prefixed(self):
        """All error codes start with E_ (fatal) or W_ (warning)."""
        for code in ErrorCode:
            assert code.value.startswith("E_") or code.value.startswith("W_"), (
                f"ErrorCode {code.name} does not start with E_ or W_"
            )

    def test_error_code_values_match_names(self):
        """Value == name for all members."""
        for code in ErrorCode:
            assert code.value == code.name

    def test_ingest_error_creation(self):
        """IngestError populates all fields correctly."""
        err = IngestError(
            code=ErrorCode.E_BACKFILL_WRITE_FAILED,
            message="Write failed",
            stage="persist",
            recoverable=True,
            message_id="m1",
        )
        assert err.code == ErrorCode.E_BACKFILL_WRITE_FAILED
        assert err.message == "Write failed"
        assert err.stage == "persist"
        assert err.recoverable is True
        assert err.message_id == "m1"

    def test_ingest_error_defaults(self):
        err = IngestError(code=ErrorCode.W_MIME_HTML_ONLY, message="html only")
        assert err.stage is None
        assert err.recoverable is False
        assert err.message_id is None

    def test_is_fatal(self):
        """E_ codes are fatal, W_ codes are not."""
        assert IngestError(code=ErrorCode.E_MIME_EMPTY_BODY, message="x").is_fatal
        assert not IngestError(code=ErrorCode.W_MIME_NUL_BYTES, message="x").is_fatal
