"""
Unit tests for structured error logging.
"""

import json

from src.core.error_logger import ErrorLogger
from src.core.error_models import ErrorComponent, ErrorRecord, ErrorStage, ErrorType
from src.core.errors import RateLimitedError


def read_records(directory):
    records = []
    for path in sorted(directory.glob("errors_*.jsonl")):
        records.extend(json.loads(line) for line in path.read_text(encoding="utf-8").splitlines())
    return records


class TestErrorRecord:
    """Tests for ErrorRecord model."""

    def test_blank_fields_get_placeholders(self):
        record = ErrorRecord(
            component=ErrorComponent.SESSION, stage="  ", error_type=ErrorType.TIMEOUT, message=""
        )
        assert record.stage == "unknown"
        assert record.message == "No error message provided"

    def test_from_harvest_error(self):
        """Test that classified errors keep their kind, URL and metadata."""
        exc = RateLimitedError("HTTP 429", url="https://www.linkedin.com/search/", backoff_seconds=1800)
        record = ErrorRecord.from_exception(exc, ErrorComponent.LEDGER, ErrorStage.NAVIGATE)
        assert record.error_type == "rate_limited"
        assert record.url == "https://www.linkedin.com/search/"
        assert record.metadata["backoff_seconds"] == 1800
        assert record.exception_type.endswith("RateLimitedError")

    def test_metadata_is_sanitized(self):
        record = ErrorRecord(
            component=ErrorComponent.SINK,
            stage=ErrorStage.SINK_CREATE,
            error_type=ErrorType.SINK_ERROR,
            message="boom",
            metadata={"ok": 1, "obj": object()},
        )
        assert record.metadata["ok"] == 1
        assert isinstance(record.metadata["obj"], str)


class TestErrorLogger:
    """Tests for ErrorLogger."""

    def test_file_fallback(self, tmp_path):
        """Test that records land in a dated JSONL file without a database."""
        error_logger = ErrorLogger(fallback_dir=tmp_path / "errors")
        assert error_logger.db_available is False

        assert error_logger.log_error(
            ErrorComponent.SESSION,
            ErrorStage.NAVIGATE,
            ErrorType.TIMEOUT,
            "Navigation timeout",
            company="Acme Corp",
        ) is True

        records = read_records(tmp_path / "errors")
        assert len(records) == 1
        assert records[0]["component"] == "session"
        assert records[0]["company"] == "Acme Corp"

    def test_database_insert(self, tmp_path, mock_supabase_client):
        error_logger = ErrorLogger(fallback_dir=tmp_path / "errors", table="error_logs", client=mock_supabase_client)
        error_logger.log_exception(ValueError("bad row"), ErrorComponent.SINK, ErrorStage.SINK_CREATE)

        table = mock_supabase_client.tables["error_logs"]
        assert table.calls == ["insert"]
        assert table.rows[0]["message"] == "bad row"
        assert read_records(tmp_path / "errors") == []

    def test_database_failure_falls_back_to_file(self, tmp_path):
        """Test that a failing insert is written to the file instead."""
        class BrokenClient:
            def table(self, name):
                raise ConnectionError("supabase down")

        error_logger = ErrorLogger(fallback_dir=tmp_path / "errors", client=BrokenClient())
        assert error_logger.log_error(
            ErrorComponent.SINK, ErrorStage.SINK_CREATE, ErrorType.SINK_ERROR, "insert failed"
        ) is True
        assert read_records(tmp_path / "errors")[0]["message"] == "insert failed"

    def test_never_raises(self, tmp_path):
        """Test that an invalid record is reported as a failure, not raised."""
        error_logger = ErrorLogger(fallback_dir=tmp_path / "errors")
        assert error_logger.log_error(
            ErrorComponent.SESSION, ErrorStage.NAVIGATE, ErrorType.TIMEOUT, "x", run_id="r" * 100
        ) is False

    def test_from_config_without_supabase(self, config):
        error_logger = ErrorLogger.from_config(config)
        assert error_logger.db_available is False
        assert (config.log_dir / "errors").is_dir()
