"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import structlog

from figmabridge.config.models import LoggingConfig, LogOutputConfig
from figmabridge.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from figmabridge.core.progress import suppress_console_logs


class TestRequestIdCorrelation:
    """Request ID context variable tests."""

    def setup_method(self) -> None:
        """Clear request ID before each test."""
        clear_request_id()

    def test_given_request_id_when_set_then_can_retrieve(self) -> None:
        """Request ID can be set and retrieved."""
        # Given
        request_id = "extract-123"

        # When
        result = set_request_id(request_id)

        # Then
        assert result == request_id
        assert get_request_id() == request_id

    def test_given_no_id_when_set_then_generates_short_hex(self) -> None:
        """Set generates a 12 character id when none provided."""
        # When
        rid = set_request_id()

        # Then
        assert len(rid) == 12

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        """Clear removes the current request ID."""
        # Given
        set_request_id("to-clear")

        # When
        clear_request_id()

        # Then
        assert get_request_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_request_id()

    def test_given_file_output_when_log_then_json_lines_written(self, tmp_path: Path) -> None:
        """JSON file output carries event, fields, level and timestamp."""
        # Given
        log_file = tmp_path / "bridge.log"
        configure_logging(
            config=LoggingConfig(level="INFO", outputs=[LogOutputConfig(format="json", destination=str(log_file))])
        )

        # When
        get_logger("test").info("rpc_call_ok", method="tools/list")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "rpc_call_ok"
        assert data["method"] == "tools/list"
        assert data["level"] == "info"
        assert "timestamp" in data

    def test_given_request_id_when_log_then_id_attached(self, tmp_path: Path) -> None:
        """The active request id is added to every event."""
        # Given
        log_file = tmp_path / "bridge.log"
        configure_logging(
            config=LoggingConfig(level="INFO", outputs=[LogOutputConfig(format="json", destination=str(log_file))])
        )
        set_request_id("abc123")

        # When
        get_logger().info("extraction_started")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["request_id"] == "abc123"

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        # Given
        log_file = tmp_path / "debug.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When
        configure_logging(config=config, json_format=False, level="ERROR")
        get_logger().debug("sse_frame_undecodable")

        # Then
        assert "sse_frame_undecodable" in log_file.read_text()

    def test_given_per_output_level_when_log_then_filtered_per_output(self, tmp_path: Path) -> None:
        """Each output applies its own level."""
        # Given
        debug_file = tmp_path / "debug.log"
        warn_file = tmp_path / "warn.log"
        configure_logging(
            config=LoggingConfig(
                level="DEBUG",
                outputs=[
                    LogOutputConfig(format="json", destination=str(debug_file), level="DEBUG"),
                    LogOutputConfig(format="json", destination=str(warn_file), level="WARNING"),
                ],
            )
        )
        logger = get_logger()

        # When
        logger.debug("cache_hit")
        logger.warning("rpc_call_retry")

        # Then
        assert "cache_hit" in debug_file.read_text()
        assert "rpc_call_retry" in debug_file.read_text()
        assert "cache_hit" not in warn_file.read_text()
        assert "rpc_call_retry" in warn_file.read_text()

    def test_given_suppressed_console_when_log_then_files_still_written(self, tmp_path: Path) -> None:
        """Console suppression during spinners never affects file outputs."""
        # Given
        log_file = tmp_path / "bridge.log"
        configure_logging(
            config=LoggingConfig(
                level="INFO",
                outputs=[
                    LogOutputConfig(format="console", destination="stderr"),
                    LogOutputConfig(format="json", destination=str(log_file)),
                ],
            )
        )

        # When
        with suppress_console_logs():
            get_logger().info("connection_probe_failed")

        # Then
        assert "connection_probe_failed" in log_file.read_text()
