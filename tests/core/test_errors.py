"""Tests for error types and factory methods."""

import pytest

from figmabridge.core.errors import (
    ConfigError,
    DomainError,
    ErrorCode,
    FigmaBridgeError,
    InternalError,
    RemoteToolError,
    TransportError,
)


class TestFigmaBridgeError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = FigmaBridgeError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        # Given
        error = FigmaBridgeError(code=ErrorCode.INTERNAL_ERROR, message="Something broke")

        # When
        result = str(error)

        # Then
        assert result == "[9001] INTERNAL_ERROR: Something broke"


class TestTransportError:
    """TransportError factory method tests."""

    @pytest.mark.parametrize(
        ("factory", "args", "expected_code"),
        [
            ("server_unavailable", (), ErrorCode.SERVER_UNAVAILABLE),
            ("authentication_failed", (), ErrorCode.AUTHENTICATION_FAILED),
            ("timeout", (30.0,), ErrorCode.TIMEOUT),
            ("invalid_response", ("garbage",), ErrorCode.INVALID_RESPONSE),
            ("http_error", (500,), ErrorCode.HTTP_ERROR),
            ("stream_ended", (), ErrorCode.STREAM_ENDED),
            ("no_session_endpoint", (), ErrorCode.NO_SESSION_ENDPOINT),
            ("request_failed", ("connection refused",), ErrorCode.REQUEST_FAILED),
        ],
    )
    def test_given_factory_when_called_then_correct_code(
        self, factory: str, args: tuple[object, ...], expected_code: ErrorCode
    ) -> None:
        """Factory methods produce errors with correct error codes."""
        # Given
        factory_method = getattr(TransportError, factory)

        # When
        error = factory_method(*args)

        # Then
        assert error.code == expected_code

    def test_given_authentication_failure_when_created_then_not_retryable(self) -> None:
        """A 401 is the only transport failure that is never retried."""
        # Given / When
        error = TransportError.authentication_failed()

        # Then
        assert error.retryable is False
        assert error.details["status"] == 401

    def test_given_unavailable_with_reason_when_created_then_reason_in_message(self) -> None:
        """Server unavailable keeps the standard message and appends the reason."""
        # Given / When
        error = TransportError.server_unavailable("HTTP 502")

        # Then
        assert error.retryable is True
        assert error.message.startswith("Figma MCP server is not available")
        assert "(HTTP 502)" in error.message

    @pytest.mark.parametrize(
        ("kwargs", "expected_details"),
        [
            ({}, {}),
            ({"status": 503}, {"status": 503}),
            ({"reason": "connection check failed"}, {"reason": "connection check failed"}),
        ],
    )
    def test_given_unavailable_when_created_then_status_only_when_observed(
        self, kwargs: dict[str, object], expected_details: dict[str, object]
    ) -> None:
        """An HTTP status is recorded only when one was actually received."""
        # Given / When
        error = TransportError.server_unavailable(**kwargs)  # type: ignore[arg-type]

        # Then
        assert error.details == expected_details

    def test_given_timeout_when_created_then_is_timeout(self) -> None:
        """Timeout errors are flagged for the tracker."""
        # Given / When
        timeout = TransportError.timeout(1.5)
        other = TransportError.stream_ended()

        # Then
        assert timeout.is_timeout is True
        assert timeout.message == "Response timeout after 1.5s"
        assert other.is_timeout is False


class TestRemoteToolError:
    """RemoteToolError tests."""

    def test_given_rpc_error_when_converted_then_carries_tool_and_code(self) -> None:
        """JSON-RPC error payloads keep their code in details."""
        # Given / When
        error = RemoteToolError.from_rpc("get_code", -32603, "Node too large")

        # Then
        assert error.code == ErrorCode.REMOTE_TOOL_ERROR
        assert error.message == "get_code failed: Node too large"
        assert error.details == {"tool": "get_code", "rpc_code": -32603}
        assert error.retryable is False


class TestDomainError:
    """DomainError tests."""

    def test_given_bad_url_when_invalid_url_then_url_in_details(self) -> None:
        """Invalid URL errors carry the offending URL."""
        # Given
        url = "https://example.com/nothing"

        # When
        error = DomainError.invalid_url(url)

        # Then
        assert error.code == ErrorCode.INVALID_URL
        assert error.message == "Invalid Figma URL format"
        assert error.details["url"] == url

    def test_given_no_input_when_missing_input_then_mentions_both_fields(self) -> None:
        """Missing input names both accepted inputs."""
        # Given / When
        error = DomainError.missing_input()

        # Then
        assert "figmaData" in error.message
        assert "url" in error.message


class TestConfigError:
    """ConfigError factory method tests."""

    def test_given_parse_error_when_created_then_path_in_details(self) -> None:
        """Parse error includes file path in details."""
        # Given
        path = "/config.yaml"
        reason = "invalid syntax"

        # When
        error = ConfigError.parse_error(path, reason)

        # Then
        assert error.code == ErrorCode.CONFIG_PARSE_ERROR
        assert error.details["path"] == path
        assert reason in error.message

    def test_given_invalid_value_when_created_then_value_stringified(self) -> None:
        """Invalid values are stored as strings."""
        # Given / When
        error = ConfigError.invalid_value("server.timeout_sec", 0.1, "too small")

        # Then
        assert error.code == ErrorCode.CONFIG_INVALID_VALUE
        assert error.details["value"] == "0.1"


class TestInternalError:
    """InternalError tests."""

    def test_given_unexpected_error_when_created_then_includes_extras(self) -> None:
        """Unexpected error captures arbitrary extra details."""
        # Given
        extras = {"foo": "bar", "count": 42}

        # When
        error = InternalError.unexpected("boom", **extras)

        # Then
        assert error.details == extras
        assert error.code == ErrorCode.INTERNAL_ERROR
