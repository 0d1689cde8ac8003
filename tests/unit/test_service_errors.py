from __future__ import annotations

import pytest

from bitelist.services.errors import (
    ServiceError,
    InvalidURLError,
    UpstreamUnavailableError,
    NetworkTimeoutError,
    QuotaExceededError,
    NoContentFoundError,
    ExtractionCancelledError,
)


class TestServiceError:
    def test_base_exception(self) -> None:
        error = ServiceError("Base service error")
        assert str(error) == "Base service error"
        assert isinstance(error, Exception)


class TestInvalidURLError:
    def test_invalid_url(self) -> None:
        error = InvalidURLError("Missing YouTube video id")
        assert "video id" in str(error)
        assert isinstance(error, ServiceError)


class TestUpstreamUnavailableError:
    def test_defaults_to_no_status(self) -> None:
        error = UpstreamUnavailableError("Malformed response")
        assert str(error) == "Malformed response"
        assert error.status_code is None

    def test_keeps_status_code(self) -> None:
        error = UpstreamUnavailableError("YouTube API error with status code: 500", status_code=500)
        assert error.status_code == 500


class TestNetworkTimeoutError:
    def test_timeout_with_url_and_seconds(self) -> None:
        error = NetworkTimeoutError("https://example.com/videos", 15.0)
        assert "https://example.com/videos" in str(error)
        assert "15" in str(error)
        assert error.url == "https://example.com/videos"
        assert error.timeout_seconds == 15.0

    def test_is_an_upstream_failure(self) -> None:
        error = NetworkTimeoutError("https://example.com", 10.0)
        assert isinstance(error, UpstreamUnavailableError)
        assert error.status_code is None


class TestQuotaExceededError:
    def test_default_message(self) -> None:
        error = QuotaExceededError()
        assert str(error) == "API quota exceeded"
        assert error.status_code is None

    def test_custom_message_and_status(self) -> None:
        error = QuotaExceededError("YouTube API quota exceeded", status_code=403)
        assert "YouTube" in str(error)
        assert error.status_code == 403


class TestExtractionCancelledError:
    def test_includes_stage(self) -> None:
        error = ExtractionCancelledError("transcript")
        assert "transcript" in str(error)
        assert error.stage == "transcript"


class TestExceptionHierarchy:
    def test_all_errors_inherit_from_service_error(self) -> None:
        assert issubclass(InvalidURLError, ServiceError)
        assert issubclass(UpstreamUnavailableError, ServiceError)
        assert issubclass(NetworkTimeoutError, ServiceError)
        assert issubclass(QuotaExceededError, ServiceError)
        assert issubclass(NoContentFoundError, ServiceError)
        assert issubclass(ExtractionCancelledError, ServiceError)

    def test_quota_is_not_an_upstream_failure(self) -> None:
        assert not issubclass(QuotaExceededError, UpstreamUnavailableError)
        assert not issubclass(NoContentFoundError, UpstreamUnavailableError)
