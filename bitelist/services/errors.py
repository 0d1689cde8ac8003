from __future__ import annotations


class ServiceError(Exception):
    pass


class InvalidURLError(ServiceError):
    pass


class UpstreamUnavailableError(ServiceError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkTimeoutError(UpstreamUnavailableError):
    def __init__(self, url: str, timeout_seconds: float):
        super().__init__(f"Network timeout after {timeout_seconds}s: {url}")
        self.url = url
        self.timeout_seconds = timeout_seconds


class QuotaExceededError(ServiceError):
    def __init__(self, message: str = "API quota exceeded", status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NoContentFoundError(ServiceError):
    pass


class ExtractionCancelledError(ServiceError):
    def __init__(self, stage: str):
        super().__init__(f"Extraction cancelled before stage: {stage}")
        self.stage = stage
