from __future__ import annotations

import threading

import pytest

from bitelist.services import cancellation
from bitelist.services.cancellation import CancellationToken
from bitelist.services.errors import ExtractionCancelledError


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(cancellation.time, "monotonic", fake)
    return fake


class TestCancellationToken:
    def test_fresh_token_is_not_cancelled(self) -> None:
        token = CancellationToken()

        assert token.cancelled is False
        assert token.remaining() is None
        token.raise_if_cancelled("user_text")

    def test_cancel_sets_flag(self) -> None:
        token = CancellationToken()
        token.cancel()

        assert token.cancelled is True
        with pytest.raises(ExtractionCancelledError) as exc_info:
            token.raise_if_cancelled("transcript")
        assert exc_info.value.stage == "transcript"

    def test_cancel_from_another_thread(self) -> None:
        token = CancellationToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()

        assert token.cancelled is True

    def test_deadline_counts_down(self, clock: FakeClock) -> None:
        token = CancellationToken(deadline_seconds=10.0)

        assert token.remaining() == pytest.approx(10.0)
        clock.now += 4.0
        assert token.remaining() == pytest.approx(6.0)
        assert token.cancelled is False

    def test_expired_deadline_cancels(self, clock: FakeClock) -> None:
        token = CancellationToken(deadline_seconds=5.0)
        clock.now += 5.0

        assert token.cancelled is True
        assert token.remaining() == 0.0
        with pytest.raises(ExtractionCancelledError):
            token.raise_if_cancelled("final")

    def test_remaining_never_negative(self, clock: FakeClock) -> None:
        token = CancellationToken(deadline_seconds=1.0)
        clock.now += 30.0

        assert token.remaining() == 0.0
