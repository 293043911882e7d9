from __future__ import annotations

from blame_stats.cancel import CancelToken


def test_callbacks_run_once_on_cancel() -> None:
    token = CancelToken()
    calls: list[str] = []
    with token.on_cancel(lambda: calls.append("kill")):
        assert calls == []
        token.cancel("test")
        token.cancel("again")
    assert calls == ["kill"]
    assert token.cancelled
    assert token.reason == "test"


def test_callback_registered_after_cancel_runs_immediately() -> None:
    token = CancelToken()
    token.cancel()
    calls: list[int] = []
    with token.on_cancel(lambda: calls.append(1)):
        assert calls == [1]
    assert calls == [1]


def test_unregistered_callback_is_not_run() -> None:
    token = CancelToken()
    calls: list[int] = []
    with token.on_cancel(lambda: calls.append(1)):
        pass
    token.cancel()
    assert calls == []


def test_oserror_from_callback_is_ignored() -> None:
    token = CancelToken()

    def gone() -> None:
        raise ProcessLookupError("already exited")

    with token.on_cancel(gone):
        token.cancel()
    assert token.cancelled
