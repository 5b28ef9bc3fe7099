"""
Tests for the background log watcher.

poll_once is exercised directly for block-range bookkeeping; the threaded
tests synchronise with threading.Event and a generous timeout.
"""

import threading

import pytest

from erc721_sdk.errors import ListenerError, RpcError
from erc721_sdk.models import ListenerStatus
from erc721_sdk.watcher import LogWatcher

from .conftest import CONTRACT, OWNER, RECIPIENT, StubTransport, transfer_log

WAIT = 5.0


class TestPollOnce:
    """Block range bookkeeping without a thread."""

    def test_starts_at_current_head(self) -> None:
        transport = StubTransport(head=500)
        watcher = LogWatcher(transport, CONTRACT, lambda log: None)

        watcher.poll_once()

        assert transport.log_requests == [(CONTRACT, 500, 500)]
        assert watcher.next_block == 501

    def test_explicit_from_block(self) -> None:
        transport = StubTransport(head=120)
        watcher = LogWatcher(transport, CONTRACT, lambda log: None, from_block=100)

        watcher.poll_once()

        assert transport.log_requests == [(CONTRACT, 100, 120)]

    def test_waits_for_new_blocks(self) -> None:
        transport = StubTransport(head=10)
        watcher = LogWatcher(transport, CONTRACT, lambda log: None)
        watcher.poll_once()

        assert watcher.poll_once() == 0
        assert len(transport.log_requests) == 1

        transport.head = 12
        watcher.poll_once()
        assert transport.log_requests[-1] == (CONTRACT, 11, 12)

    def test_caps_block_range(self) -> None:
        transport = StubTransport(head=10_000)
        watcher = LogWatcher(
            transport, CONTRACT, lambda log: None, from_block=0, max_block_range=1_000
        )

        watcher.poll_once()
        watcher.poll_once()

        assert transport.log_requests == [(CONTRACT, 0, 999), (CONTRACT, 1_000, 1_999)]

    def test_delivers_in_order(self) -> None:
        transport = StubTransport()
        received = []
        watcher = LogWatcher(transport, CONTRACT, received.append)
        logs = [transfer_log(OWNER, RECIPIENT, i) for i in (5, 3, 9)]
        transport.push_logs(*logs)

        assert watcher.poll_once() == 3
        assert received == logs

    def test_stops_mid_batch_after_cancel(self) -> None:
        transport = StubTransport()
        received = []
        watcher = LogWatcher(transport, CONTRACT, lambda log: (received.append(log), watcher.cancel()))
        transport.push_logs(transfer_log(OWNER, RECIPIENT, 1), transfer_log(OWNER, RECIPIENT, 2))

        watcher.poll_once()

        assert len(received) == 1

    @pytest.mark.parametrize("kwargs", [{"poll_interval": 0}, {"max_block_range": 0}])
    def test_invalid_settings(self, kwargs) -> None:
        with pytest.raises(ValueError):
            LogWatcher(StubTransport(), CONTRACT, lambda log: None, **kwargs)


class TestLifecycle:
    def test_start_and_cancel(self) -> None:
        transport = StubTransport()
        delivered = threading.Event()
        watcher = LogWatcher(transport, CONTRACT, lambda log: delivered.set(), poll_interval=0.01)
        transport.push_logs(transfer_log(OWNER, RECIPIENT, 1))

        watcher.start()
        assert watcher.status == ListenerStatus.RUNNING
        assert delivered.wait(WAIT)

        assert watcher.cancel() is True
        assert watcher.status == ListenerStatus.STOPPED
        watcher.join(WAIT)

    def test_cancel_when_not_running(self) -> None:
        watcher = LogWatcher(StubTransport(), CONTRACT, lambda log: None)
        assert watcher.cancel() is False

    def test_cannot_start_twice(self) -> None:
        watcher = LogWatcher(StubTransport(), CONTRACT, lambda log: None, poll_interval=0.01)
        watcher.start()
        try:
            with pytest.raises(RuntimeError):
                watcher.start()
        finally:
            watcher.cancel()

    def test_transport_error_is_terminal(self) -> None:
        transport = StubTransport()
        transport.logs_error = RpcError("node unavailable")
        failed = threading.Event()
        watcher = LogWatcher(
            transport, CONTRACT, lambda log: None, poll_interval=0.01, on_error=lambda e: failed.set()
        )

        watcher.start()

        assert failed.wait(WAIT)
        assert watcher.status == ListenerStatus.FAILED
        assert watcher.error is transport.logs_error
        with pytest.raises(ListenerError) as exc_info:
            watcher.join(WAIT)
        assert exc_info.value.__cause__ is transport.logs_error
        assert exc_info.value.code == "LISTENER_FAILED"
        assert len(transport.log_requests) == 1

    def test_callback_error_is_terminal(self) -> None:
        transport = StubTransport()
        failed = threading.Event()

        def on_log(log):
            raise KeyError("handler bug")

        watcher = LogWatcher(
            transport, CONTRACT, on_log, poll_interval=0.01, on_error=lambda e: failed.set()
        )
        transport.push_logs(transfer_log(OWNER, RECIPIENT, 1))

        watcher.start()

        assert failed.wait(WAIT)
        assert isinstance(watcher.error, KeyError)


class BlockingLogsTransport(StubTransport):
    """get_logs blocks until released, then raises."""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error
        self.entered = threading.Event()
        self.release = threading.Event()

    def get_logs(self, contract, from_block, to_block):
        self.entered.set()
        self.release.wait(WAIT)
        raise self.error


class TestCancelDuringPoll:
    """An error from a request in flight at cancel time is not a failure."""

    def test_error_after_cancel_leaves_watcher_stopped(self) -> None:
        transport = BlockingLogsTransport(RpcError("read timed out"))
        errors = []
        watcher = LogWatcher(
            transport, CONTRACT, lambda log: None, poll_interval=0.01, on_error=errors.append
        )

        watcher.start()
        assert transport.entered.wait(WAIT)
        watcher.cancel()
        transport.release.set()
        watcher.join(WAIT)

        assert watcher.status == ListenerStatus.STOPPED
        assert watcher.error is None
        assert errors == []

    def test_error_without_cancel_still_fails(self) -> None:
        transport = BlockingLogsTransport(RpcError("read timed out"))
        failed = threading.Event()
        watcher = LogWatcher(
            transport, CONTRACT, lambda log: None, poll_interval=0.01, on_error=lambda e: failed.set()
        )

        watcher.start()
        transport.release.set()

        assert failed.wait(WAIT)
        assert watcher.status == ListenerStatus.FAILED
