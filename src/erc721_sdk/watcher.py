"""
Background log watcher for a single contract.

LogWatcher polls ``eth_getLogs`` on a worker thread and hands every log, in
the order the provider returns them, to one ``on_log`` callable running on
that thread. It is started once and cancelled once; a fresh watcher is built
for every restart.

Cancellation is cooperative: the stop flag is checked between polls and
between log deliveries, so an in-flight callback always completes. A
transport error (or an exception raised by ``on_log``) is terminal: the
watcher records it, moves to FAILED and stops. An error raised by a request
that was already in flight when ``cancel`` ran is dropped, and the watcher
stays STOPPED.
"""

from __future__ import annotations

import threading
import traceback
from typing import Callable, Optional

from .constants import DEFAULT_POLL_INTERVAL, MAX_BLOCK_RANGE
from .errors import ListenerError
from .models import ListenerStatus, LogEntry
from .utils.logging import get_context_logger

__all__ = ["LogWatcher"]

LogCallback = Callable[[LogEntry], None]
ErrorCallback = Callable[[BaseException], None]


class LogWatcher:
    """
    Poll a contract's logs on a background thread.

    Args:
        transport: Object with ``block_number()`` and
            ``get_logs(contract, from_block, to_block)``
        contract: Contract address to watch
        on_log: Called for each log, on the watcher thread
        poll_interval: Seconds to sleep between polls
        from_block: First block to scan (defaults to the current head at start)
        on_error: Called once with the fatal error, on the watcher thread
        max_block_range: Largest block span requested in one ``eth_getLogs``

    Example:
        >>> watcher = LogWatcher(transport, "0x...", print, poll_interval=1.0)
        >>> watcher.start()
        >>> watcher.cancel()
    """

    def __init__(
        self,
        transport,
        contract: str,
        on_log: LogCallback,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        from_block: Optional[int] = None,
        on_error: Optional[ErrorCallback] = None,
        max_block_range: int = MAX_BLOCK_RANGE,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if max_block_range <= 0:
            raise ValueError("max_block_range must be positive")
        self._transport = transport
        self._contract = contract
        self._on_log = on_log
        self._on_error = on_error
        self._poll_interval = poll_interval
        self._max_block_range = max_block_range
        self._next_block = from_block
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._status = ListenerStatus.STOPPED
        self._error: Optional[BaseException] = None
        self._started = False
        self._log = get_context_logger(__name__, contract=contract)

    @property
    def status(self) -> ListenerStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == ListenerStatus.RUNNING

    @property
    def error(self) -> Optional[BaseException]:
        """The fatal error that ended the watcher, if any."""
        return self._error

    @property
    def next_block(self) -> Optional[int]:
        return self._next_block

    def start(self) -> None:
        """
        Start the worker thread.

        Raises:
            RuntimeError: If this watcher was already started
        """
        with self._lock:
            if self._started:
                raise RuntimeError("LogWatcher can only be started once")
            self._started = True
            self._status = ListenerStatus.RUNNING
            self._thread = threading.Thread(
                target=self._run,
                name=f"erc721-logs-{self._contract[:10]}",
                daemon=True,
            )
            self._thread.start()
        self._log.info("Listener started", extra={"poll_interval": self._poll_interval})

    def cancel(self) -> bool:
        """
        Request the worker to stop.

        Does not wait for the thread; see ``join``.

        Returns:
            True if the watcher was running
        """
        with self._lock:
            self._stop_event.set()
            if self._status != ListenerStatus.RUNNING:
                return False
            self._status = ListenerStatus.STOPPED
        self._log.info("Listener cancelled")
        return True

    def join(self, timeout: Optional[float] = None) -> None:
        """
        Wait for the worker thread to finish.

        Joining from the worker thread itself (e.g. inside ``on_log``) returns
        immediately.

        Raises:
            ListenerError: If the watcher ended on a fatal error
        """
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if self._error is not None:
            raise ListenerError(
                f"Log listener failed: {self._error}", contract=self._contract
            ) from self._error

    def poll_once(self) -> int:
        """
        Fetch and deliver the logs mined since the previous poll.

        Returns:
            Number of logs delivered
        """
        latest = self._transport.block_number()
        if self._next_block is None:
            self._next_block = latest
        if latest < self._next_block:
            return 0

        to_block = min(latest, self._next_block + self._max_block_range - 1)
        logs = self._transport.get_logs(self._contract, self._next_block, to_block)
        delivered = 0
        for log in logs:
            if self._stop_event.is_set():
                return delivered
            self._on_log(log)
            delivered += 1
        self._next_block = to_block + 1
        if delivered:
            self._log.debug(
                "Delivered logs",
                extra={"count": delivered, "to_block": to_block},
            )
        return delivered

    def _run(self) -> None:
        try:
            while not self._stop_event.is_set():
                self.poll_once()
                self._stop_event.wait(self._poll_interval)
        except Exception as e:
            self._fail(e)
            return
        self._log.debug("Listener loop ended")

    def _fail(self, error: Exception) -> None:
        with self._lock:
            # A request interrupted by cancel() ends the watcher as STOPPED.
            if self._stop_event.is_set():
                self._log.debug(
                    "Ignoring error raised after cancel",
                    extra={"error": str(error)},
                )
                return
            self._error = error
            self._status = ListenerStatus.FAILED
            self._stop_event.set()
        self._log.error(
            "Listener failed",
            extra={
                "error": str(error),
                "traceback": traceback.format_exc(),
            },
        )
        if self._on_error is not None:
            self._on_error(error)

    def __repr__(self) -> str:
        return f"LogWatcher(contract={self._contract}, status={self._status.value})"
