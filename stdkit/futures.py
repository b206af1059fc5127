"""Futures for values computed synchronously or on a background thread."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol

_POLL_INTERVAL = 0.01


class _Cancellable(Protocol):
    def is_set(self) -> bool: ...


class AsyncFutureCanceled(Exception):
    """Raised when waiting on an async future is cancelled."""

    def __init__(self, message: str = "async future was canceled") -> None:
        super().__init__(message)


class Future(ABC):
    """A value, or an error, that is or will become available."""

    @abstractmethod
    def ready(self) -> bool:
        """Return True once a value or an error is available."""

    @abstractmethod
    def get(self, cancel: Optional[_Cancellable] = None) -> Any:
        """Return the value, raise the error, or block until one is available."""


class SyncFuture(Future):
    """A future that is complete from the moment it is created."""

    def __init__(self, value: Any = None, error: Optional[BaseException] = None) -> None:
        self.value = value
        self.error = error

    def ready(self) -> bool:
        return True

    def get(self, cancel: Optional[_Cancellable] = None) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


class _CancelToken:
    """Cancellation signal handed to the closure; also fires when its parent does."""

    def __init__(self, parent: Optional[_Cancellable] = None) -> None:
        self._event = threading.Event()
        self._parent = parent

    def cancel(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set() or (self._parent is not None and self._parent.is_set())

    def wait(self, timeout: Optional[float] = None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        while not self.is_set():
            if deadline is None:
                step = _POLL_INTERVAL
            else:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                step = min(_POLL_INTERVAL, remaining)
            self._event.wait(step)
        return True


class AsyncFuture(Future):
    """A future whose value is computed by ``closure`` on a background thread.

    The closure receives a cancellation token with ``is_set()`` and
    ``wait(timeout)``; it is signalled when ``cancel`` fires or when a
    ``get`` call is cancelled. Whatever the closure returns becomes the value,
    whatever it raises becomes the error.
    """

    def __init__(
        self,
        closure: Callable[[_CancelToken], Any],
        cancel: Optional[_Cancellable] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._token = _CancelToken(cancel)
        self._value: Any = None
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run, args=(closure,), daemon=True)
        self._thread.start()

    def _run(self, closure: Callable[[_CancelToken], Any]) -> None:
        value: Any = None
        error: Optional[BaseException] = None
        try:
            value = closure(self._token)
        except Exception as exc:  # the closure's failure is the future's error
            error = exc
        with self._lock:
            self._value = value
            self._error = error
        self._done.set()

    def ready(self) -> bool:
        return self._done.is_set()

    def _result(self) -> Any:
        with self._lock:
            if self._error is not None:
                raise self._error
            return self._value

    def get(self, cancel: Optional[_Cancellable] = None) -> Any:
        if cancel is None:
            self._done.wait()
            return self._result()
        while True:
            if self._done.wait(_POLL_INTERVAL):
                return self._result()
            if cancel.is_set():
                self._token.cancel()
                raise AsyncFutureCanceled()