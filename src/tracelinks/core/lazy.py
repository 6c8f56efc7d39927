# src/tracelinks/core/lazy.py
"""Exactly-once lazy computation with captured-failure replay.

LazyResource holds a value that is expensive to build, cannot be shipped
between processes, and may fail to build at all (logging setup, a
storage client backed by a container). It guarantees:

- The computation runs at most once per instance, even under concurrent
  first access. Callers arriving while it is in flight block until it
  settles.
- Every caller observes the same outcome. A captured error is re-raised
  as the same exception object on every later get(); it is never
  recomputed.
- close() tears the value down exactly once, and only if it exists.

Lifecycle:
    UNINITIALIZED -> COMPUTING -> READY | FAILED
    any settled state -> CLOSED (terminal)

Thread Safety:
    All state transitions happen under one RLock. The computation runs
    while the lock is held, which is what makes concurrent callers wait.
    The lock is re-entrant only so that a computation calling get() on
    its own resource can be detected and rejected instead of deadlocking.

Example:
    >>> storage = LazyResource(build_storage, teardown=lambda s: s.close())
    >>> storage.get().check()
    >>> storage.close()

Subclasses may override compute() and teardown() instead of passing
callables; see tracelinks.testing.managed_service.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from types import TracebackType
from typing import Generic, TypeVar, cast

import structlog

from tracelinks.contracts.enums import ResourceState
from tracelinks.contracts.errors import ReentrantComputationError, ResourceClosedError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class LazyResource(Generic[T]):
    """Process-local, thread-safe, exactly-once value holder.

    Instances are never shared across processes. A worker process that
    needs the resource builds its own instance.
    """

    def __init__(
        self,
        factory: Callable[[], T] | None = None,
        *,
        teardown: Callable[[T], None] | None = None,
        name: str | None = None,
    ) -> None:
        """Initialize an uncomputed resource.

        Args:
            factory: Zero-argument computation. Required unless a subclass
                overrides compute().
            teardown: Called with the value on close(), if the value exists.
            name: Resource name used in logs and errors. Defaults to the
                class name.
        """
        self._factory = factory
        self._teardown = teardown
        self.name = name if name is not None else type(self).__name__
        self._lock = threading.RLock()
        self._state = ResourceState.UNINITIALIZED
        self._value: T | None = None
        self._error: Exception | None = None
        self._error_traceback: TracebackType | None = None

    @property
    def state(self) -> ResourceState:
        """Current lifecycle state (approximate when read without the lock)."""
        return self._state

    def compute(self) -> T:
        """Build the value. Called at most once per instance."""
        if self._factory is None:
            raise NotImplementedError(f"{type(self).__name__} must override compute() or be given a factory")
        return self._factory()

    def teardown(self, value: T) -> None:
        """Release a computed value. Called at most once, only if READY."""
        if self._teardown is not None:
            self._teardown(value)

    def get(self) -> T:
        """Return the value, computing it on first call.

        Raises:
            Exception: The error captured from the computation, verbatim.
            ResourceClosedError: If close() was already called.
            ReentrantComputationError: If called from inside compute().
        """
        with self._lock:
            state = self._state
            if state is ResourceState.READY:
                return cast(T, self._value)
            if state is ResourceState.FAILED:
                # Restore the captured traceback so replays do not stack frames onto it
                raise cast(Exception, self._error).with_traceback(self._error_traceback)
            if state is ResourceState.CLOSED:
                raise ResourceClosedError(self.name)
            if state is ResourceState.COMPUTING:
                # Other threads cannot get here while the lock is held by
                # the computing thread, so this is the computing thread.
                raise ReentrantComputationError(self.name)

            self._state = ResourceState.COMPUTING
            try:
                value = self.compute()
            except Exception as e:
                self._error = e
                self._error_traceback = e.__traceback__
                self._state = ResourceState.FAILED
                logger.debug(
                    "Lazy resource failed to compute",
                    resource=self.name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                raise
            except BaseException:
                # KeyboardInterrupt and friends abort the attempt without
                # becoming the resource's permanent outcome.
                self._state = ResourceState.UNINITIALIZED
                raise

            self._value = value
            self._state = ResourceState.READY
            logger.debug("Lazy resource computed", resource=self.name)
            return value

    def maybe_get(self) -> T | None:
        """Return the value if already computed, else None. Never computes."""
        with self._lock:
            if self._state is ResourceState.READY:
                return self._value
            return None

    def close(self) -> None:
        """Tear down the value if it was computed. Idempotent.

        Waits for an in-flight computation to settle first. After close(),
        get() raises ResourceClosedError.
        """
        with self._lock:
            if self._state is ResourceState.COMPUTING:
                raise ReentrantComputationError(self.name)
            if self._state is ResourceState.CLOSED:
                return

            previous = self._state
            value = self._value
            self._state = ResourceState.CLOSED
            self._value = None
            if previous is ResourceState.READY:
                logger.debug("Closing lazy resource", resource=self.name)
                self.teardown(cast(T, value))

    def __enter__(self) -> T:
        try:
            return self.get()
        except BaseException:
            self.close()
            raise

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, state={self._state.value})"
