"""Runtime connection: the single shared daemon handle."""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from signalforge_runtime.domain.errors import DaemonConnectionError, NotConnectedError
from signalforge_runtime.domain.services.concurrency_guard import SerialGate
from signalforge_runtime.ports.outbound import DaemonConnector, DaemonError, DaemonPort

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RuntimeConnection:
    """Owns one daemon handle and serializes every request made through it.

    The handle is created by the injected connector. ``connect`` always
    builds a fresh handle and replaces the previous one, so reconnecting is
    just calling ``connect`` again. Handle swaps happen inside the gate, so
    a request never runs against a handle that is being replaced.
    """

    def __init__(self, connector: DaemonConnector, gate: Optional[SerialGate] = None) -> None:
        """Initialize an unconnected runtime connection.

        Args:
            connector: Factory that builds and verifies a daemon handle.
            gate: Mutual-exclusion gate; a private one is created if omitted.
        """
        self._connector = connector
        self._gate = gate or SerialGate()
        self._handle: Optional[DaemonPort] = None

    @property
    def gate(self) -> SerialGate:
        return self._gate

    def is_connected(self) -> bool:
        """Report whether a handle exists.

        This is a presence check, not a liveness probe.
        """
        return self._handle is not None

    async def connect(self) -> None:
        """Create a fresh handle, replacing any existing one.

        Raises:
            DaemonConnectionError: If the daemon is unreachable. Any
                previous handle is kept in that case.
        """
        try:
            await self._gate.run(self._replace_handle)
        except DaemonError as e:
            raise DaemonConnectionError(e) from e

    async def close(self) -> None:
        """Drop and close the current handle, if any."""
        await self._gate.run(self._drop_handle)

    async def call(self, operation: Callable[[DaemonPort], T]) -> T:
        """Run one daemon request through the gate.

        Args:
            operation: Blocking call taking the daemon handle.

        Returns:
            Whatever ``operation`` returns.

        Raises:
            NotConnectedError: If ``connect`` has not succeeded yet.
            DaemonError: Propagated unchanged from the daemon.
        """
        if self._handle is None:
            raise NotConnectedError()
        return await self._gate.run(self._invoke, operation)

    def _invoke(self, operation: Callable[[DaemonPort], T]) -> T:
        handle = self._handle
        if handle is None:
            raise NotConnectedError()
        return operation(handle)

    def _replace_handle(self) -> None:
        handle = self._connector()
        previous, self._handle = self._handle, handle
        if previous is not None:
            try:
                previous.close()
            except DaemonError as e:
                # The new handle is already live
                logger.warning(f"Failed to close previous daemon handle: {e}")

    def _drop_handle(self) -> None:
        previous, self._handle = self._handle, None
        if previous is not None:
            previous.close()
