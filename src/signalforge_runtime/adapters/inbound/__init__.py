"""Inbound adapters for the runtime control engine.

Provides the control service implementing the exposed operations.
"""

from signalforge_runtime.adapters.inbound.control_service import RuntimeControlService

__all__ = ["RuntimeControlService"]
