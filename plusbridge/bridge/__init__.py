"""Boundary between plusbridge and the native host bridge.

Modules
-------
host
    Installs and finds the ambient bridge object. A missing bridge is a
    recoverable condition, never an import-time crash.
protocol
    Structural description of the namespaces, callbacks and event sources
    the adapter layer expects from the host.
"""

from plusbridge.bridge.host import (
    current_bridge,
    install_bridge,
    is_bridge_available,
    uninstall_bridge,
)

__all__ = [
    "current_bridge",
    "install_bridge",
    "is_bridge_available",
    "uninstall_bridge",
]
