"""Ambient bridge lookup.

The native host injects its bridge either by calling ``install_bridge()``
at startup or by making an importable module available (``plus`` by
default, see ``BridgeConfig.host_module``). Absence of both is a normal,
recoverable condition: ``current_bridge()`` returns ``None`` and every
capability reports itself unsupported. Nothing here raises at import time.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

logger = logging.getLogger(__name__)

_installed: Any = None
_host_checked: dict[str, Any] = {}


def install_bridge(bridge: Any) -> None:
    """Make *bridge* the ambient bridge for every context without its own."""
    global _installed
    if bridge is None:
        raise ValueError("install_bridge() needs a bridge object; use uninstall_bridge()")
    _installed = bridge
    logger.info("Ambient bridge installed: %s", type(bridge).__name__)


def uninstall_bridge() -> None:
    """Forget the installed bridge and any cached host module lookup."""
    global _installed
    _installed = None
    _host_checked.clear()


def _import_host(module_name: str) -> Any:
    if module_name in _host_checked:
        return _host_checked[module_name]
    try:
        module = importlib.import_module(module_name)
        logger.debug("Host bridge module %r loaded.", module_name)
    except ImportError:
        logger.debug(
            "Host bridge module %r not found; running without a native bridge.",
            module_name,
        )
        module = None
    _host_checked[module_name] = module
    return module


def current_bridge(host_module: str | None = None) -> Any:
    """Return the ambient bridge, or ``None`` when none is present.

    *host_module* defaults to ``config.host_module``; an empty string
    disables the host module lookup.
    """
    if _installed is not None:
        return _installed
    if host_module is None:
        from plusbridge.config import config

        host_module = config.host_module
    if not host_module:
        return None
    return _import_host(host_module)


def is_bridge_available(host_module: str | None = None) -> bool:
    """Return ``True`` if an ambient bridge can be found."""
    return current_bridge(host_module) is not None
