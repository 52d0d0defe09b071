"""Composition root shared by every capability.

A ``BridgeContext`` owns one ``HandleRegistry`` and one
``CallbackIdentityMap``. Capabilities built on the same context share
them; tests build a fresh context per case so no state leaks between them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from plusbridge.bridge.host import current_bridge
from plusbridge.bridge.protocol import Bridge
from plusbridge.config import BridgeConfig
from plusbridge.config import config as default_config
from plusbridge.core.adapter import DualModeAdapter
from plusbridge.core.errors import EnvironmentUnavailableError
from plusbridge.core.identity import CallbackIdentityMap
from plusbridge.core.registry import HandleRegistry
from plusbridge.models.errors import UNKNOWN_ERROR_CODE

logger = logging.getLogger(__name__)


class BridgeContext:
    """Bridge access plus the registries that track what it created.

    Parameters
    ----------
    bridge:
        Explicit bridge object. When omitted the ambient bridge is looked
        up on every access, so one installed later is picked up.
    config:
        Settings; defaults to the module-level ``config``.
    registry / listeners:
        Pre-built collaborators, mainly for tests.
    """

    def __init__(
        self,
        bridge: Bridge | None = None,
        *,
        config: BridgeConfig | None = None,
        registry: HandleRegistry | None = None,
        listeners: CallbackIdentityMap | None = None,
    ) -> None:
        self.config = config or default_config
        self._bridge = bridge
        self.registry = registry or HandleRegistry(
            id_suffix_length=self.config.id_suffix_length
        )
        self.listeners = listeners or CallbackIdentityMap(
            propagate_listener_errors=self.config.listener_errors_propagate
        )

    # ------------------------------------------------------------------
    # Bridge access
    # ------------------------------------------------------------------

    @property
    def bridge(self) -> Bridge | None:
        if self._bridge is not None:
            return self._bridge
        return current_bridge(self.config.host_module)

    def has_namespace(self, name: str) -> bool:
        bridge = self.bridge
        if bridge is None:
            return False
        return getattr(bridge, name, None) is not None

    def namespace(self, name: str) -> Any:
        """Return the bridge namespace *name*.

        Raises
        ------
        EnvironmentUnavailableError
            If the bridge or the namespace is missing.
        """
        bridge = self.bridge
        if bridge is None:
            raise EnvironmentUnavailableError(
                f"Native bridge is not available (needed for {name!r})"
            )
        ns = getattr(bridge, name, None)
        if ns is None:
            raise EnvironmentUnavailableError(
                f"Bridge namespace {name!r} is not available"
            )
        return ns

    def method(self, namespace: str, method: str) -> Callable[..., Any]:
        """Return ``bridge.<namespace>.<method>``, failing with EnvironmentUnavailable."""
        ns = self.namespace(namespace)
        fn = getattr(ns, method, None)
        if not callable(fn):
            raise EnvironmentUnavailableError(
                f"Bridge method {namespace}.{method} is not available"
            )
        return fn

    def adapter(
        self,
        namespace: str,
        method: str,
        *,
        fallback_code: int = UNKNOWN_ERROR_CODE,
        fallback_message: str = "",
        transform: Callable[[Any], Any] | None = None,
        discard: Callable[[Any], Any] | None = None,
    ) -> DualModeAdapter:
        """Build a ``DualModeAdapter`` for ``bridge.<namespace>.<method>``."""
        return DualModeAdapter(
            lambda: self.method(namespace, method),
            name=f"{namespace}.{method}",
            fallback_code=fallback_code,
            fallback_message=fallback_message,
            transform=transform,
            discard=discard,
        )

    def __repr__(self) -> str:
        source = "explicit" if self._bridge is not None else "ambient"
        return f"BridgeContext(bridge={source}, registry={self.registry!r})"
