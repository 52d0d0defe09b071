"""plusbridge: callback-or-awaitable adapters over a native device bridge.

The adapter layer sits between application code and a host-provided bridge
object (bitmaps, views, video players, dialogs, app events):
  - Every asynchronous call accepts ``success=``/``error=`` callbacks or
    returns an awaitable, never both
  - Native failures are normalized to ``{code, message}``
  - Native objects are tracked by handle id and torn down exactly once
  - Listeners are removed by the function the caller registered
"""

__version__ = "0.1.0"
__description__ = "Callback-or-awaitable adapters over a native device bridge"

from plusbridge.bridge.host import install_bridge, uninstall_bridge
from plusbridge.context import BridgeContext
from plusbridge.runtime import Runtime, create_runtime

__all__ = [
    "BridgeContext",
    "Runtime",
    "create_runtime",
    "install_bridge",
    "uninstall_bridge",
    "__version__",
]
