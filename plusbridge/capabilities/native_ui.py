"""System dialogs, toasts and waiting dialogs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from types import MappingProxyType
from typing import Any

from plusbridge.capabilities.base import Capability, NativeHandle, require_text
from plusbridge.core.adapter import DualModeAdapter, ErrorCallback, SuccessCallback
from plusbridge.core.errors import InvalidArgumentError
from plusbridge.core.proxy import ForwardedProperty
from plusbridge.models.handles import DestroyReport, HandleKind

logger = logging.getLogger(__name__)

NativeUIErrorCode = MappingProxyType({
    "INVALID_PARAMETER": 1,
    "DIALOG_ERROR": 2,
    "TOAST_ERROR": 3,
    "WAITING_ERROR": 4,
    "UNKNOWN_ERROR": 99,
})


class WaitingDialog(NativeHandle):
    """A native waiting (progress) dialog."""

    kind = HandleKind.WAITING_DIALOG
    error_code = NativeUIErrorCode["WAITING_ERROR"]

    title = ForwardedProperty(read_only=True)

    def set_title(self, title: str) -> None:
        require_text(title, "Title must not be empty",
                     code=NativeUIErrorCode["INVALID_PARAMETER"])
        self._call("set_title", title, action="retitle")

    def close(self) -> None:
        """Close the dialog. Closing twice is a no-op."""
        self.destroy()


class NativeUICapability(Capability):
    """Alerts, confirms, toasts and waiting dialogs."""

    namespace = "native_ui"

    def _callback_only(self, method: str) -> Callable[..., Any]:
        """Adapt ``method(message, callback, *rest)`` to the success/error convention.

        Dialog methods take their single callback in second position and
        have no error callback; failures surface as synchronous raises.
        """
        fn = self._context.method(self.namespace, method)

        def raw(message: str, *rest: Any) -> Any:
            *options, on_success, _on_error = rest
            return fn(message, on_success, *options)

        return raw

    def alert(
        self,
        message: str,
        *,
        title: str | None = None,
        button: str | None = None,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
    ) -> asyncio.Future | None:
        """Show an alert; delivers the native close event."""
        require_text(message, "Message must not be empty",
                     code=NativeUIErrorCode["INVALID_PARAMETER"])
        adapter = self._dialog_adapter("alert")
        return adapter(message, title, button, success=success, error=error)

    def confirm(
        self,
        message: str,
        *,
        title: str | None = None,
        buttons: list[str] | None = None,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
    ) -> asyncio.Future | None:
        """Show a confirm dialog; delivers the native event (with ``index``)."""
        require_text(message, "Message must not be empty",
                     code=NativeUIErrorCode["INVALID_PARAMETER"])
        if buttons is not None and (
            not isinstance(buttons, list) or not all(isinstance(b, str) for b in buttons)
        ):
            raise InvalidArgumentError(
                "Buttons must be a list of strings",
                code=NativeUIErrorCode["INVALID_PARAMETER"],
            )
        adapter = self._dialog_adapter("confirm")
        return adapter(message, title, buttons, success=success, error=error)

    def _dialog_adapter(self, method: str) -> DualModeAdapter:
        return DualModeAdapter(
            lambda: self._callback_only(method),
            name=f"{self.namespace}.{method}",
            fallback_code=NativeUIErrorCode["DIALOG_ERROR"],
            fallback_message=f"Showing {method} dialog failed",
        )

    def toast(self, message: str, options: dict[str, Any] | None = None) -> None:
        require_text(message, "Message must not be empty",
                     code=NativeUIErrorCode["INVALID_PARAMETER"])
        self._context.method(self.namespace, "toast")(message, dict(options or {}))

    # ------------------------------------------------------------------
    # Waiting dialogs
    # ------------------------------------------------------------------

    def show_waiting(
        self, title: str = "", options: dict[str, Any] | None = None
    ) -> WaitingDialog:
        if not isinstance(title, str):
            raise InvalidArgumentError(
                "Title must be a string", code=NativeUIErrorCode["INVALID_PARAMETER"]
            )
        native = self._context.method(self.namespace, "show_waiting")(
            title, dict(options or {})
        )
        return self._wrap(WaitingDialog, native)

    def close_waiting(self, dialog: WaitingDialog | None = None) -> None:
        """Close one waiting dialog, or all of them when *dialog* is ``None``."""
        if dialog is None:
            self.close_all_waiting_dialogs()
            return
        if not isinstance(dialog, WaitingDialog):
            raise InvalidArgumentError(
                "Expected a WaitingDialog", code=NativeUIErrorCode["INVALID_PARAMETER"]
            )
        dialog.close()

    def get_active_waiting_dialogs_count(self) -> int:
        return self._count(HandleKind.WAITING_DIALOG)

    def get_active_waiting_dialogs_ids(self) -> list[str]:
        return self._ids(HandleKind.WAITING_DIALOG)

    def close_all_waiting_dialogs(self) -> DestroyReport:
        """Close every tracked dialog.

        When none is tracked the host-wide ``close_waiting`` runs instead, so
        dialogs opened outside this runtime are still dismissed.
        """
        report = self._close_all(HandleKind.WAITING_DIALOG)
        if not report.destroyed and self._context.has_namespace(self.namespace):
            closer = getattr(self._context.namespace(self.namespace), "close_waiting", None)
            if callable(closer):
                try:
                    closer()
                except Exception as exc:
                    logger.warning("native_ui.close_waiting failed: %s", exc)
        return report
