"""Native objects — bitmaps, views and image sliders.

Bitmaps are released with ``recycle()``; views and sliders with ``close()``.
Loading and saving bitmaps are dual-mode calls.
"""

from __future__ import annotations

import asyncio
import secrets
import time
from types import MappingProxyType
from typing import Any

from plusbridge.capabilities.base import (
    Capability,
    NativeHandle,
    require_mapping,
    require_positive,
    require_text,
)
from plusbridge.core.adapter import ErrorCallback, SuccessCallback
from plusbridge.core.errors import InvalidArgumentError
from plusbridge.core.proxy import ForwardedProperty
from plusbridge.models.handles import DestroyReport, HandleKind

NativeObjErrorCode = MappingProxyType({
    "INVALID_BITMAP": 1,
    "INVALID_VIEW": 2,
    "INVALID_IMAGE": 3,
    "INVALID_SLIDER": 4,
    "INVALID_OPERATION": 5,
    "LOAD_FAILED": 6,
    "SAVE_FAILED": 7,
    "DRAW_FAILED": 8,
    "ANIMATION_FAILED": 9,
    "OUT_OF_MEMORY": 10,
    "PERMISSION_DENIED": 11,
    "UNKNOWN_ERROR": 12,
})

ImageMode = MappingProxyType({
    "ASPECT_FIT": "aspectFit",
    "ASPECT_FILL": "aspectFill",
    "STRETCH": "stretch",
})

TextAlign = MappingProxyType({
    "LEFT": "left",
    "CENTER": "center",
    "RIGHT": "right",
})

TextOverflow = MappingProxyType({
    "CLIP": "clip",
    "ELLIPSIS": "ellipsis",
    "BREAK": "break",
})


class Bitmap(NativeHandle):
    """A native bitmap."""

    kind = HandleKind.BITMAP
    error_code = NativeObjErrorCode["INVALID_OPERATION"]

    native_id = ForwardedProperty(native_name="id", read_only=True)

    def load(
        self,
        path: str,
        *,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
    ) -> asyncio.Future | None:
        """Load an image file into this bitmap; resolves with the bitmap."""
        require_text(path, "Image path must not be empty",
                     code=NativeObjErrorCode["INVALID_BITMAP"])
        adapter = self._adapter(
            "load",
            fallback_code=NativeObjErrorCode["LOAD_FAILED"],
            fallback_message="Loading image failed",
            transform=lambda _: self,
        )
        return adapter(path, success=success, error=error)

    def load_base64_data(
        self,
        data: str,
        *,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
    ) -> asyncio.Future | None:
        require_text(data, "Base64 data must not be empty",
                     code=NativeObjErrorCode["INVALID_BITMAP"])
        adapter = self._adapter(
            "load_base64_data",
            fallback_code=NativeObjErrorCode["LOAD_FAILED"],
            fallback_message="Loading base64 image failed",
            transform=lambda _: self,
        )
        return adapter(data, success=success, error=error)

    def save(
        self,
        path: str,
        options: dict[str, Any] | None = None,
        *,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
    ) -> asyncio.Future | None:
        """Save the bitmap to *path*; resolves with the native save result."""
        require_text(path, "Save path must not be empty",
                     code=NativeObjErrorCode["INVALID_BITMAP"])
        adapter = self._adapter(
            "save",
            fallback_code=NativeObjErrorCode["SAVE_FAILED"],
            fallback_message="Saving bitmap failed",
        )
        return adapter(path, dict(options or {}), success=success, error=error)

    def clear(self) -> None:
        self._call("clear")

    def to_base64_data(self) -> str:
        return self._call("to_base64_data", action="read base64 data of")

    def recycle(self) -> None:
        """Release the native bitmap. Same as ``destroy()``."""
        self.destroy()

    def _release_native(self, native: Any) -> None:
        native.recycle()


class View(NativeHandle):
    """A native view control."""

    kind = HandleKind.VIEW
    error_code = NativeObjErrorCode["INVALID_OPERATION"]

    native_id = ForwardedProperty(native_name="id", read_only=True)

    def show(self) -> None:
        self._call("show")

    def hide(self) -> None:
        self._call("hide")

    def close(self) -> None:
        """Close the view and forget it. Closing twice is a no-op."""
        self.destroy()

    def draw_rect(self, styles: dict[str, Any], position: dict[str, Any]) -> None:
        require_mapping(styles, "Rect styles must be a mapping",
                        code=NativeObjErrorCode["DRAW_FAILED"])
        require_mapping(position, "Rect position must be a mapping",
                        code=NativeObjErrorCode["DRAW_FAILED"])
        self._call("draw_rect", dict(styles), dict(position), action="draw on")

    def draw_text(
        self, text: str, position: dict[str, Any], styles: dict[str, Any] | None = None
    ) -> None:
        if not isinstance(text, str):
            raise InvalidArgumentError(
                "Text must be a string", code=NativeObjErrorCode["DRAW_FAILED"]
            )
        require_mapping(position, "Text position must be a mapping",
                        code=NativeObjErrorCode["DRAW_FAILED"])
        self._call("draw_text", text, dict(position), dict(styles or {}), action="draw on")

    def _release_native(self, native: Any) -> None:
        native.close()


class ImageSlider(View):
    """A native image carousel."""

    kind = HandleKind.IMAGE_SLIDER

    def add_images(self, images: list[Any]) -> None:
        if not isinstance(images, list) or not images:
            raise InvalidArgumentError(
                "Images must be a non-empty list", code=NativeObjErrorCode["INVALID_IMAGE"]
            )
        self._call("add_images", list(images))

    def set_images(self, images: list[Any]) -> None:
        if not isinstance(images, list):
            raise InvalidArgumentError(
                "Images must be a list", code=NativeObjErrorCode["INVALID_IMAGE"]
            )
        self._call("set_images", list(images))

    def current_image_index(self) -> int:
        return self._call("current_image_index", action="read the index of")


class NativeObjCapability(Capability):
    """Creates and tracks bitmaps, views and image sliders."""

    namespace = "native_obj"

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_bitmap(self, width: float, height: float, *, native_id: str | None = None) -> Bitmap:
        require_positive(width, "Bitmap width must be greater than 0",
                         code=NativeObjErrorCode["INVALID_BITMAP"])
        require_positive(height, "Bitmap height must be greater than 0",
                         code=NativeObjErrorCode["INVALID_BITMAP"])
        ns = self._require()
        native_id = native_id or f"bitmap_{time.time_ns()}_{secrets.token_hex(4)}"
        native = ns.Bitmap(native_id, {"width": width, "height": height})
        return self._wrap(Bitmap, native)

    def _create_view(self, cls: type[View], constructor: str, styles: Any, code: int) -> Any:
        styles = require_mapping(styles, "Styles must be a mapping", code=code)
        require_text(styles.get("id"), "Styles must carry a non-empty 'id'", code=code)
        ns = self._require()
        native = getattr(ns, constructor)(styles["id"], styles)
        return self._wrap(cls, native)

    def create_view(self, styles: dict[str, Any]) -> View:
        return self._create_view(View, "View", styles, NativeObjErrorCode["INVALID_VIEW"])

    def create_image_slider(self, styles: dict[str, Any]) -> ImageSlider:
        return self._create_view(
            ImageSlider, "ImageSlider", styles, NativeObjErrorCode["INVALID_SLIDER"]
        )

    # ------------------------------------------------------------------
    # Lookup and bulk cleanup
    # ------------------------------------------------------------------

    def get_bitmap(self, handle_id: str) -> Bitmap | None:
        return self._lookup(Bitmap, handle_id)

    def get_view(self, handle_id: str) -> View | None:
        return self._lookup(View, handle_id)

    def get_active_bitmaps_count(self) -> int:
        return self._count(HandleKind.BITMAP)

    def get_active_bitmaps_ids(self) -> list[str]:
        return self._ids(HandleKind.BITMAP)

    def get_active_views_count(self) -> int:
        return self._count(HandleKind.VIEW)

    def get_active_views_ids(self) -> list[str]:
        return self._ids(HandleKind.VIEW)

    def get_active_sliders_count(self) -> int:
        return self._count(HandleKind.IMAGE_SLIDER)

    def get_active_sliders_ids(self) -> list[str]:
        return self._ids(HandleKind.IMAGE_SLIDER)

    def close_all_bitmaps(self) -> DestroyReport:
        return self._close_all(HandleKind.BITMAP)

    def close_all_views(self) -> DestroyReport:
        return self._close_all(HandleKind.VIEW)

    def close_all_sliders(self) -> DestroyReport:
        return self._close_all(HandleKind.IMAGE_SLIDER)

    def clear_all_active_objects(self) -> list[DestroyReport]:
        """Recycle every bitmap and close every view and slider."""
        return [
            self.close_all_bitmaps(),
            self.close_all_views(),
            self.close_all_sliders(),
        ]
