"""Capability wrappers, one per bridge namespace.

Modules
-------
base
    ``Capability`` and ``NativeHandle`` skeletons plus argument validators.
native_obj
    Bitmaps, views and image sliders.
video
    Video players and live pushers.
native_ui
    Alerts, confirms, toasts and waiting dialogs.
events
    Application-level event listeners.
"""

from plusbridge.capabilities.base import Capability, NativeHandle
from plusbridge.capabilities.events import EventsCapability, EventType, NetworkType
from plusbridge.capabilities.native_obj import (
    Bitmap,
    ImageMode,
    ImageSlider,
    NativeObjCapability,
    NativeObjErrorCode,
    TextAlign,
    TextOverflow,
    View,
)
from plusbridge.capabilities.native_ui import (
    NativeUICapability,
    NativeUIErrorCode,
    WaitingDialog,
)
from plusbridge.capabilities.video import (
    LivePusher,
    LivePusherErrorCode,
    VideoCapability,
    VideoEventType,
    VideoPlayer,
    VideoPlayerErrorCode,
)

__all__ = [
    # Skeletons
    "Capability",
    "NativeHandle",
    # native_obj
    "Bitmap",
    "ImageMode",
    "ImageSlider",
    "NativeObjCapability",
    "NativeObjErrorCode",
    "TextAlign",
    "TextOverflow",
    "View",
    # video
    "LivePusher",
    "LivePusherErrorCode",
    "VideoCapability",
    "VideoEventType",
    "VideoPlayer",
    "VideoPlayerErrorCode",
    # native_ui
    "NativeUICapability",
    "NativeUIErrorCode",
    "WaitingDialog",
    # events
    "EventType",
    "EventsCapability",
    "NetworkType",
]
