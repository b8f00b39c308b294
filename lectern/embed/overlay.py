"""Patches laid over an embed to hide provider branding and link-outs.

Each platform gets a declarative list of :class:`OverlayPatch` entries;
:class:`ProtectionOverlay` turns that list into child widgets and keeps
them positioned as the host resizes. Interactive patches are invisible
until hovered and swallow the clicks that would otherwise open the
provider's site. Opaque patches only paint over text (the video ID label)
and let input through.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from PyQt6.QtCore import QEvent, QObject, QRect, Qt
from PyQt6.QtGui import QColor, QKeyEvent, QKeySequence, QPainter
from PyQt6.QtWidgets import QApplication, QWidget

from lectern.embed.platforms import Platform

logger = logging.getLogger(__name__)

TOP_LEFT = "top-left"
TOP_RIGHT = "top-right"
TOP_STRIP = "top-strip"
BOTTOM_LEFT = "bottom-left"
BOTTOM_CENTER = "bottom-center"
BOTTOM_RIGHT = "bottom-right"

Size = Union[int, float]


@dataclass(frozen=True)
class OverlayPatch:
    """``width``/``height``: ints are pixels, floats <= 1.0 are fractions."""

    anchor: str
    width: Size
    height: Size
    interactive: bool = True
    offset_x: int = 0
    offset_y: int = 0
    name: str = ""


_YOUTUBE_PATCHES = (
    OverlayPatch(TOP_STRIP, 1.0, 56, name="title-bar"),
    OverlayPatch(TOP_RIGHT, 256, 160, name="share-menu"),
    OverlayPatch(BOTTOM_CENTER, 128, 40, interactive=False, name="video-id"),
    OverlayPatch(BOTTOM_LEFT, 192, 72, name="watch-on-label"),
    OverlayPatch(BOTTOM_RIGHT, 80, 48, name="logo"),
)

_GENERIC_PATCHES = (
    OverlayPatch(TOP_STRIP, 1.0, 56, name="title-bar"),
    OverlayPatch(BOTTOM_RIGHT, 64, 56, name="logo"),
)

OVERLAY_LAYOUTS: dict[Platform, tuple[OverlayPatch, ...]] = {
    Platform.YOUTUBE: _YOUTUBE_PATCHES,
    Platform.FACEBOOK: _GENERIC_PATCHES,
    Platform.VIMEO: _GENERIC_PATCHES,
    Platform.DAILYMOTION: _GENERIC_PATCHES,
    Platform.TWITCH: _GENERIC_PATCHES,
    Platform.PEERTUBE: _GENERIC_PATCHES,
    Platform.RUMBLE: _GENERIC_PATCHES,
}


def _resolve(size: Size, total: int) -> int:
    if isinstance(size, float) and size <= 1.0:
        return int(round(total * size))
    return min(int(size), total)


def patch_geometry(patch: OverlayPatch, width: int, height: int) -> QRect:
    w = _resolve(patch.width, width)
    h = _resolve(patch.height, height)

    if patch.anchor in (TOP_LEFT, TOP_STRIP, TOP_RIGHT):
        y = patch.offset_y
    else:
        y = height - h - patch.offset_y

    if patch.anchor in (TOP_LEFT, TOP_STRIP, BOTTOM_LEFT):
        x = patch.offset_x
    elif patch.anchor in (TOP_RIGHT, BOTTOM_RIGHT):
        x = width - w - patch.offset_x
    elif patch.anchor == BOTTOM_CENTER:
        x = (width - w) // 2 + patch.offset_x
    else:
        raise ValueError(f"Unknown overlay anchor: {patch.anchor}")

    return QRect(x, y, w, h)


def layout_for(platform: Platform) -> Sequence[OverlayPatch]:
    return OVERLAY_LAYOUTS.get(platform, ())


class ShieldPatch(QWidget):
    HOVER_ALPHA = 204

    def __init__(self, patch: OverlayPatch, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.patch = patch
        self._hovered = False
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.PreventContextMenu)
        if patch.interactive:
            self.setMouseTracking(True)
            self.setCursor(Qt.CursorShape.PointingHandCursor)
            self.setToolTip(self.tr("Protected area"))
        else:
            self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)

    @property
    def hovered(self) -> bool:
        return self._hovered

    def enterEvent(self, event):  # type: ignore[override]
        if self.patch.interactive:
            self._hovered = True
            self.update()
        super().enterEvent(event)

    def leaveEvent(self, event):  # type: ignore[override]
        if self._hovered:
            self._hovered = False
            self.update()
        super().leaveEvent(event)

    # Swallow everything that could reach the provider's link-out controls.
    def mousePressEvent(self, event):  # type: ignore[override]
        event.accept()

    def mouseReleaseEvent(self, event):  # type: ignore[override]
        event.accept()

    def mouseDoubleClickEvent(self, event):  # type: ignore[override]
        event.accept()

    def contextMenuEvent(self, event):  # type: ignore[override]
        event.accept()

    def paintEvent(self, _):  # type: ignore[override]
        if self.patch.interactive and not self._hovered:
            return
        p = QPainter(self)
        if self.patch.interactive:
            p.fillRect(self.rect(), QColor(0, 0, 0, self.HOVER_ALPHA))
        else:
            p.setRenderHint(QPainter.RenderHint.Antialiasing)
            p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(QColor(0, 0, 0))
            p.drawRoundedRect(self.rect(), 4, 4)
        p.end()


class ProtectionOverlay(QObject):
    """Creates patch widgets on ``host`` and tracks its size."""

    def __init__(self, platform: Platform, host: QWidget) -> None:
        super().__init__(host)
        self.platform = platform
        self.host = host
        self.patches: list[ShieldPatch] = []
        for patch in layout_for(platform):
            widget = ShieldPatch(patch, host)
            widget.show()
            self.patches.append(widget)
        host.installEventFilter(self)
        self.relayout()

    def relayout(self) -> None:
        width, height = self.host.width(), self.host.height()
        for widget in self.patches:
            widget.setGeometry(patch_geometry(widget.patch, width, height))
            widget.raise_()

    def eventFilter(self, obj, event):  # type: ignore[override]
        if obj is self.host and event.type() in (QEvent.Type.Resize, QEvent.Type.Show):
            self.relayout()
        return False

    def remove(self) -> None:
        self.host.removeEventFilter(self)
        for widget in self.patches:
            widget.hide()
            widget.deleteLater()
        self.patches.clear()


# === Keyboard / clipboard hardening ===

_CTRL_BLOCKED = {Qt.Key.Key_C.value, Qt.Key.Key_U.value}


def is_blocked_shortcut(key, modifiers: Qt.KeyboardModifier) -> bool:
    """Copy, view-source and devtools shortcuts."""

    key = key.value if isinstance(key, Qt.Key) else int(key)
    # On macOS Qt reports Cmd as ControlModifier; Meta covers the other case.
    command = bool(modifiers & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier))
    shift = bool(modifiers & Qt.KeyboardModifier.ShiftModifier)

    if key == Qt.Key.Key_F12.value:
        return True
    if command and shift and key == Qt.Key.Key_I.value:
        return True
    if command and not shift and key in _CTRL_BLOCKED:
        return True
    return False


class ShortcutGuard(QObject):
    """Application-wide filter active while a protected embed is mounted."""

    _KEY_TYPES = (QEvent.Type.KeyPress, QEvent.Type.ShortcutOverride)

    def __init__(self, root: QWidget) -> None:
        super().__init__(root)
        self.root = root
        self._installed = False
        self.blocked_count = 0

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        app = QApplication.instance()
        if app is None or self._installed:
            return
        app.installEventFilter(self)
        self._installed = True

    def uninstall(self) -> None:
        app = QApplication.instance()
        if app is not None and self._installed:
            app.removeEventFilter(self)
        self._installed = False

    def _inside_root(self, obj) -> bool:
        if not isinstance(obj, QWidget):
            return False
        return obj is self.root or self.root.isAncestorOf(obj)

    def eventFilter(self, obj, event):  # type: ignore[override]
        etype = event.type()
        if etype in self._KEY_TYPES and isinstance(event, QKeyEvent):
            if (
                event.matches(QKeySequence.StandardKey.Copy)
                or event.matches(QKeySequence.StandardKey.Cut)
                or is_blocked_shortcut(event.key(), event.modifiers())
            ):
                self.blocked_count += 1
                event.accept()
                return True
        elif etype == QEvent.Type.ContextMenu and self._inside_root(obj):
            self.blocked_count += 1
            event.accept()
            return True
        return False
