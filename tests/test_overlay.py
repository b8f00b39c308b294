import pytest
from PyQt6.QtCore import QEvent, QPoint, Qt
from PyQt6.QtGui import QContextMenuEvent, QKeyEvent
from PyQt6.QtWidgets import QApplication, QLabel, QWidget

from lectern.embed.overlay import (
    BOTTOM_CENTER,
    OVERLAY_LAYOUTS,
    OverlayPatch,
    ProtectionOverlay,
    ShieldPatch,
    ShortcutGuard,
    is_blocked_shortcut,
    layout_for,
    patch_geometry,
)
from lectern.embed.platforms import Platform

CTRL = Qt.KeyboardModifier.ControlModifier
SHIFT = Qt.KeyboardModifier.ShiftModifier
META = Qt.KeyboardModifier.MetaModifier
NONE = Qt.KeyboardModifier.NoModifier


def rects(platform, w, h):
    return {p.name: patch_geometry(p, w, h).getRect() for p in layout_for(platform)}


def test_youtube_patch_geometry():
    assert rects(Platform.YOUTUBE, 640, 360) == {
        "title-bar": (0, 0, 640, 56),
        "share-menu": (384, 0, 256, 160),
        "video-id": (256, 320, 128, 40),
        "watch-on-label": (0, 288, 192, 72),
        "logo": (560, 312, 80, 48),
    }


def test_patches_never_exceed_host():
    for rect in rects(Platform.YOUTUBE, 100, 50).values():
        x, y, w, h = rect
        assert x >= 0 and y >= 0
        assert x + w <= 100 and y + h <= 50


def test_every_embeddable_platform_has_a_layout():
    for platform in Platform:
        if platform is Platform.TELEGRAM:
            assert layout_for(platform) == ()
        else:
            assert platform in OVERLAY_LAYOUTS


def test_unknown_anchor():
    with pytest.raises(ValueError):
        patch_geometry(OverlayPatch("middle", 10, 10), 100, 100)


def test_overlay_tracks_host_size(qtbot):
    host = QWidget()
    qtbot.addWidget(host)
    host.resize(640, 360)
    host.show()
    overlay = ProtectionOverlay(Platform.YOUTUBE, host)
    assert len(overlay.patches) == 5

    host.resize(800, 450)
    title = overlay.patches[0]
    assert title.geometry().width() == 800

    overlay.remove()
    assert overlay.patches == []


def test_interactive_patches_catch_input_and_opaque_ones_pass_it(qtbot):
    host = QWidget()
    qtbot.addWidget(host)
    host.resize(640, 360)
    under = QLabel(host)
    under.setGeometry(0, 0, 640, 360)
    host.show()
    ProtectionOverlay(Platform.YOUTUBE, host)

    top = host.childAt(QPoint(10, 10))
    assert isinstance(top, ShieldPatch)
    assert top.patch.interactive

    # the video-id label patch is paint-only
    assert host.childAt(QPoint(320, 340)) is under


def test_opaque_patch_is_transparent_for_mouse(qtbot):
    patch = ShieldPatch(OverlayPatch(BOTTOM_CENTER, 128, 40, interactive=False))
    qtbot.addWidget(patch)
    assert patch.testAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)


@pytest.mark.parametrize(
    "key, mods, blocked",
    [
        (Qt.Key.Key_F12, NONE, True),
        (Qt.Key.Key_I, CTRL | SHIFT, True),
        (Qt.Key.Key_I, META | SHIFT, True),
        (Qt.Key.Key_C, CTRL, True),
        (Qt.Key.Key_U, META, True),
        (Qt.Key.Key_C, NONE, False),
        (Qt.Key.Key_Space, NONE, False),
        (Qt.Key.Key_Left, NONE, False),
        (Qt.Key.Key_I, CTRL, False),
    ],
)
def test_is_blocked_shortcut(key, mods, blocked):
    assert is_blocked_shortcut(key, mods) is blocked
    assert is_blocked_shortcut(key.value, mods) is blocked


def test_guard_blocks_copy_and_context_menu(qtbot):
    root = QWidget()
    qtbot.addWidget(root)
    child = QLabel(root)
    guard = ShortcutGuard(root)

    guard.install()
    assert guard.installed

    copy = QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_C.value, CTRL)
    assert guard.eventFilter(child, copy) is True
    space = QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_Space.value, NONE)
    assert guard.eventFilter(child, space) is False

    menu = QContextMenuEvent(QContextMenuEvent.Reason.Mouse, QPoint(1, 1))
    assert guard.eventFilter(child, menu) is True
    outside = QWidget()
    qtbot.addWidget(outside)
    assert guard.eventFilter(outside, menu) is False
    assert guard.blocked_count == 2

    guard.uninstall()
    assert not guard.installed
    # a second uninstall is harmless
    guard.uninstall()
    assert QApplication.instance() is not None
