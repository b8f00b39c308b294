import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Must be imported before pytest-qt creates the QApplication.
import PyQt6.QtWebEngineWidgets  # noqa: E402,F401
import pytest  # noqa: E402
from PyQt6.QtCore import QSettings  # noqa: E402
from PyQt6.QtWidgets import QWidget  # noqa: E402

from lectern.config import LecternConfig  # noqa: E402
from lectern.embed.bridge import EmbedChannel  # noqa: E402


class FakeEmbedView(QWidget):
    """Stands in for the web view: records frames and posted messages."""

    def __init__(self, page_origin, parent=None):
        super().__init__(parent)
        self.page_origin = page_origin
        self.channel = EmbedChannel()
        self.frames = []
        self.posted = []
        self.cleared = 0
        self.shut_down = False

    def load_frame(self, src, permissions=()):
        self.frames.append((src, tuple(permissions)))

    def post_message(self, message):
        self.posted.append(message)

    def clear_frame(self):
        self.cleared += 1

    def shutdown(self):
        self.shut_down = True


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path):
    for fmt in (QSettings.Format.NativeFormat, QSettings.Format.IniFormat):
        QSettings.setPath(fmt, QSettings.Scope.UserScope, str(tmp_path))
    yield tmp_path


@pytest.fixture
def config():
    return LecternConfig(load_timeout_ms=50, poll_interval_ms=20, progress_interval_ms=30)


@pytest.fixture
def views():
    return []


@pytest.fixture
def view_factory(views):
    def factory(page_origin, parent=None):
        view = FakeEmbedView(page_origin, parent)
        views.append(view)
        return view

    return factory
