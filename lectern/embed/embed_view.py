"""Web view hosting a provider iframe inside a small relay page."""

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from PyQt6.QtCore import QUrl, Qt
from PyQt6.QtWebChannel import QWebChannel
from PyQt6.QtWebEngineCore import QWebEnginePage
from PyQt6.QtWebEngineWidgets import QWebEngineView

from lectern.embed.bridge import EmbedChannel
from lectern.embed.sdk_loader import engine_profile_loader

logger = logging.getLogger(__name__)


class ProtectedEmbedView(QWebEngineView):
    """Shows one iframe and relays its postMessage traffic to ``channel``.

    ``page_origin`` becomes the shell's base URL, so it is also the origin
    the provider sees in ``origin``/``parent`` query parameters.
    """

    def __init__(self, page_origin: str, parent=None) -> None:
        super().__init__(parent)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.NoContextMenu)
        self.channel = EmbedChannel()
        self._page_origin = page_origin
        self._shell_ready = False
        self._pending: Optional[tuple[str, str]] = None
        self._profile = None

        self.channel.shellReady.connect(self._on_shell_ready)

        self._loader = engine_profile_loader()
        self._loader.acquire(self._on_profile)

    # ------------------------------------------------------------------
    def _on_profile(self, profile) -> None:
        self._profile = profile
        page = QWebEnginePage(profile, self)
        page.settings().setAttribute(page.settings().WebAttribute.PluginsEnabled, True)
        self.setPage(page)

        self._web_channel = QWebChannel(page)
        self._web_channel.registerObject("embedChannel", self.channel)
        page.setWebChannel(self._web_channel)

        self.setHtml(self._html_shell(), QUrl(self._page_origin))

    def _on_shell_ready(self) -> None:
        self._shell_ready = True
        if self._pending:
            src, allow = self._pending
            self._pending = None
            self._set_frame(src, allow)

    # ------------------------------------------------------------------
    def load_frame(self, src: str, permissions: Sequence[str] = ()) -> None:
        allow = "; ".join(permissions)
        if not self._shell_ready:
            self._pending = (src, allow)
            return
        self._set_frame(src, allow)

    def post_message(self, message: str) -> None:
        if not self._shell_ready:
            return
        self._run_js(f"postToPlayer({json.dumps(message)})")

    def clear_frame(self) -> None:
        self._pending = None
        if self._shell_ready:
            self._run_js("clearFrame()")

    def shutdown(self) -> None:
        if self._loader is None:
            return
        self.clear_frame()
        page = self.page()
        if self._profile is not None and page is not None:
            page.deleteLater()
        self._loader.release(self._on_profile)
        self._loader = None

    def _set_frame(self, src: str, allow: str) -> None:
        logger.debug("Loading embed frame %s", src)
        self._run_js(f"setFrame({json.dumps(src)}, {json.dumps(allow)})")

    def _run_js(self, script: str) -> None:
        self.page().runJavaScript(script)

    def _html_shell(self) -> str:
        return """
<!DOCTYPE html>
<html>
  <head>
    <meta charset=\"utf-8\" />
    <style>
      html, body {
        margin: 0;
        padding: 0;
        height: 100%;
        overflow: hidden;
        background-color: #000;
        user-select: none;
      }
      iframe {
        border: 0;
        width: 100%;
        height: 100%;
      }
    </style>
    <script src=\"qrc:///qtwebchannel/qwebchannel.js\"></script>
  </head>
  <body>
    <script>
      var hub = null;

      new QWebChannel(qt.webChannelTransport, function(channel) {
        hub = channel.objects.embedChannel;
        hub.signalShellReady();
      });

      window.addEventListener('message', function(event) {
        if (!hub) return;
        var data = event.data;
        if (typeof data !== 'string') {
          try {
            data = JSON.stringify(data);
          } catch (e) {
            return;
          }
        }
        hub.receiveMessage(event.origin || '', data || '');
      });

      function clearFrame() {
        var old = document.getElementById('player-frame');
        if (old) old.parentNode.removeChild(old);
      }

      function setFrame(src, allow) {
        clearFrame();
        var frame = document.createElement('iframe');
        frame.id = 'player-frame';
        frame.setAttribute('allow', allow);
        frame.setAttribute('allowfullscreen', 'true');
        frame.setAttribute('referrerpolicy', 'strict-origin-when-cross-origin');
        frame.addEventListener('load', function() {
          if (hub) hub.reportFrameLoaded();
        });
        frame.addEventListener('error', function() {
          if (hub) hub.reportFrameError();
        });
        frame.src = src;
        document.body.appendChild(frame);
      }

      function postToPlayer(message) {
        var frame = document.getElementById('player-frame');
        if (frame && frame.contentWindow) {
          frame.contentWindow.postMessage(message, '*');
        }
      }

      document.addEventListener('contextmenu', function(e) { e.preventDefault(); });
      document.addEventListener('copy', function(e) { e.preventDefault(); });
      document.addEventListener('cut', function(e) { e.preventDefault(); });

      window.setFrame = setFrame;
      window.clearFrame = clearFrame;
      window.postToPlayer = postToPlayer;
    </script>
  </body>
</html>
"""
