"""Loading indicator shown over the frame host while an embed URL loads."""

from __future__ import annotations

from typing import Optional

import qtawesome as qta
from PyQt6.QtCore import QEvent, QSize, Qt
from PyQt6.QtWidgets import QGraphicsOpacityEffect, QLabel, QVBoxLayout, QWidget


class SpinnerWidget(QWidget):
    """Spinning icon plus caption; keeps itself centred on its parent."""

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        *,
        size: int = 48,
        color: str = "#ffffff",
        caption: str = "",
    ) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)

        self.icon = qta.IconWidget()
        self._spin = qta.Spin(self.icon, autostart=False)
        self.icon.setIcon(qta.icon("fa5s.spinner", color=color, animation=self._spin))
        self.icon.setIconSize(QSize(size, size))
        self.icon.setFixedSize(size, size)

        self.caption = QLabel(caption or self.tr("Loading video…"))
        self.caption.setStyleSheet(f"color: {color}; font-size: 11px;")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.icon, alignment=Qt.AlignmentFlag.AlignHCenter)
        layout.addWidget(self.caption, alignment=Qt.AlignmentFlag.AlignHCenter)

        effect = QGraphicsOpacityEffect(self)
        effect.setOpacity(0.8)
        self.setGraphicsEffect(effect)

        if parent is not None:
            parent.installEventFilter(self)
        self.setVisible(False)
        self.spinning = False

    def eventFilter(self, obj, event):  # type: ignore[override]
        if obj is self.parent() and event.type() == QEvent.Type.Resize:
            self.recenter()
        return False

    def recenter(self) -> None:
        host = self.parentWidget()
        if host is None:
            return
        self.adjustSize()
        self.move((host.width() - self.width()) // 2, (host.height() - self.height()) // 2)
        self.raise_()

    def start(self) -> None:
        self.recenter()
        self.setVisible(True)
        self._spin.start()
        self.spinning = True

    def stop(self) -> None:
        self._spin.stop()
        self.setVisible(False)
        self.spinning = False
