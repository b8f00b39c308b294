from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# QtWebEngine must be imported before the QApplication exists.
import PyQt6.QtWebEngineWidgets  # noqa: F401
from PyQt6.QtGui import QIcon
from PyQt6.QtWidgets import QApplication, QMessageBox

from .config import LecternConfig
from .embed.oembed import with_preflight
from .embed.platforms import detect_platform, known_platforms, make_target
from .errors import UnsupportedPlatformError
from .i18n import load_translator
from .player import PlayerWindow
from .ui import VideoSelectorUI

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lectern embedded video player")
    parser.add_argument(
        "reference",
        nargs="?",
        help="Video link or ID to open straight away",
    )
    parser.add_argument(
        "--platform",
        choices=[p.value for p in known_platforms()],
        help="Platform of the reference (detected from the link when omitted)",
    )
    parser.add_argument(
        "--selector",
        action="store_true",
        help="Start with the video selection window even when a reference is given",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    raw_argv = list(argv or sys.argv)
    if not raw_argv:
        raw_argv = ["lectern"]
    else:
        raw_argv[0] = "lectern"

    args, qt_args = build_parser().parse_known_args(raw_argv[1:])
    qt_argv = [raw_argv[0]] + qt_args

    # Keep sys.argv consistent for Qt
    if not sys.argv:
        sys.argv.extend(qt_argv)
    else:
        sys.argv[:] = qt_argv

    config = LecternConfig.from_env()
    logging.basicConfig(level=config.log_level, format="%(levelname)s:%(name)s:%(message)s")

    app = QApplication(qt_argv)
    app.setApplicationName("Lectern")
    app.setApplicationDisplayName("Lectern")

    load_translator(app, config.locale)

    try:
        icon_path = Path(__file__).resolve().parent.parent / "images" / "app_icon.png"
        if icon_path.exists():
            app.setWindowIcon(QIcon(str(icon_path)))
    except OSError as exc:  # pragma: no cover - icon loading best-effort
        logger.warning("Failed to set app icon: %s", exc)

    window = None
    if args.reference and not args.selector:
        platform = args.platform or detect_platform(args.reference)
        try:
            if platform is None:
                raise UnsupportedPlatformError(args.reference)
            target = make_target(platform, args.reference)
        except UnsupportedPlatformError as exc:
            logger.error("%s", exc)
            QMessageBox.warning(None, "Lectern", str(exc))
        else:
            if config.preflight:
                target = with_preflight(target)
            window = PlayerWindow(target, config)

    if window is None:
        window = VideoSelectorUI(config)
        if args.reference:
            window.reference_input.setText(args.reference)

    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
