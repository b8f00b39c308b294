"""Translation loading for the Lectern windows.

Qt's translator lookup is kept in one place so widgets only ever call
``self.tr`` and never worry about which bundle is installed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QCoreApplication, QLocale, QTranslator

logger = logging.getLogger(__name__)

BASE_NAME = "lectern"
LOCALE_DIR = Path(__file__).resolve().parent / "locale"

_translator: Optional[QTranslator] = None


def load_translator(app, language: Optional[str] = None, locale_dir: Optional[Path] = None) -> bool:
    """Install a Qt translator for ``language`` (or the system locale).

    Lookup goes from the full locale (``lectern_pt_BR.qm``) to the bare
    language (``lectern_pt.qm``). Returns ``True`` when a bundle was
    installed.
    """

    global _translator

    locale_dir = locale_dir or LOCALE_DIR
    if not locale_dir.exists():
        logger.debug("Locale directory %s does not exist yet.", locale_dir)
        return False

    desired_locale = QLocale(language) if language else QLocale.system()
    translator = QTranslator()

    loaded = translator.load(desired_locale, BASE_NAME, "_", str(locale_dir))
    if not loaded:
        locale_name = desired_locale.name()
        loaded = translator.load(f"{BASE_NAME}_{locale_name}", str(locale_dir))
        if not loaded:
            lang = locale_name.split("_")[0]
            loaded = bool(lang) and translator.load(f"{BASE_NAME}_{lang}", str(locale_dir))

    if not loaded:
        logger.info("No translation found for locale %s", desired_locale.name())
        return False

    if _translator is not None:
        app.removeTranslator(_translator)
    # Qt does not own the translator; keep it alive here.
    _translator = translator
    app.installTranslator(translator)
    logger.info("Loaded translation for locale %s", desired_locale.name())
    return True


def tr(context: str, text: str) -> str:
    """Translate outside a QObject, e.g. ``tr("VideoSelectorUI", "Start")``."""

    return QCoreApplication.translate(context, text)
