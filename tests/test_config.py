import logging

from lectern.config import DEFAULT_PAGE_ORIGIN, LecternConfig


def test_defaults():
    config = LecternConfig.from_env({})
    assert config == LecternConfig()
    assert config.page_origin == DEFAULT_PAGE_ORIGIN
    assert config.log_level == logging.INFO


def test_values_from_env():
    config = LecternConfig.from_env(
        {
            "LECTERN_DEBUG": "1",
            "LECTERN_LOCALE": "de_DE",
            "LECTERN_PAGE_ORIGIN": "https://lessons.example.org/",
            "LECTERN_LOAD_TIMEOUT_MS": "3000",
            "LECTERN_PREFLIGHT": "yes",
        }
    )
    assert config.debug
    assert config.log_level == logging.DEBUG
    assert config.locale == "de_DE"
    assert config.page_origin == "https://lessons.example.org"
    assert config.load_timeout_ms == 3000
    assert config.preflight


def test_bad_integers_fall_back(caplog):
    with caplog.at_level(logging.WARNING, logger="lectern.config"):
        config = LecternConfig.from_env(
            {"LECTERN_POLL_INTERVAL_MS": "soon", "LECTERN_PROGRESS_INTERVAL_MS": "-5"}
        )
    assert config.poll_interval_ms == 1000
    assert config.progress_interval_ms == 5000
    assert len(caplog.records) == 2


def test_false_flags():
    config = LecternConfig.from_env({"LECTERN_DEBUG": "off", "LECTERN_PREFLIGHT": "0"})
    assert not config.debug
    assert not config.preflight
