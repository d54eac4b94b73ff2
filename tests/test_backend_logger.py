import logging
import types

import backend.logger as logger


def _fake_cfg(**attrs):
    mod = types.ModuleType("backend.config_base")
    for k, v in attrs.items():
        setattr(mod, k, v)
    return mod


def test_flags_read_from_loaded_config_module(monkeypatch):
    monkeypatch.setitem(logger.sys.modules, "backend.config_base", _fake_cfg(SILENT_MODE=True, DEBUG_MODE=True))

    assert logger.is_silent_mode() is True
    assert logger.is_debug_mode() is True


def test_flags_default_when_config_not_loaded(monkeypatch):
    monkeypatch.delitem(logger.sys.modules, "backend.config_base", raising=False)

    assert logger.is_silent_mode() is False
    assert logger.is_debug_mode() is False


def test_level_prefers_explicit_log_level(monkeypatch):
    monkeypatch.setitem(
        logger.sys.modules,
        "backend.config_base",
        _fake_cfg(LOG_LEVEL="warning", DEBUG_MODE=True),
    )
    assert logger._resolve_level_from_config() == logging.WARNING


def test_level_falls_back_to_debug_mode(monkeypatch):
    monkeypatch.setitem(logger.sys.modules, "backend.config_base", _fake_cfg(LOG_LEVEL=None, DEBUG_MODE=True))
    assert logger._resolve_level_from_config() == logging.DEBUG


def test_silent_mode_suppresses_info_but_not_always(monkeypatch, caplog):
    monkeypatch.setitem(logger.sys.modules, "backend.config_base", _fake_cfg(SILENT_MODE=True))

    with caplog.at_level(logging.INFO, logger=logger.LOGGER_NAME):
        logger.info("hidden")
        logger.info("visible", always=True)

    messages = [r.getMessage() for r in caplog.records]
    assert "hidden" not in messages
    assert "visible" in messages


def test_debug_ctx_is_noop_without_debug_mode(monkeypatch, caplog):
    monkeypatch.setitem(logger.sys.modules, "backend.config_base", _fake_cfg(DEBUG_MODE=False))

    with caplog.at_level(logging.INFO, logger=logger.LOGGER_NAME):
        logger.debug_ctx("tmdb", "nothing")

    assert caplog.records == []


def test_debug_ctx_tags_message(monkeypatch, caplog):
    monkeypatch.setitem(logger.sys.modules, "backend.config_base", _fake_cfg(DEBUG_MODE=True))

    with caplog.at_level(logging.INFO, logger=logger.LOGGER_NAME):
        logger.debug_ctx("tmdb", "hello")

    assert any(r.getMessage() == "[TMDB][DEBUG] hello" for r in caplog.records)
