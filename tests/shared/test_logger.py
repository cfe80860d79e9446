"""Tests for loguru setup."""

import io
import logging
import sys

import pytest
from loguru import logger

from app.shared.config import config
from app.shared.logger import QUIET_LOGGERS, format_error, get_service_tag, init_logger


@pytest.fixture
def service_tag(monkeypatch):
    get_service_tag.cache_clear()
    yield monkeypatch
    get_service_tag.cache_clear()


@pytest.fixture
def stderr(monkeypatch):
    buffer = io.StringIO()
    monkeypatch.setattr(sys, "stderr", buffer)
    yield buffer
    logger.remove()
    logger.add(sys.__stderr__)


class TestFormatError:
    def test_includes_chained_cause(self):
        try:
            try:
                raise KeyError("inner")
            except KeyError as e:
                raise RuntimeError("outer") from e
        except RuntimeError as e:
            text = format_error(e)

        assert "KeyError: 'inner'" in text
        assert "RuntimeError: outer" in text
        assert text.index("KeyError") < text.index("RuntimeError: outer")


class TestServiceTag:
    def test_defaults(self, service_tag):
        service_tag.delitem(config._config, "SERVICE_NAME", raising=False)
        service_tag.delitem(config._config, "BUILD_COMMIT", raising=False)

        assert get_service_tag().startswith("live-storage@dev#")

    def test_commit_sha_taken_from_build(self, service_tag):
        service_tag.setitem(config._config, "SERVICE_NAME", "edge")
        service_tag.setitem(config._config, "BUILD_COMMIT", "main-0123456789abcdef")

        assert get_service_tag().startswith("edge@0123456789ab#")


class TestInitLogger:
    def test_level_filters_output(self, stderr):
        init_logger("info")

        logger.debug("hidden line")
        logger.info("visible line")

        output = stderr.getvalue()
        assert "visible line" in output
        assert "hidden line" not in output
        assert get_service_tag() in output

    def test_library_loggers_quieted(self, stderr):
        init_logger()

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
