"""Tests for logging helpers."""
import logging

import pytest

from authsession import setup_logging
from authsession.core.logging import ROOT_LOGGER_NAME, get_logger


class TestGetLogger:
    """Test suite for get_logger."""

    def test_default_is_package_root(self):
        assert get_logger().name == ROOT_LOGGER_NAME

    def test_short_name_is_namespaced(self):
        assert get_logger('refresh').name == 'authsession.refresh'

    def test_qualified_name_kept(self):
        assert get_logger('authsession.pipeline').name == 'authsession.pipeline'

    def test_propagates(self):
        assert get_logger('session').propagate is True


class TestSetupLogging:
    """Test suite for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_levels(self):
        names = ['authsession', 'authsession.refresh', 'authsession.session']
        saved = {name: logging.getLogger(name).level for name in names}
        yield
        for name, level in saved.items():
            logging.getLogger(name).setLevel(level)

    def test_sets_levels(self):
        setup_logging(logging.DEBUG)

        assert logging.getLogger('authsession').level == logging.DEBUG
        assert logging.getLogger('authsession.refresh').level == logging.DEBUG
        assert logging.getLogger('authsession.session').level == logging.DEBUG

    def test_refresh_failure_is_logged(self, caplog):
        logger = get_logger('refresh')
        setup_logging(logging.INFO)

        with caplog.at_level(logging.WARNING, logger='authsession'):
            logger.warning("Token refresh failed: invalid refresh token")

        assert "Token refresh failed" in caplog.text
