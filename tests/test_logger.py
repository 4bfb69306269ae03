"""
Tests for pinned_cert_tls.common.logger module.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from pinned_cert_tls.common import setup_logger
from pinned_cert_tls.config import LoggingConfig


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Restore the package logger after each test."""

    package_logger = logging.getLogger('pinned_cert_tls')
    saved_handlers = list(package_logger.handlers)
    saved_level = package_logger.level
    yield
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers[:] = saved_handlers
    package_logger.setLevel(saved_level)


class TestSetupLogger:
    """Test setup_logger()."""

    def test_default_console_logging(self) -> None:
        """Should configure a single INFO console handler by default."""

        package_logger = setup_logger()

        assert package_logger.name == 'pinned_cert_tls'
        assert package_logger.level == logging.INFO
        assert len(package_logger.handlers) == 1

    def test_is_idempotent(self) -> None:
        """Should not duplicate handlers on repeated calls."""

        setup_logger()
        package_logger = setup_logger(logging_level=logging.DEBUG)

        assert len(package_logger.handlers) == 1
        assert package_logger.level == logging.DEBUG

    def test_file_logging_from_config(self, tmp_path: Path) -> None:
        """Should add a file handler and use the most verbose level."""

        log_path: Path = tmp_path / 'logs' / 'pinned.log'
        config = LoggingConfig(console_level='WARNING', file_path=log_path)

        package_logger = setup_logger(config=config)
        logging.getLogger('pinned_cert_tls.factory').debug('debug line')
        for handler in package_logger.handlers:
            handler.flush()

        assert len(package_logger.handlers) == 2  # noqa: PLR2004
        assert package_logger.level == logging.DEBUG
        assert 'debug line' in log_path.read_text(encoding='utf-8')
