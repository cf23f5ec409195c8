import logging

import pytest

from adaptscrape.utils.logging import setup_local_logging


@pytest.fixture
def root_logger():
    logger = logging.getLogger()
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)


def test_setup_local_logging_creates_log_file(root_logger, tmp_path):
    log_file = setup_local_logging('INFO', logs_dir=tmp_path / 'logs')

    assert log_file.parent == tmp_path / 'logs'
    assert log_file.name.startswith('run_')
    assert log_file.suffix == '.log'
    assert root_logger.level == logging.INFO

    logging.getLogger('adaptscrape.test').info('pipeline started')
    for handler in root_logger.handlers:
        handler.flush()
    assert 'pipeline started' in log_file.read_text()


def test_all_level_logs_everything(root_logger, tmp_path):
    setup_local_logging('ALL', logs_dir=tmp_path)

    assert root_logger.level == logging.NOTSET
    assert logging.getLogger('urllib3').level == logging.WARNING


def test_unknown_level_defaults_to_debug(root_logger, tmp_path):
    setup_local_logging('chatty', logs_dir=tmp_path)

    assert root_logger.level == logging.DEBUG
