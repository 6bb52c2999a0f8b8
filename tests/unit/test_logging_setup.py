from __future__ import annotations

import logging
from io import StringIO

from arhiva_dosare.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    set_debug,
    setup_logging,
)


def test_setup_logging_creates_single_stdout_handler():
    logger = setup_logging()
    assert logger.name == APP_LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    first = setup_logging()
    assert setup_logging() is first
    assert get_logger() is first
    assert len(first.handlers) == 1


def test_labeled_prefixes():
    stream = StringIO()
    logger = logging.getLogger("test_arhiva_labels")
    logger.handlers.clear()
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger.info("pornit")
    logger.warning("atenție")
    logger.error("eșuat")
    logger.log(SUMMARY_LEVEL, "file=a.xlsx status=success")

    assert stream.getvalue().splitlines() == [
        "INFO pornit",
        "WARN atenție",
        "ERROR eșuat",
        "SUMMARY file=a.xlsx status=success",
    ]


def test_module_loggers_share_the_app_handler(capsys):
    setup_logging()
    logging.getLogger("arhiva_dosare.services.importer").info("din modul")
    log_summary("file=x.xlsx status=failed")
    out = capsys.readouterr().out
    assert "INFO din modul" in out
    assert "SUMMARY file=x.xlsx status=failed" in out


def test_set_debug_lowers_every_level(capsys):
    logger = setup_logging()
    logger.debug("ascuns")
    set_debug(logger)
    logger.debug("vizibil")
    out = capsys.readouterr().out
    assert "ascuns" not in out
    assert "DEBUG vizibil" in out
