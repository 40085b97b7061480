"""Unit tests for logging helpers."""

import structlog

from gitbase.core.config import Settings
from gitbase.core.logging import (
    LoggingContext,
    add_logger_name,
    configure_logging,
    rename_message_field,
)


def test_logging_context_binds_and_unbinds():
    structlog.contextvars.clear_contextvars()

    with LoggingContext(collection="websites"):
        assert structlog.contextvars.get_contextvars() == {"collection": "websites"}

    assert structlog.contextvars.get_contextvars() == {}


def test_rename_message_field():
    event_dict = rename_message_field(None, "info", {"event": "Saved collection"})

    assert event_dict == {"message": "Saved collection"}


def test_add_logger_name_falls_back_to_package_name():
    assert add_logger_name(object(), "info", {})["logger"] == "gitbase"


def test_configure_logging_json_in_production(capsys):
    configure_logging(Settings(_env_file=None, environment="production", log_format="json"))
    try:
        structlog.get_logger("test").info("Saved collection", record_count=3)
    finally:
        structlog.reset_defaults()

    output = capsys.readouterr().out
    assert '"message": "Saved collection"' in output
    assert '"record_count": 3' in output
