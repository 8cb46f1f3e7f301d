from __future__ import annotations

import logging

import pytest

from gbakaguides.config.models import LoggingSettings
from gbakaguides.utils.logging import SecretRedactingFilter, configure_logging


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("gbakaguides.test", logging.INFO, __file__, 1, msg, args, None)


def test_filter_scrubs_token_from_formatted_message() -> None:
    record = _record("mapbox GET %s", "https://api.mapbox.com/x?access_token=pk.secret")

    assert SecretRedactingFilter(["pk.secret"]).filter(record) is True
    assert record.getMessage() == "mapbox GET https://api.mapbox.com/x?access_token=***"


def test_filter_leaves_clean_records_untouched() -> None:
    record = _record("Nominatim returned %s results", 3)

    SecretRedactingFilter(["pk.secret", None]).filter(record)
    assert record.args == (3,)
    assert record.getMessage() == "Nominatim returned 3 results"


def test_configure_logging_installs_a_single_filter_per_handler(tmp_path) -> None:
    settings = LoggingSettings(level="INFO", format="%(message)s", file=tmp_path / "logs" / "api.log")
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    for handler in saved_handlers:
        root.removeHandler(handler)

    try:
        configure_logging(settings, secrets=("pk.first",))
        configure_logging(settings, secrets=("pk.second",))

        assert root.handlers
        for handler in root.handlers:
            filters = [f for f in handler.filters if isinstance(f, SecretRedactingFilter)]
            assert len(filters) == 1
            assert filters[0].secrets == ("pk.second",)

        logging.getLogger("gbakaguides.test").info("token=%s", "pk.second")
        for handler in root.handlers:
            handler.flush()
        assert "pk.second" not in (tmp_path / "logs" / "api.log").read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)


def test_invalid_level_is_rejected() -> None:
    with pytest.raises(ValueError, match="Invalid log level"):
        configure_logging(LoggingSettings(level="LOUD", format="%(message)s", file=None))
