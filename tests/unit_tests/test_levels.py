"""
Level parsing tests.
"""

import pytest

from unalogger.levels import Level, level_for_method, parse_level


class TestParseLevel:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("debug", Level.DEBUG),
            ("INFO", Level.INFO),
            (" error ", Level.ERROR),
            ("fatal", Level.FATAL),
            ("CRITICAL", Level.FATAL),
            (40, Level.ERROR),
            (Level.DEBUG, Level.DEBUG),
        ],
    )
    def test_known_values(self, raw, expected):
        assert parse_level(raw) is expected

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            parse_level("verbose")

    def test_ordering_matches_severity(self):
        assert Level.DEBUG < Level.INFO < Level.ERROR < Level.FATAL


def test_level_for_method():
    assert level_for_method("critical") is Level.FATAL
    assert level_for_method("debug") is Level.DEBUG
    assert level_for_method("unknown") is Level.INFO
