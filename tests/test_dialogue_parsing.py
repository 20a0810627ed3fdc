# tests/test_dialogue_parsing.py
"""
Tests unitaires sur les parseurs du flow calendrier (fonctions pures).
"""

from datetime import datetime, timedelta, timezone

import pytest

from companion.dialogue.parsing import (
    extract_number,
    is_affirmative,
    normalize_optional,
    parse_datetime,
    parse_duration,
)

NOW = datetime(2026, 3, 10, 9, 0)


# ---------------------------------------------------------------------------
# 1) extract_number
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text,expected", [
    ("abc 2pm and 30 min", 2),
    ("45", 45),
    ("priority 10 please", 10),
    ("no digits here", 0),
    ("", 0),
    ("007", 7),
])
def test_extract_number(text, expected):
    assert extract_number(text) == expected


def test_extract_number_ignores_sign():
    """Pas de signe : '-5' donne 5 (le '-' n'est pas un chiffre)."""
    assert extract_number("-5") == 5


# ---------------------------------------------------------------------------
# 2) parse_duration
# ---------------------------------------------------------------------------

def test_parse_duration_hours():
    assert parse_duration("1 hour") == 60
    assert parse_duration("2 hours") == 120


def test_parse_duration_minutes():
    assert parse_duration("30 minutes") == 30
    assert parse_duration("30 min") == 30
    assert parse_duration("45") == 45


def test_parse_duration_rejected():
    """Pas de nombre, ou zéro → 0 (réponse rejetée)."""
    assert parse_duration("a while") == 0
    assert parse_duration("0 minutes") == 0
    assert parse_duration("") == 0


def test_parse_duration_case_insensitive():
    assert parse_duration("1 HOUR") == 60


# ---------------------------------------------------------------------------
# 3) parse_datetime
# ---------------------------------------------------------------------------

def test_parse_datetime_tomorrow_2pm():
    assert parse_datetime("tomorrow at 2pm", NOW) == datetime(2026, 3, 11, 14, 0)


def test_parse_datetime_today_5pm():
    assert parse_datetime("today at 5pm", NOW) == datetime(2026, 3, 10, 17, 0)


def test_parse_datetime_with_minutes_and_space():
    assert parse_datetime("Tomorrow 3:30 pm", NOW) == datetime(2026, 3, 11, 15, 30)


def test_parse_datetime_am():
    assert parse_datetime("today 9am", NOW) == datetime(2026, 3, 10, 9, 0)


def test_parse_datetime_noon_and_midnight():
    """12pm = midi, 12am = minuit."""
    assert parse_datetime("today at 12pm", NOW) == datetime(2026, 3, 10, 12, 0)
    assert parse_datetime("tomorrow at 12am", NOW) == datetime(2026, 3, 11, 0, 0)


def test_parse_datetime_no_clock_defaults_to_noon():
    assert parse_datetime("tomorrow", NOW) == datetime(2026, 3, 11, 12, 0)


def test_parse_datetime_tomorrow_wins_over_today():
    assert parse_datetime("not today, tomorrow at 4pm", NOW) == datetime(2026, 3, 11, 16, 0)


def test_parse_datetime_month_rollover():
    end_of_month = datetime(2026, 3, 31, 22, 0)
    assert parse_datetime("tomorrow at 8am", end_of_month) == datetime(2026, 4, 1, 8, 0)


def test_parse_datetime_keeps_timezone():
    aware = datetime(2026, 3, 10, 9, 0, tzinfo=timezone(timedelta(hours=1)))
    result = parse_datetime("today at 2pm", aware)
    assert result.tzinfo == aware.tzinfo
    assert result.hour == 14


@pytest.mark.parametrize("text", [
    "next friday",
    "2pm",
    "march 12",
    "",
    "today at 13pm",
    "today at 2:75pm",
    "today at 0am",
])
def test_parse_datetime_rejected(text):
    assert parse_datetime(text, NOW) is None


def test_parse_datetime_word_boundaries():
    """'todays' / 'tomorrows' ne sont pas des jours reconnus."""
    assert parse_datetime("todays plan", NOW) is None


# ---------------------------------------------------------------------------
# 4) is_affirmative / normalize_optional
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", ["yes", "Yes", " yeah ", "ok", "OKAY", "sure", "y", "confirm"])
def test_is_affirmative_true(text):
    assert is_affirmative(text)


@pytest.mark.parametrize("text", ["no", "nope", "yes please", "", "maybe"])
def test_is_affirmative_false(text):
    assert not is_affirmative(text)


def test_normalize_optional_skip_words():
    assert normalize_optional("none") == ""
    assert normalize_optional(" No ") == ""
    assert normalize_optional("SKIP") == ""


def test_normalize_optional_keeps_text():
    assert normalize_optional("  Main Street clinic ") == "Main Street clinic"
    assert normalize_optional("") == ""
