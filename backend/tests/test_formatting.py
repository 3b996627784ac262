"""Display formatting driven by per-user preferences."""

from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from salesdash.formatting import (
    DisplayPreferences,
    format_date,
    format_datetime,
    format_modifier_info,
    parse_user_date,
    FORMAT_US,
    FORMAT_EU,
    FORMAT_ISO,
)


US = DisplayPreferences(date_format=FORMAT_US)
EU = DisplayPreferences(date_format=FORMAT_EU)
ISO = DisplayPreferences(date_format=FORMAT_ISO)

AFTERNOON = datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)


class TestFormatDatetime:

    @pytest.mark.parametrize(
        "prefs,expected",
        [
            (US, "03/05/2024 2:07 PM"),
            (EU, "05/03/2024 14:07"),
            (ISO, "2024-03-05 14:07"),
        ],
    )
    def test_each_format(self, prefs, expected):
        assert format_datetime(AFTERNOON, prefs) == expected

    def test_us_midnight_and_noon(self):
        assert format_datetime(datetime(2024, 3, 5, 0, 5), US) == "03/05/2024 12:05 AM"
        assert format_datetime(datetime(2024, 3, 5, 12, 0), US) == "03/05/2024 12:00 PM"

    def test_iso_string_input(self):
        assert format_datetime("2024-03-05T14:07:00Z", ISO) == "2024-03-05 14:07"

    def test_bad_input_never_raises(self):
        assert format_datetime("not a date", US) == "not a date"
        assert format_datetime(None, US) == ""


class TestFormatDate:

    def test_each_format(self):
        d = date(2024, 3, 5)
        assert format_date(d, US) == "03/05/2024"
        assert format_date(d, EU) == "05/03/2024"
        assert format_date(d, ISO) == "2024-03-05"


class TestParseUserDate:

    def test_round_trip_per_format(self):
        assert parse_user_date("03/05/2024", US) == date(2024, 3, 5)
        assert parse_user_date("05/03/2024", EU) == date(2024, 3, 5)
        assert parse_user_date("2024-03-05", ISO) == date(2024, 3, 5)

    @pytest.mark.parametrize("text", ["", None, "2024-13-40", "yesterday", "31/12/2024"])
    def test_unparsable_is_none(self, text):
        assert parse_user_date(text, US) is None


class TestModifierInfo:

    def test_no_modifier(self):
        assert format_modifier_info(None, AFTERNOON, US) == "N/A"
        assert format_modifier_info("Admin User", None, US) == "N/A"

    def test_name_and_time(self):
        assert format_modifier_info("Admin User", AFTERNOON, EU) == "Admin User\n05/03/2024 14:07"

    def test_bad_timestamp(self):
        assert format_modifier_info("Admin User", "garbage", US) == "Admin User\nUnknown date"


class TestPreferences:

    def test_defaults_for_missing_profile(self):
        assert DisplayPreferences.from_profile(None) == DisplayPreferences()

    def test_unknown_format_falls_back(self):
        profile = SimpleNamespace(date_format="DD.MM.YY", dark_mode=True)
        prefs = DisplayPreferences.from_profile(profile)
        assert prefs.date_format == FORMAT_US
        assert prefs.dark_mode is True


class TestSettingsApi:

    def test_update_settings(self, client, admin_headers):
        resp = client.put(
            "/api/profile/settings",
            json={"date_format": FORMAT_ISO, "dark_mode": True},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json["settings"] == {"date_format": FORMAT_ISO, "dark_mode": True}

        resp = client.get("/api/profile/settings", headers=admin_headers)
        assert resp.json["settings"]["date_format"] == FORMAT_ISO

    def test_rejects_unknown_format(self, client, admin_headers):
        resp = client.put("/api/profile/settings", json={"date_format": "YY"}, headers=admin_headers)
        assert resp.status_code == 400
