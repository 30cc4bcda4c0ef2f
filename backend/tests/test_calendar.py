"""Sprint calendar tests."""
import datetime

from pi_planning.engine.calendar import (
    filter_days,
    generate_default_calendar,
    is_ip_sprint,
    is_weekend,
    iso_week,
    order_sprints,
    parse_date,
    resolve_day,
    sprint_for_date,
    sprint_options,
    weekday_short,
)
from pi_planning.schemas.planning import AvailabilityDay


class TestDateParsing:
    def test_iso_date(self):
        assert parse_date("2025-12-04") == datetime.date(2025, 12, 4)

    def test_iso_datetime_keeps_date_part(self):
        assert parse_date("2025-12-04T10:30:00") == datetime.date(2025, 12, 4)

    def test_swiss_format(self):
        assert parse_date("04.12.2025") == datetime.date(2025, 12, 4)

    def test_two_digit_year(self):
        assert parse_date("04.12.25") == datetime.date(2025, 12, 4)

    def test_invalid_dates_are_none(self):
        assert parse_date("garbage") is None
        assert parse_date("31.02.2026") is None
        assert parse_date("") is None
        assert parse_date(None) is None


class TestDayResolution:
    def test_iso_week(self):
        assert iso_week("2025-12-04") == 49
        assert iso_week("2026-01-01") == 1

    def test_iso_week_invalid(self):
        assert iso_week("not a date") is None

    def test_weekday_labels(self):
        assert weekday_short("2025-12-04", "de-CH") == "Do"
        assert weekday_short("2025-12-04", "en-US") == "Thu"
        assert weekday_short("bad", "de-CH") == ""

    def test_weekend(self):
        assert is_weekend("2025-12-06")
        assert not is_weekend("2025-12-05")

    def test_resolve_day(self):
        info = resolve_day(AvailabilityDay(date="2025-12-08", sprint="26.1-S1"), "de-CH")
        assert info.weekday == "Mo"
        assert info.iso_week == 50
        assert info.sprint == "26.1-S1"
        assert not info.is_weekend

    def test_resolve_malformed_day_does_not_raise(self):
        info = resolve_day(AvailabilityDay(date="xx", sprint="26.1-S1"))
        assert info.weekday == ""
        assert info.iso_week is None

    def test_sprint_for_date(self, snapshot):
        assert sprint_for_date("2026-02-19", snapshot.availabilities) == "26.1-IP"
        assert sprint_for_date("2030-01-01", snapshot.availabilities) == ""


class TestSprints:
    def test_sprint_options(self):
        options = sprint_options("26.1", 6)
        assert options[0] == "26.1-S1"
        assert options[-1] == "26.1-IP"
        assert len(options) == 7

    def test_ip_marker(self):
        assert is_ip_sprint("26.1-IP", "IP")
        assert not is_ip_sprint("26.1-S2", "IP")
        assert not is_ip_sprint("", "IP")

    def test_order_by_first_day(self):
        rows = [
            AvailabilityDay(date="2026-02-19", sprint="26.1-IP"),
            AvailabilityDay(date="2025-12-18", sprint="26.1-S2"),
            AvailabilityDay(date="2025-12-04", sprint="26.1-S1"),
            AvailabilityDay(date="bad", sprint="26.1-S9"),
            AvailabilityDay(date="2025-12-05", sprint=""),
        ]
        assert order_sprints(rows) == ["26.1-S1", "26.1-S2", "26.1-IP", "26.1-S9"]

    def test_filter_days(self, snapshot):
        rows = snapshot.availabilities
        assert len(filter_days(rows, sprint="26.1-IP")) == 2
        assert [r.date for r in filter_days(rows, weekday="Mo", locale="de-CH")] == ["2025-12-08", "2025-12-15"]
        assert len(filter_days(rows, week=49)) == 2
        assert len(filter_days(rows, sprint="26.1-S1", week=51)) == 3


class TestDefaultCalendar:
    def test_seeds_weekdays_only(self):
        rows = generate_default_calendar("26.1")
        assert len(rows) == 65
        assert rows[0].date == "2025-12-04"
        assert rows[0].sprint == "26.1-S1"
        assert rows[-1].date == "2026-03-04"
        assert rows[-1].sprint == "26.1-IP"
        assert not any(is_weekend(r.date) for r in rows)
        assert all(r.pi == "26.1" for r in rows)

    def test_sprint_sizes(self):
        rows = generate_default_calendar("26.1")
        sizes = {s: len(filter_days(rows, sprint=s)) for s in order_sprints(rows)}
        assert sizes == {"26.1-S1": 10, "26.1-S2": 20, "26.1-S3": 10, "26.1-S4": 15, "26.1-IP": 10}

    def test_existing_rows_are_kept(self, snapshot):
        assert generate_default_calendar("26.1", snapshot.availabilities) == []

    def test_unknown_pi(self):
        assert generate_default_calendar("99.9") == []
