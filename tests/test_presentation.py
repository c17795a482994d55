"""
Tests for presentation.py - display strings.
"""

from datetime import datetime, timedelta, timezone

import pytest

from jobboard_api.presentation import excerpt, experience_label, format_salary, time_ago, type_label

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestSalary:
    def test_range(self):
        assert format_salary(50000, 70000, "$") == "$50,000 - $70,000"

    def test_minimum_only(self):
        assert format_salary(40000, None, "€") == "€40,000+"

    def test_not_specified(self):
        assert format_salary(None, 90000) == "Salary not specified"
        assert format_salary(None, None) == "Salary not specified"


class TestLabels:
    def test_type_label(self):
        assert type_label("full-time") == "FULL TIME"
        assert type_label("remote") == "REMOTE"

    def test_experience_label(self):
        assert experience_label("entry") == "Entry Level"
        assert experience_label("principal") == "principal"


class TestExcerpt:
    def test_strips_tags(self):
        assert excerpt("<p>Hello <b>world</b> &amp; more</p>") == "Hello world & more..."

    def test_truncates(self):
        assert excerpt("x" * 200) == "x" * 150 + "..."


class TestTimeAgo:
    @pytest.mark.parametrize("delta,expected", [
        (timedelta(seconds=10), "less than a minute ago"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(hours=3), "about 3 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=10), "10 days ago"),
        (timedelta(days=90), "about 3 months ago"),
        (timedelta(days=800), "about 2 years ago"),
    ])
    def test_buckets(self, delta, expected):
        assert time_ago(NOW - delta, now=NOW) == expected

    def test_naive_timestamps_are_utc(self):
        assert time_ago(datetime(2024, 6, 1, 11, 0), now=NOW) == "about 1 hour ago"
