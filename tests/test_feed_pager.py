"""Limit parsing, option normalization and lookahead trimming."""

import pytest

from feed import pager


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 5),
        ("", 5),
        ("abc", 5),
        ("2.5", 5),
        ("0", 5),
        ("-3", 5),
        (True, 5),
        ("7", 7),
        (" 7 ", 7),
        (12, 12),
        ("1000", 50),
    ],
)
def test_parse_limit_is_permissive(raw, expected):
    assert pager.parse_limit(raw) == expected


def test_limit_defaults_come_from_environment(monkeypatch):
    monkeypatch.setenv("FEED_DEFAULT_LIMIT", "10")
    monkeypatch.setenv("FEED_MAX_LIMIT", "20")
    assert pager.parse_limit(None) == 10
    assert pager.parse_limit("500") == 20


def test_bad_environment_limits_fall_back(monkeypatch):
    monkeypatch.setenv("FEED_DEFAULT_LIMIT", "-1")
    monkeypatch.setenv("FEED_MAX_LIMIT", "many")
    assert pager.parse_limit(None) == pager.DEFAULT_LIMIT
    assert pager.parse_limit("500") == pager.DEFAULT_MAX_LIMIT


@pytest.mark.parametrize(
    "raw, expected",
    [(None, "all"), ("friends", "friends"), (" FRIENDS ", "friends"), ("everyone", "all")],
)
def test_normalize_filter(raw, expected):
    assert pager.normalize_filter(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(None, "latest"), ("oldest", "oldest"), ("Oldest", "oldest"), ("random", "latest")],
)
def test_normalize_sort(raw, expected):
    assert pager.normalize_sort(raw) == expected


def _rows(*ids):
    return [{"id": i} for i in ids]


def test_trim_lookahead_drops_extra_row_and_points_at_last_kept():
    page = pager.trim_lookahead(_rows(9, 8, 7, 6), 3)
    assert [r["id"] for r in page.rows] == [9, 8, 7]
    assert page.next_after_id == 7
    assert page.has_more


@pytest.mark.parametrize("ids", [(9, 8, 7), (9,), ()])
def test_trim_lookahead_without_extra_row_is_last_page(ids):
    page = pager.trim_lookahead(_rows(*ids), 3)
    assert [r["id"] for r in page.rows] == list(ids)
    assert page.next_after_id is None
    assert not page.has_more


def test_trim_lookahead_requires_positive_limit():
    with pytest.raises(ValueError):
        pager.trim_lookahead(_rows(1), 0)


def test_query_context_ignores_limit_and_viewer():
    a = pager.FeedQuery(viewer_id=1, limit=5)
    b = pager.FeedQuery(viewer_id=2, limit=20)
    assert a.context == b.context
    assert a.context != pager.FeedQuery(viewer_id=1, sort=pager.SORT_OLDEST).context
    assert a.context != pager.FeedQuery(viewer_id=1, author_id=4).context


def test_descending_follows_sort():
    assert pager.FeedQuery(viewer_id=1).descending
    assert not pager.FeedQuery(viewer_id=1, sort=pager.SORT_OLDEST).descending
