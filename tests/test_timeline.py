"""Timeline cursor pagination and month counts."""

from datetime import datetime, timedelta, timezone

import pytest

from photomap.services.timeline_service import decode_cursor, encode_cursor, get_timeline


def test_cursor_round_trip():
    stamp = datetime(2024, 5, 1, 9, 30, 15, 123456)
    assert decode_cursor(encode_cursor(stamp, "pho_ab12cd34")) == (stamp, "pho_ab12cd34")


@pytest.mark.parametrize("cursor", ["garbage", "2024-05-01T00:00:00", "not-a-date_pho_1"])
def test_malformed_cursor(cursor):
    with pytest.raises(ValueError):
        decode_cursor(cursor)


def test_pages_cover_every_photo_once(session, make_user, make_album, make_photo):
    user = make_user()
    first = make_album(user, "Spring")
    second = make_album(user, "Summer")
    expected = []
    for day in range(1, 8):
        album = first if day % 2 else second
        expected.append(make_photo(album, taken_at=datetime(2024, 4, day)).id)
    # Same timestamp: ties are ordered by id
    expected.append(make_photo(first, taken_at=datetime(2024, 4, 3)).id)

    seen = []
    cursor = None
    while True:
        page = get_timeline(session, user.id, cursor=cursor, limit=3)
        seen.extend(p.id for p in page.photos)
        if not page.has_more:
            assert page.next_cursor is None
            break
        cursor = page.next_cursor

    assert sorted(seen) == sorted(expected)
    assert len(seen) == len(set(seen))


def test_first_page_has_month_counts(session, make_user, make_album, make_photo):
    user = make_user()
    album = make_album(user)
    make_photo(album, taken_at=datetime(2024, 1, 10))
    make_photo(album, taken_at=datetime(2024, 1, 20))
    make_photo(album, None, None, taken_at=datetime(2024, 2, 5))
    make_photo(album, taken_at=datetime(2024, 2, 6), status="deleted")

    page = get_timeline(session, user.id, limit=1)
    assert page.month_counts == {"2024-01": 2, "2024-02": 1}

    later = get_timeline(session, user.id, cursor=page.next_cursor, limit=1)
    assert later.month_counts is None


def test_undated_photos_sort_by_upload_time(session, make_user, make_album, make_photo):
    user = make_user()
    album = make_album(user)
    old = make_photo(album, taken_at=datetime(2001, 1, 1))
    undated = make_photo(album, taken_at=None, created_at=datetime(2020, 6, 1))

    page = get_timeline(session, user.id)
    assert [p.id for p in page.photos] == [undated.id, old.id]
    assert page.photos[0].date == datetime(2020, 6, 1)


def test_timeline_endpoint(client, auth_headers, make_user, make_album, make_photo):
    user = make_user()
    stranger = make_user("stranger")
    album = make_album(user, "Family")
    for day in (1, 2, 3):
        make_photo(album, taken_at=datetime(2024, 3, day))
    make_photo(make_album(stranger), taken_at=datetime(2024, 3, 4))

    r = client.get("/api/v1/timeline", params={"limit": 2}, headers=auth_headers(user))
    assert r.status_code == 200
    data = r.json()
    assert [p["dateTaken"] for p in data["photos"]] == [
        "2024-03-03T00:00:00+00:00",
        "2024-03-02T00:00:00+00:00",
    ]
    assert data["photos"][0]["albumTitle"] == "Family"
    assert data["hasMore"] is True
    assert data["monthCounts"] == {"2024-03": 3}

    r = client.get(
        "/api/v1/timeline",
        params={"limit": 2, "cursor": data["nextCursor"]},
        headers=auth_headers(user),
    )
    data = r.json()
    assert len(data["photos"]) == 1
    assert data["hasMore"] is False
    assert data["nextCursor"] is None


def test_timeline_rejects_bad_cursor(client, auth_headers, make_user):
    r = client.get("/api/v1/timeline", params={"cursor": "bogus"}, headers=auth_headers(make_user()))
    assert r.status_code == 400


def test_cursor_pages_over_offset_aware_dates(client, auth_headers, make_user, make_album, make_photo):
    user = make_user()
    album = make_album(user)
    paris = timezone(timedelta(hours=2))
    expected = [
        make_photo(album, taken_at=datetime(2024, 6, day, 10, 0, tzinfo=paris)).id
        for day in range(1, 6)
    ]
    headers = auth_headers(user)

    seen = []
    params = {"limit": 2}
    while True:
        r = client.get("/api/v1/timeline", params=params, headers=headers)
        assert r.status_code == 200
        data = r.json()
        seen.extend(p["id"] for p in data["photos"])
        if not data["hasMore"]:
            break
        params = {"limit": 2, "cursor": data["nextCursor"]}

    assert seen == list(reversed(expected))
    assert data["photos"][-1]["dateTaken"] == "2024-06-01T08:00:00+00:00"
