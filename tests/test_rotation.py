from homeshelf.rotation import DAY_MS, day_bucket, pick_window


def test_day_bucket_is_utc_epoch_aligned():
    assert day_bucket(0) == 0
    assert day_bucket(DAY_MS - 1) == 0
    assert day_bucket(DAY_MS) == 1
    assert day_bucket(3 * DAY_MS + 5) == 3


def test_day_bucket_defaults_to_now(monkeypatch):
    monkeypatch.setattr("homeshelf.rotation.time.time", lambda: 10 * 86_400 + 30.5)
    assert day_bucket() == 10


def test_short_candidate_list_is_returned_unchanged():
    candidates = ["a", "b", "c"]
    assert pick_window(candidates, 3, day=17) == candidates
    assert pick_window(candidates, 8, day=17) == candidates
    assert pick_window([], 4, day=1) == []


def test_seven_genres_day_two_scenario():
    genres = [f"g{n}" for n in range(7)]
    assert pick_window(genres, 4, day=2) == ["g2", "g3", "g4", "g5"]


def test_window_wraps_by_span():
    candidates = list(range(7))
    # span is 4, so day 6 starts at offset 2
    assert pick_window(candidates, 4, day=6) == [2, 3, 4, 5]
    assert pick_window(candidates, 4, day=4) == [0, 1, 2, 3]


def test_same_day_is_stable(monkeypatch):
    candidates = list(range(12))
    monkeypatch.setattr("homeshelf.rotation.time.time", lambda: 19_000 * 86_400 + 10)
    first = pick_window(candidates, 5)
    monkeypatch.setattr("homeshelf.rotation.time.time", lambda: 19_000 * 86_400 + 86_000)
    assert pick_window(candidates, 5) == first
    assert first == pick_window(candidates, 5, day=19_000)


def test_consecutive_days_cover_every_candidate():
    candidates = list(range(11))
    count = 3
    span = len(candidates) - count + 1
    seen = set()
    for day in range(500, 500 + span):
        window = pick_window(candidates, count, day=day)
        assert len(window) == count
        assert window == candidates[window[0]:window[0] + count]
        seen.update(window)
    assert seen == set(candidates)


def test_zero_count_selects_nothing():
    assert pick_window([1, 2, 3], 0, day=5) == []
