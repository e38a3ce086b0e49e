from types import SimpleNamespace

from app import rate_limiter
from app.rate_limiter import check_rate_limit, get_client_ip


def test_requests_beyond_limit_are_refused():
    results = [check_rate_limit("submission:1.2.3.4", limit=3, window_seconds=60) for _ in range(4)]

    assert [allowed for allowed, _, _ in results] == [True, True, True, False]
    assert results[-1][1] == 3
    assert 0 < results[-1][2] <= 60


def test_keys_are_counted_separately():
    for _ in range(2):
        check_rate_limit("submission:1.1.1.1", limit=2, window_seconds=60)

    assert not check_rate_limit("submission:1.1.1.1", limit=2, window_seconds=60)[0]
    assert check_rate_limit("submission:2.2.2.2", limit=2, window_seconds=60)[0]


def test_window_expiry_resets_the_count(monkeypatch):
    now = [1_000_000]
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now[0])

    check_rate_limit("submission:3.3.3.3", limit=1, window_seconds=60)
    assert not check_rate_limit("submission:3.3.3.3", limit=1, window_seconds=60)[0]

    now[0] += 61
    assert check_rate_limit("submission:3.3.3.3", limit=1, window_seconds=60)[0]


def test_counts_are_seeded_from_redis():
    class FakeRedis:
        def __init__(self):
            self.values = {"submission:4.4.4.4": "5"}

        def get(self, key):
            return self.values.get(key)

        def ttl(self, key):
            return 30

        def set(self, key, value, ex=None):
            self.values[key] = str(value)

    client = FakeRedis()

    allowed, count, ttl = check_rate_limit("submission:4.4.4.4", limit=5, window_seconds=60, client=client)

    assert not allowed
    assert count == 5
    assert ttl == 30


def test_client_ip_prefers_forwarded_header():
    forwarded = SimpleNamespace(headers={"X-Forwarded-For": "9.9.9.9, 10.0.0.1"}, client=None)
    direct = SimpleNamespace(headers={}, client=SimpleNamespace(host="10.0.0.2"))

    assert get_client_ip(forwarded) == "9.9.9.9"
    assert get_client_ip(direct) == "10.0.0.2"
