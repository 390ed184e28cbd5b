import threading

import pytest

from theme_map.colour_cache import ColourCache


def test_hit_skips_compute():
    cache = ColourCache()
    calls = []

    def compute(key):
        calls.append(key)
        return ("mapped", key)

    first = cache.get_or_compute((1, 2, 3), compute)
    second = cache.get_or_compute((1, 2, 3), compute)

    assert first == second == ("mapped", (1, 2, 3))
    assert calls == [(1, 2, 3)]
    assert (cache.hits, cache.misses) == (1, 1)


def test_keys_compare_by_device_representation():
    cache = ColourCache()

    cache.get_or_compute((16, 16, 16), lambda key: "rgb")
    value = cache.get_or_compute((16, 16, 16, 255), lambda key: "rgba")

    assert value == "rgba"
    assert len(cache) == 2


def test_batch_computes_each_missing_key_once_in_first_seen_order():
    cache = ColourCache()
    cache.put((9,), "nine")
    batches = []

    def compute_many(keys):
        batches.append(list(keys))
        return [f"v{k[0]}" for k in keys]

    values = cache.get_or_compute_many([(2,), (9,), (1,), (2,), (1,)], compute_many)

    assert values == ["v2", "nine", "v1", "v2", "v1"]
    assert batches == [[(2,), (1,)]]
    assert (cache.hits, cache.misses) == (3, 2)


def test_batch_without_misses_never_calls_compute():
    cache = ColourCache()
    cache.put("a", 1)

    def boom(keys):
        raise AssertionError("should not be called")

    assert cache.get_or_compute_many(["a", "a"], boom) == [1, 1]


def test_batch_length_mismatch_is_rejected():
    cache = ColourCache()

    with pytest.raises(ValueError):
        cache.get_or_compute_many([(1,), (2,)], lambda keys: ["only one"])


def test_concurrent_workers_converge_on_one_value_per_key():
    cache = ColourCache()
    keys = [(i % 17,) for i in range(2000)]
    results = {}
    lock = threading.Lock()

    def worker(offset):
        got = [cache.get_or_compute(k, lambda key: key[0] * 3) for k in keys[offset:] + keys[:offset]]
        with lock:
            results[offset] = got

    threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 17
    assert all(cache.get((i,)) == i * 3 for i in range(17))
    assert cache.hits + cache.misses == 8 * len(keys)
    for got in results.values():
        assert sorted(got) == sorted(k[0] * 3 for k in keys)


def test_get_distinguishes_a_miss_from_a_stored_none():
    cache = ColourCache()
    cache.put((1, 2, 3), None)

    assert cache.get((9, 9, 9), "miss") == "miss"
    assert cache.get((1, 2, 3), "miss") is None
    assert (1, 2, 3) in cache
    assert cache.hits == cache.misses == 0
