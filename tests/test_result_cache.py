import json

from place_validator import config
from place_validator.cache import ResultCache, is_fresh, make_entry
from place_validator.classifier import ClassificationResult
from place_validator.storage import MemoryStore


def make_result(place_id, flags=("Website",)):
    return ClassificationResult(
        place_id=place_id,
        name=f"Place {place_id}",
        uri=f"https://maps.google.com/?cid={place_id}",
        flags=tuple(flags),
        primary_type="store",
        primary_type_display_name="Store",
    )


def test_put_same_key_supersedes():
    cache = ResultCache(MemoryStore())
    first = make_entry(52.2, 21.0, 3125, [make_result("a")], timestamp=1000)
    second = make_entry(52.2001, 21.0001, 3125, [make_result("b")], timestamp=2000)
    assert first.cache_key == second.cache_key

    cache.put(first)
    cache.put(second)

    assert len(cache) == 1
    found = cache.find(first.cache_key)
    assert found is second
    assert [r.place_id for r in found.results] == ["b"]


def test_eleventh_entry_evicts_oldest_inserted():
    cache = ResultCache(MemoryStore())
    entries = [make_entry(10.0 + i, 20.0, 500, [], timestamp=10_000 - i) for i in range(11)]
    for entry in entries:
        cache.put(entry)
        assert len(cache) <= 10

    assert len(cache) == 10
    assert cache.find(entries[0].cache_key) is None
    assert [e.cache_key for e in cache.entries()] == [e.cache_key for e in entries[1:]]


def test_superseding_moves_entry_to_newest_position():
    cache = ResultCache(MemoryStore())
    a = make_entry(1.0, 1.0, 100, [], timestamp=1)
    b = make_entry(2.0, 2.0, 100, [], timestamp=2)
    cache.put(a)
    cache.put(b)
    a2 = make_entry(1.0, 1.0, 100, [make_result("x")], timestamp=3)
    cache.put(a2)
    assert [e.timestamp for e in cache.entries()] == [2, 3]


def test_find_is_exact_match_and_keeps_stale_entries():
    cache = ResultCache(MemoryStore())
    entry = make_entry(52.2, 21.0, 3125, [], timestamp=0)
    cache.put(entry)
    assert cache.find("52.2,21,3125") is entry
    assert cache.find("52.2,21,6250") is None
    now = config.CACHE_MAX_AGE_MS + 1
    assert cache.find(entry.cache_key) is entry
    assert cache.find_fresh(entry.cache_key, now=now) is None


def test_is_fresh_boundary():
    entry = make_entry(52.2, 21.0, 3125, [], timestamp=5_000)
    assert is_fresh(entry, 5_000)
    assert is_fresh(entry, 5_000 + 1_799_999)
    assert not is_fresh(entry, 5_000 + 1_800_000)
    assert not is_fresh(entry, 5_000 + 1_800_001)
    assert is_fresh(entry, 5_000 + 10, max_age_ms=11)


def test_persisted_shape_and_reload():
    store = MemoryStore()
    cache = ResultCache(store)
    entry = make_entry(52.22967, 21.01223, 3125, [make_result("a", ("Website", "Hours"))], timestamp=42)
    cache.put(entry)

    payload = json.loads(store.get(config.STORAGE_CACHE))
    assert payload == [
        {
            "timestamp": 42,
            "lat": 52.22967,
            "lng": 21.01223,
            "radius": 3125,
            "cacheKey": "52.23,21.012,3125",
            "results": [
                {
                    "id": "a",
                    "name": "Place a",
                    "uri": "https://maps.google.com/?cid=a",
                    "missing": ["Website", "Hours"],
                    "primaryTypeDisplayName": "Store",
                    "primaryType": "store",
                }
            ],
        }
    ]

    reloaded = ResultCache(store)
    assert reloaded.entries() == [entry]


def test_clear_empties_store():
    store = MemoryStore()
    cache = ResultCache(store)
    cache.put(make_entry(1.0, 1.0, 100, [], timestamp=1))
    cache.clear()
    assert len(cache) == 0
    assert store.get(config.STORAGE_CACHE) is None
    assert len(ResultCache(store)) == 0


def test_corrupt_or_malformed_cache_is_tolerated():
    assert len(ResultCache(MemoryStore({config.STORAGE_CACHE: "nope"}))) == 0
    assert len(ResultCache(MemoryStore({config.STORAGE_CACHE: '{"a": 1}'}))) == 0
    store = MemoryStore({config.STORAGE_CACHE: json.dumps([{"timestamp": "x"}, {"timestamp": 1, "lat": 1, "lng": 2, "radius": 100}])})
    cache = ResultCache(store)
    assert len(cache) == 1
    assert cache.entries()[0].cache_key == "1,2,100"


def test_get_by_index():
    cache = ResultCache(MemoryStore())
    entry = make_entry(1.0, 1.0, 100, [], timestamp=1)
    cache.put(entry)
    assert cache.get(0) is entry
    assert cache.get(1) is None
    assert cache.get(-1) is None


def test_oversized_persisted_cache_keeps_newest_entries():
    entries = [make_entry(10.0 + i, 20.0, 500, [], timestamp=i) for i in range(12)]
    store = MemoryStore({config.STORAGE_CACHE: json.dumps([e.to_dict() for e in entries])})

    cache = ResultCache(store)
    assert cache.entries() == entries[-10:]

    small = ResultCache(store, max_entries=3)
    assert small.entries() == entries[-3:]
    small.put(make_entry(50.0, 20.0, 500, [], timestamp=99))
    assert len(small) == 3
    assert small.entries()[0] == entries[-2]
