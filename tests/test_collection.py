from __future__ import annotations

import pytest

from dotdb import AutoIncrement, Collection, CollectionConfig, Database, DatabaseConfig, Literal
from dotdb.errors import (
    AmountExceedsSizeError,
    InvalidAmountError,
    InvalidEntryError,
    InvalidFilterError,
    InvalidInputError,
    InvalidNameError,
    KeyNotFoundError,
    UpdateCallbackError,
)
from persistence.memory_store import MemoryPersistenceProvider

TEMPLATE = {"$id": 0, "content": "Wow, such empty content"}


@pytest.fixture
def posts(memory_provider, frozen_clock):
    db = Database(DatabaseConfig(collection_timestamps=True), provider=memory_provider)
    return db.create_collection("posts", TEMPLATE)


@pytest.fixture
def plain_posts(memory_provider):
    db = Database(DatabaseConfig(), provider=memory_provider)
    return db.create_collection("posts", TEMPLATE)


def _seed(collection, count):
    return collection.create_bulk([{"content": f"post {i}"} for i in range(count)])


def test_create_applies_template(plain_posts):
    assert plain_posts.create({"content": "hi"}) == {"id": 0, "content": "hi"}
    assert plain_posts.create({"content": "yo"}) == {"id": 1, "content": "yo"}
    assert plain_posts.create({}) == {"id": 2, "content": "Wow, such empty content"}


def test_create_with_timestamps(posts, frozen_clock):
    assert posts.create({"content": "This is my first post!"}) == {
        "id": 0,
        "content": "This is my first post!",
        "createdAt": frozen_clock,
        "updatedAt": frozen_clock,
    }


def test_create_rejects_non_mappings(plain_posts):
    with pytest.raises(InvalidEntryError, match="entry must be an object"):
        plain_posts.create(None)
    with pytest.raises(InvalidEntryError):
        plain_posts.create(["content"])
    assert len(plain_posts) == 0


def test_create_does_not_mutate_input_or_share_defaults(memory_provider):
    db = Database(DatabaseConfig(), provider=memory_provider)
    carts = db.create_collection("carts", {"items": []})
    partial = {"owner": "ann"}

    first = carts.create(partial)
    second = carts.create({"owner": "bob"})
    first["items"].append("apple")

    assert partial == {"owner": "ann"}
    assert second["items"] == []


def test_auto_increment_continues_from_maximum(plain_posts):
    plain_posts.create({"id": 10, "content": "manual"})
    plain_posts.create({"id": 3, "content": "older"})
    assert plain_posts.create({"content": "next"})["id"] == 11


def test_auto_increment_falls_back_to_seed_for_non_numbers(plain_posts):
    plain_posts.create({"id": "abc"})
    assert plain_posts.create({})["id"] == 0


def test_auto_increment_ignores_booleans(plain_posts):
    plain_posts.create({"id": True})
    assert plain_posts.create({})["id"] == 0


def test_explicit_template_variants(memory_provider):
    users = Collection(
        "users",
        memory_provider,
        default_values={"uid": AutoIncrement(100), "role": Literal("member")},
    )
    assert users.create({"name": "Ann"}) == {"name": "Ann", "uid": 100, "role": "member"}
    assert users.create({"name": "Bob"})["uid"] == 101
    assert users.identity_field == "uid"
    assert users.default_values == {"$uid": 100, "role": "member"}


def test_create_bulk(posts, frozen_clock):
    created = posts.create_bulk([{"content": "This is my first post!"}, {"content": "This is my second post!"}])
    assert created == [
        {"id": 0, "content": "This is my first post!", "createdAt": frozen_clock, "updatedAt": frozen_clock},
        {"id": 1, "content": "This is my second post!", "createdAt": frozen_clock, "updatedAt": frozen_clock},
    ]


def test_create_bulk_matches_sequential_ids(plain_posts, memory_provider):
    created = _seed(plain_posts, 3)
    assert [p["id"] for p in created] == [0, 1, 2]
    assert memory_provider.writes(plain_posts.path) == 1

    more = _seed(plain_posts, 2)
    assert [p["id"] for p in more] == [3, 4]


def test_create_bulk_validates_everything_first(plain_posts):
    with pytest.raises(InvalidInputError, match="must be an array"):
        plain_posts.create_bulk(None)
    with pytest.raises(InvalidEntryError):
        plain_posts.create_bulk([{"content": "ok"}, "not an entry"])
    assert len(plain_posts) == 0


def test_get(posts, frozen_clock):
    assert posts.get() is None

    posts.create({"content": "This is my first post!"})
    first = {"id": 0, "content": "This is my first post!", "createdAt": frozen_clock, "updatedAt": frozen_clock}

    assert posts.get() == [first]
    assert posts.get(lambda p: p["id"] == 0) == first
    assert posts.get(lambda p: p["id"] == 1) is None

    posts.create({"content": "second"})
    assert len(posts.get(lambda p: True)) == 2

    with pytest.raises(InvalidFilterError, match="must be a function"):
        posts.get(None)


def test_get_or_create(plain_posts):
    plain_posts.create({"content": "This is my first post!"})

    assert plain_posts.get_or_create(lambda p: p["id"] == 0, {"content": "ignored"}) == {
        "id": 0,
        "content": "This is my first post!",
    }
    assert plain_posts.get_or_create(lambda p: p["id"] == 1, {"content": "This is my second post!"}) == {
        "id": 1,
        "content": "This is my second post!",
    }

    with pytest.raises(InvalidFilterError):
        plain_posts.get_or_create(None, {})
    with pytest.raises(InvalidEntryError):
        plain_posts.get_or_create(lambda p: p["id"] == 99, None)


def test_has(plain_posts):
    plain_posts.create({"content": "This is my first post!"})

    assert plain_posts.has(lambda p: p["id"] == 0) is True
    assert plain_posts.has(lambda p: p["id"] == 1) is False

    with pytest.raises(InvalidFilterError):
        plain_posts.has()
    with pytest.raises(InvalidFilterError):
        plain_posts.has(None)


def test_has_matches_empty_entries(memory_provider):
    bare = Collection("bare", memory_provider)
    bare.create({})
    assert bare.has(lambda e: True) is True


def test_random(plain_posts):
    with pytest.raises(AmountExceedsSizeError, match="exceeds the total amount"):
        plain_posts.random()

    created = _seed(plain_posts, 4)
    order = [p["id"] for p in plain_posts]

    assert isinstance(plain_posts.random(), dict)
    assert isinstance(plain_posts.random(1), dict)

    sample = plain_posts.random(2)
    assert isinstance(sample, list)
    assert len(sample) == 2
    assert sample[0] is not sample[1]
    assert all(any(s is c for c in created) for s in sample)
    # sampling leaves the stored order alone
    assert [p["id"] for p in plain_posts] == order


@pytest.mark.parametrize("amount", [None, -5, 0, 1.5, "2", True])
def test_random_rejects_bad_amounts(plain_posts, amount):
    _seed(plain_posts, 4)
    with pytest.raises(InvalidAmountError, match="bigger than 0"):
        plain_posts.random(amount)


def test_random_amount_larger_than_collection(plain_posts):
    _seed(plain_posts, 4)
    with pytest.raises(AmountExceedsSizeError):
        plain_posts.random(99)


def test_remove(plain_posts, memory_provider):
    _seed(plain_posts, 4)
    assert plain_posts.entries == 4

    removed = plain_posts.remove(lambda p: p["id"] % 2 == 0)
    assert [p["id"] for p in removed] == [0, 2]
    assert [p["id"] for p in plain_posts] == [1, 3]
    assert memory_provider.load(plain_posts.path) == [{"content": "post 1", "id": 1}, {"content": "post 3", "id": 3}]

    plain_posts.remove()
    assert plain_posts.entries == 0

    with pytest.raises(InvalidFilterError):
        plain_posts.remove(None)


def test_reset(posts, frozen_clock):
    _seed(posts, 4)

    assert posts.reset(lambda p: p["id"] == 0) == [
        {"id": 0, "content": "Wow, such empty content", "createdAt": frozen_clock, "updatedAt": frozen_clock}
    ]
    assert posts.reset() == [
        {"id": i, "content": "Wow, such empty content", "createdAt": frozen_clock, "updatedAt": frozen_clock}
        for i in range(4)
    ]

    with pytest.raises(InvalidFilterError):
        posts.reset(None)


def test_update(posts, frozen_clock):
    _seed(posts, 3)

    def sparkle(post):
        post["content"] += " ✨"

    assert posts.update(sparkle, lambda p: p["id"] == 0) == [
        {"id": 0, "content": "post 0 ✨", "createdAt": frozen_clock, "updatedAt": frozen_clock}
    ]

    def greet(post):
        post["content"] = "Hey! " + post["content"]

    assert [p["content"] for p in posts.update(greet)] == ["Hey! post 0 ✨", "Hey! post 1", "Hey! post 2"]

    with pytest.raises(InvalidFilterError):
        posts.update(None)
    with pytest.raises(InvalidFilterError):
        posts.update(greet, None)


def test_update_stamps_updated_at(memory_provider, monkeypatch):
    import dotdb.collection as collection_module

    clock = iter([1000, 2000])
    monkeypatch.setattr(collection_module, "_now_ms", lambda: next(clock))

    db = Database(DatabaseConfig(collection_timestamps=True), provider=memory_provider)
    notes = db.create_collection("notes")
    note = notes.create({"text": "a"})
    notes.update(lambda n: n.update(text="b"))

    assert note == {"text": "b", "createdAt": 1000, "updatedAt": 2000}


def test_update_without_matches_does_not_save(plain_posts, memory_provider):
    _seed(plain_posts, 1)
    writes = memory_provider.writes(plain_posts.path)

    assert plain_posts.update(lambda p: None, lambda p: False) == []
    assert memory_provider.writes(plain_posts.path) == writes


def test_update_callback_errors_are_wrapped(plain_posts):
    _seed(plain_posts, 1)

    def boom(_):
        raise ValueError("bad")

    with pytest.raises(UpdateCallbackError) as excinfo:
        plain_posts.update(boom)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_fetch_reads_backing_file(memory_provider):
    db = Database(DatabaseConfig(auto_save=False), provider=memory_provider)
    posts = db.create_collection("posts", TEMPLATE)
    posts.create({"content": "unsaved"})

    assert posts.fetch() is None
    assert posts.get(lambda p: p["id"] == 0) is not None

    posts.save()
    assert posts.fetch(lambda p: p["id"] == 0) == {"id": 0, "content": "unsaved"}

    # a second writer changes the file; the cache does not see it
    memory_provider.save(posts.path, [{"id": 7, "content": "external"}])
    assert posts.fetch() == [{"id": 7, "content": "external"}]
    assert posts.get() == [{"id": 0, "content": "unsaved"}]


def test_fetch_or_create(memory_provider):
    db = Database(DatabaseConfig(), provider=memory_provider)
    posts = db.create_collection("posts", TEMPLATE)

    created = posts.fetch_or_create(lambda p: p["id"] == 0, {"content": "first"})
    assert created == {"id": 0, "content": "first"}
    assert posts.fetch_or_create(lambda p: p["id"] == 0, {"content": "again"}) == created
    assert len(posts) == 1


def test_save_entry(memory_provider, monkeypatch):
    import dotdb.collection as collection_module

    clock = iter([1000, 5000])
    monkeypatch.setattr(collection_module, "_now_ms", lambda: next(clock))

    db = Database(DatabaseConfig(auto_save=False, collection_timestamps=True), provider=memory_provider)
    posts = db.create_collection("posts", TEMPLATE)
    post = posts.create({"content": "draft"})
    post["content"] = "final"

    assert posts.save_entry(0) is post
    assert memory_provider.load(posts.path) == [
        {"content": "final", "id": 0, "createdAt": 1000, "updatedAt": 5000}
    ]

    with pytest.raises(KeyNotFoundError):
        posts.save_entry(42)


def test_existing_file_is_loaded(memory_provider):
    memory_provider.save("collections/posts.json", [{"id": 4, "content": "old"}, "junk"])
    db = Database(DatabaseConfig(), provider=memory_provider)
    posts = db.create_collection("posts", TEMPLATE)

    assert len(posts) == 1
    assert posts.create({"content": "new"})["id"] == 5


def test_collection_on_disk(disk_db, tmp_path):
    posts = disk_db.create_collection("posts", TEMPLATE)
    posts.create({"content": "hi"})

    reopened = Collection("posts", posts._provider, config=posts.config, default_values=TEMPLATE)
    assert reopened.get() == [{"content": "hi", "id": 0}]
    assert posts.path == tmp_path / "collections" / "posts.json"


def test_collection_name_is_validated(memory_provider):
    with pytest.raises(InvalidNameError):
        Collection("a.b", memory_provider)


def test_collection_config_defaults():
    config = CollectionConfig()
    assert config.auto_save is True
    assert config.timestamps is False
    assert MemoryPersistenceProvider().exists("collections/none.json") is False
