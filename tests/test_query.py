import pytest

from dbwatch.batch import Batch
from dbwatch.event import Delete, Insert
from dbwatch.query import (
    InternalWatch,
    KeyTypeMismatchError,
    MaxWatcherReachedError,
    Watch,
)
from dbwatch.request import KeyDefinition, KeyEntry, WatcherRequest
from dbwatch.watchers import Watchers, push_batch

TABLE = "1_1_id"
SK_U = KeyDefinition("1_1_sk_u", ("list[str]",), unique=True)
NAME = KeyDefinition("1_1_name", ("str",))


def make_watch(next_id=0):
    watchers = Watchers()
    internal = InternalWatch(watchers, {TABLE: ("list[int]",)}, next_id=next_id)
    return Watch(internal), watchers


def push(watchers, request, event):
    batch = Batch()
    batch.add(request, event)
    push_batch(watchers, batch)


def test_watch_get_primary_type_check():
    watch, watchers = make_watch()
    channel, watcher_id = watch.get().primary(TABLE, [1])
    assert watcher_id == 0
    assert len(watchers) == 1
    with pytest.raises(KeyTypeMismatchError):
        watch.get().primary(TABLE, ["3"])
    assert len(watchers) == 1


def test_watch_get_secondary_type_check():
    watch, watchers = make_watch()
    _, watcher_id = watch.get().secondary(TABLE, SK_U, ["test"])
    assert watcher_id == 0
    with pytest.raises(KeyTypeMismatchError):
        watch.get().secondary(TABLE, SK_U, [3])
    assert len(watchers) == 1


def test_watch_scan_primary_start_with_type_check():
    watch, watchers = make_watch()
    _, watcher_id = watch.scan().primary().start_with(TABLE, [1])
    assert watcher_id == 0
    with pytest.raises(KeyTypeMismatchError):
        watch.scan().primary().start_with(TABLE, ["3"])
    assert len(watchers) == 1


def test_watch_scan_secondary_start_with_type_check():
    watch, watchers = make_watch()
    _, watcher_id = watch.scan().secondary(SK_U).start_with(TABLE, ["test"])
    assert watcher_id == 0
    with pytest.raises(KeyTypeMismatchError):
        watch.scan().secondary(SK_U).start_with(TABLE, [3])
    assert len(watchers) == 1


def test_ids_increase():
    watch, watchers = make_watch()
    ids = [
        watch.scan().primary().all(TABLE)[1],
        watch.scan().secondary(NAME).all(TABLE)[1],
        watch.get().secondary(TABLE, NAME, "a")[1],
    ]
    assert ids == [0, 1, 2]
    assert len(watchers) == 3


def test_max_watcher_reached():
    watch, watchers = make_watch(next_id=2**64 - 1)
    with pytest.raises(MaxWatcherReachedError):
        watch.scan().primary().all(TABLE)
    assert len(watchers) == 0


def test_primary_watch_receives_matching_event():
    watchers = Watchers()
    watch = Watch(InternalWatch(watchers))
    channel, _ = watch.get().primary("items", "a")
    push(watchers, WatcherRequest("items", b"a"), Insert("item-a"))
    push(watchers, WatcherRequest("items", b"b"), Insert("item-b"))
    assert [e.inner() for e in channel] == ["item-a"]


def test_primary_all_receives_every_event_of_table():
    watchers = Watchers()
    watch = Watch(InternalWatch(watchers))
    channel, _ = watch.scan().primary().all("items")
    push(watchers, WatcherRequest("items", b"a"), Insert(1))
    push(watchers, WatcherRequest("items", b"b"), Delete(2))
    push(watchers, WatcherRequest("other", b"c"), Insert(3))
    assert [e.inner() for e in channel] == [1, 2]


def test_primary_start_with():
    watchers = Watchers()
    watch = Watch(InternalWatch(watchers))
    channel, _ = watch.scan().primary().start_with("items", "te")
    push(watchers, WatcherRequest("items", b"test"), Insert("yes"))
    push(watchers, WatcherRequest("items", b"other"), Insert("no"))
    assert [e.inner() for e in channel] == ["yes"]


def test_secondary_get_and_start_with():
    watchers = Watchers()
    watch = Watch(InternalWatch(watchers))
    exact, _ = watch.get().secondary("items", SK_U, ["test"])
    prefix, _ = watch.scan().secondary(NAME).start_with("items", "al")
    push(
        watchers,
        WatcherRequest(
            "items",
            b"1",
            {SK_U: KeyEntry.default(b"test"), NAME: KeyEntry.default(b"alice")},
        ),
        Insert("first"),
    )
    push(
        watchers,
        WatcherRequest("items", b"2", {NAME: KeyEntry.optional(None)}),
        Insert("second"),
    )
    assert [e.inner() for e in exact] == ["first"]
    assert [e.inner() for e in prefix] == ["first"]


def test_secondary_all():
    watchers = Watchers()
    watch = Watch(InternalWatch(watchers))
    channel, _ = watch.scan().secondary(NAME).all("items")
    push(
        watchers,
        WatcherRequest("items", b"1", {NAME: KeyEntry.default(b"bob")}),
        Insert("bob"),
    )
    push(watchers, WatcherRequest("items", b"2"), Insert("none"))
    assert [e.inner() for e in channel] == ["bob"]


def test_unsupported_key_type():
    watch, _ = make_watch()
    with pytest.raises(TypeError):
        watch.get().secondary(TABLE, NAME, object())