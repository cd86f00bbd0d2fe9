# dbwatch

Change notifications for an embedded key/value database. Changes to records
are collected into a `Batch`; the batch is then pushed to every registered
watcher whose filter matches, and each watcher reads its events from its own
`EventChannel`.

## Install

```
pip install dbwatch
pip install "dbwatch[test]"   # with pytest for running the tests
```

## Concepts

- **Events** (`dbwatch.event`): `Insert`, `Update` and `Delete`. Each has
  `inner()`, which returns the value carried by the event; for an `Update`
  that is the new value, and `inner_old()` / `inner_new()` return either side.
- **Requests** (`dbwatch.request`): a `WatcherRequest` describes one changed
  record: its `table_name`, its `primary_key` as bytes, and
  `secondary_keys_value`, a dict from `KeyDefinition` to `KeyEntry`.
  A `KeyEntry` is made with `KeyEntry.default(value)` or
  `KeyEntry.optional(value)`; only an optional entry may have `None` as its
  value (otherwise `ValueError`). A `KeyDefinition` names the secondary key's
  table (`unique_table_name`) and may list the key type names it accepts in
  `key_types`.
- **Batches** (`dbwatch.batch`): `Batch.add(request, event)` appends a change.
  Iterating a batch yields `(request, event)` pairs last-added first;
  `len()` gives the number of pairs.
- **Filters** (`dbwatch.filter`): a `TableFilter` selects the records a
  watcher cares about, and only requests for the same table name match:
  - `TableFilter.primary(table, key)`: one primary key, or any key when
    `key` is `None`;
  - `TableFilter.primary_start_with(table, prefix)`: primary keys starting
    with the prefix;
  - `TableFilter.secondary(table, key_def, key)`: records whose value for
    `key_def` equals `key`, or any record carrying `key_def` when `key` is
    `None`;
  - `TableFilter.secondary_start_with(table, key_def, prefix)`: records whose
    value for `key_def` starts with the prefix; entries without a value never
    match.

  `TableFilter.match_count(request)` returns how many times the request
  satisfies the filter (0 when it does not).
- **Watchers** (`dbwatch.watchers`): `Watchers` is a thread-safe registry of
  watcher ids, filters and channels (`add_sender`, `remove_sender`,
  `find_senders`, `len()`). `push_batch(watchers, batch)` sends each event of
  the batch to every matching channel, once per match, and removes any
  watcher whose channel turned out to be closed.

## Channels

`EventChannel` is an unbounded, thread-safe queue:

- `send(event)` queues an event, or raises `ChannelClosedError` once the
  channel is closed;
- `recv(timeout=None)` waits for the next event, raising `TimeoutError` when
  the timeout runs out and `ChannelClosedError` when the channel is closed and
  empty;
- `try_recv()` returns the next pending event or `None`;
- iterating the channel yields the events pending now, without waiting;
- `close()` refuses further events; events already queued can still be read.

`ChannelClosedError` is a subclass of `WatchEventError`.

## Watch queries

`dbwatch.query` is the entry point for registering watchers. A `Watch` wraps
an `InternalWatch`, which owns the `Watchers` registry and hands out watcher
ids starting at 0:

```python
from dbwatch.query import InternalWatch, Watch
from dbwatch.watchers import Watchers

watchers = Watchers()
watch = Watch(InternalWatch(watchers, primary_key_types={"1_1_id": ("int",)}))

channel, watcher_id = watch.get().primary("1_1_id", 1)
all_channel, all_id = watch.scan().primary().all("1_1_id")
```

- `watch.get().primary(table, key)` and
  `watch.get().secondary(table, key_def, key)` watch a single value;
- `watch.scan().primary().all(table)` and
  `watch.scan().primary().start_with(table, prefix)` watch by primary key;
- `watch.scan().secondary(key_def).all(table)` and
  `watch.scan().secondary(key_def).start_with(table, prefix)` watch by
  secondary key.

Each call returns the new `EventChannel` and the watcher id; pass the id to
`Watchers.remove_sender` to stop watching.

Key values are turned into bytes before they are stored in a filter:
`int` as 8 bytes big-endian, offset so that order is kept (range −2⁶³ to
2⁶³−1, otherwise `OverflowError`), `float` as 8 bytes big-endian, `str` as
UTF-8, `bytes` as is, `bool` as one byte, `None` as empty bytes, and lists and
tuples as the concatenation of their items. Lists must hold items of a single
type; other types raise `TypeError`.

Before a key is used it is checked against the accepted type names: for
primary keys those given for the table in `primary_key_types`, for secondary
keys the `key_types` of the `KeyDefinition`. Type names are `"int"`,
`"float"`, `"str"`, `"bytes"`, `"bool"`, `"None"`, `"list[int]"`,
`"tuple[int, str]"` and so on. When no names are given any key is accepted;
otherwise a mismatch raises `KeyTypeMismatchError`. Running out of watcher
ids raises `MaxWatcherReachedError`.

## What this package does not do

It stores nothing and has no transactions: building the `WatcherRequest`s and
events for each change, and calling `push_batch` after a write, is up to the
storage layer that uses it. There are no range watches; only exact keys,
prefixes and whole tables can be watched.