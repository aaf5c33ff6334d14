from haulroute.services.store import DocumentStore


def test_store_set_get_and_children(store):
    store.set("routes/route1", {"title": "Route 1"})
    store.set("routes/route2", {"title": "Route 2"})

    assert store.get("routes/route1") == {"title": "Route 1"}
    assert store.get("/routes/route2/") == {"title": "Route 2"}
    assert store.get("routes") == {
        "route1": {"title": "Route 1"},
        "route2": {"title": "Route 2"},
    }
    assert store.get("missing/path") is None
    assert store.children("missing") == {}


def test_store_push_assigns_ids_in_insertion_order(store):
    first = store.push("deliveries", {"n": 1})
    second = store.push("deliveries", {"n": 2})

    assert first != second
    assert list(store.children("deliveries")) == [first, second]


def test_store_update_merges_fields(store):
    store.set("users/u1", {"role": "trucker"})

    merged = store.update("users/u1", {"preferences": {"truck_type": "van"}})

    assert merged == {"role": "trucker", "preferences": {"truck_type": "van"}}
    assert store.get("users/u1") == merged


def test_store_persists_across_instances(tmp_path):
    DocumentStore(tmp_path / "db.sqlite").set("users/u1", {"role": "company"})

    reopened = DocumentStore(tmp_path / "db.sqlite")

    assert reopened.get("users/u1") == {"role": "company"}


def test_subscribers_receive_full_snapshots(store):
    snapshots = []
    unsubscribe = store.subscribe("deliveries", snapshots.append)

    first = store.push("deliveries", {"n": 1})
    second = store.push("deliveries", {"n": 2})
    store.set("routes/r1", {"title": "unrelated"})
    store.update(f"deliveries/{first}", {"status": "accepted"})

    assert snapshots[0] is None
    assert snapshots[1] == {first: {"n": 1}}
    assert snapshots[2] == {first: {"n": 1}, second: {"n": 2}}
    assert snapshots[3] == {
        first: {"n": 1, "status": "accepted"},
        second: {"n": 2},
    }
    assert len(snapshots) == 4

    unsubscribe()
    store.push("deliveries", {"n": 3})
    assert len(snapshots) == 4


def test_failing_listener_does_not_block_others(store):
    received = []

    def broken(_snapshot):
        raise RuntimeError("boom")

    store.subscribe("users/u1", broken)
    store.subscribe("users/u1", received.append)
    store.set("users/u1", {"role": "trucker"})

    assert received[-1] == {"role": "trucker"}
