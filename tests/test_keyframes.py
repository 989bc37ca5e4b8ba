from __future__ import annotations

import pytest

from jli.core import keyframes as keyframe_store
from jli.errors import ConstraintViolationError, NotFoundError, PinnedKeyframeError
from jli.models.keyframe import Keyframe
from jli.store import Store


def _pinned_count(store: Store, media_file_id: int) -> int:
    return sum(1 for kf in store.keyframes_for_file(media_file_id) if kf.pinned)


@pytest.mark.parametrize("path,media_type", [("clip.mp4", "video"), ("song.mp3", "audio")])
def test_temporal_file_gets_one_pinned_keyframe_at_zero(store: Store, add_files, path, media_type) -> None:
    ids = add_files((path, media_type))

    first = store.ensure_pinned_keyframe(ids[path])
    second = store.ensure_pinned_keyframe(ids[path])

    assert first is not None
    assert first.id == second.id
    assert first.pinned is True
    assert first.timestamp_ms == 0
    assert _pinned_count(store, ids[path]) == 1


def test_image_never_gets_a_pinned_keyframe(store: Store, add_files) -> None:
    ids = add_files(("a.jpg", "image"))

    assert store.ensure_pinned_keyframe(ids["a.jpg"]) is None
    assert store.keyframes_for_file(ids["a.jpg"]) == []


def test_ensure_pinned_for_missing_file_fails(store: Store) -> None:
    with pytest.raises(NotFoundError):
        store.ensure_pinned_keyframe(404)


def test_ensure_pinned_reads_back_after_conflicting_insert(store: Store, add_files, monkeypatch) -> None:
    ids = add_files(("clip.mp4", "video"))
    existing = store.ensure_pinned_keyframe(ids["clip.mp4"])

    real_lookup = keyframe_store._pinned_keyframe
    calls = {"n": 0}

    def stale_first_lookup(db, media_file_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_lookup(db, media_file_id)

    monkeypatch.setattr(keyframe_store, "_pinned_keyframe", stale_first_lookup)

    pinned = store.ensure_pinned_keyframe(ids["clip.mp4"])

    assert pinned.id == existing.id
    assert _pinned_count(store, ids["clip.mp4"]) == 1


def test_database_rejects_second_pinned_keyframe(store: Store, add_files) -> None:
    ids = add_files(("clip.mp4", "video"))
    store.ensure_pinned_keyframe(ids["clip.mp4"])

    with pytest.raises(ConstraintViolationError):
        with store._session() as db:
            db.add(Keyframe(media_file_id=ids["clip.mp4"], timestamp_ms=0, pinned=True))
            db.flush()

    assert _pinned_count(store, ids["clip.mp4"]) == 1


def test_created_keyframes_are_unpinned_and_ordered_by_time(store: Store, add_files) -> None:
    ids = add_files(("clip.mp4", "video"))
    file_id = ids["clip.mp4"]
    pinned = store.ensure_pinned_keyframe(file_id)

    late = store.create_keyframe(file_id, 3000)
    early = store.create_keyframe(file_id, 1000)
    twin = store.create_keyframe(file_id, 1000)
    at_zero = store.create_keyframe(file_id, 0)

    assert not any(kf.pinned for kf in (late, early, twin, at_zero))
    assert late.description == ""
    assert late.labels == []

    ordered = [kf.id for kf in store.keyframes_for_file(file_id)]
    assert ordered == [pinned.id, at_zero.id, early.id, twin.id, late.id]


def test_create_keyframe_validates_input(store: Store, add_files) -> None:
    ids = add_files(("clip.mp4", "video"))

    with pytest.raises(ConstraintViolationError):
        store.create_keyframe(ids["clip.mp4"], -1)
    with pytest.raises(NotFoundError):
        store.create_keyframe(999, 10)


def test_pinned_keyframe_cannot_be_moved_or_deleted(store: Store, add_files) -> None:
    ids = add_files(("clip.mp4", "video"))
    pinned = store.ensure_pinned_keyframe(ids["clip.mp4"])

    with pytest.raises(PinnedKeyframeError) as moved:
        store.update_keyframe_timestamp(pinned.id, 500)
    with pytest.raises(PinnedKeyframeError) as deleted:
        store.delete_keyframe(pinned.id)

    assert moved.value.action == "move"
    assert deleted.value.action == "delete"
    kf = store.get_keyframe(pinned.id)
    assert kf.timestamp_ms == 0
    assert kf.pinned is True


def test_pinned_keyframe_description_and_labels_can_change(store: Store, add_files) -> None:
    ids = add_files(("clip.mp4", "video"))
    pinned = store.ensure_pinned_keyframe(ids["clip.mp4"])

    updated = store.update_keyframe_description(pinned.id, "opening shot")
    label = store.add_label_to_keyframe(pinned.id, "title")

    assert updated.description == "opening shot"
    assert store.get_keyframe(pinned.id).labels == [label]


def test_move_unpinned_keyframe(store: Store, add_files) -> None:
    ids = add_files(("clip.mp4", "video"))
    kf = store.create_keyframe(ids["clip.mp4"], 100)

    moved = store.update_keyframe_timestamp(kf.id, 2500)

    assert moved.timestamp_ms == 2500
    assert store.get_keyframe(kf.id).timestamp_ms == 2500
    with pytest.raises(ConstraintViolationError):
        store.update_keyframe_timestamp(kf.id, -5)


def test_missing_keyframe_operations_fail(store: Store) -> None:
    assert store.get_keyframe(77) is None
    with pytest.raises(NotFoundError):
        store.update_keyframe_timestamp(77, 10)
    with pytest.raises(NotFoundError):
        store.update_keyframe_description(77, "gone")
    with pytest.raises(NotFoundError):
        store.delete_keyframe(77)


def test_delete_keyframe_drops_its_label_links_only(store: Store, add_files) -> None:
    ids = add_files(("clip.mp4", "video"))
    kf = store.create_keyframe(ids["clip.mp4"], 1200)
    label = store.add_label_to_keyframe(kf.id, "goal")
    store.attach_label_to_file(ids["clip.mp4"], label.id)

    store.delete_keyframe(kf.id)

    assert store.get_keyframe(kf.id) is None
    assert store.labels_for_keyframe(kf.id) == []
    assert store.search_labels("goal") == [label]
    assert store.labels_for_file(ids["clip.mp4"]) == [label]


def test_out_of_range_values_are_rejected(store: Store, add_files) -> None:
    ids = add_files(("clip.mp4", "video"))
    kf = store.create_keyframe(ids["clip.mp4"], 100)
    huge = 10**20

    with pytest.raises(ConstraintViolationError):
        store.create_keyframe(ids["clip.mp4"], huge)
    with pytest.raises(ConstraintViolationError):
        store.update_keyframe_timestamp(kf.id, huge)
    assert store.get_keyframe(huge) is None
    assert store.keyframes_for_file(huge) == []
    with pytest.raises(NotFoundError):
        store.delete_keyframe(huge)
    with pytest.raises(NotFoundError):
        store.create_keyframe(huge, 0)
