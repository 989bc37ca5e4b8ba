from __future__ import annotations

import pytest

from jli.errors import NotFoundError
from jli.models.media import MediaType
from jli.store import Store


def test_upsert_is_idempotent_and_keeps_first_media_type(store: Store) -> None:
    assert store.upsert_media_file("clip.mp4", "video") is True
    assert store.upsert_media_file("clip.mp4", "audio") is False

    assert store.media_file_count() == 1
    media_file = store.get_media_file_by_path("clip.mp4")
    assert media_file is not None
    assert media_file.media_type == MediaType.VIDEO


def test_upsert_preserves_existing_description(store: Store) -> None:
    store.upsert_media_file("a.jpg", "image")
    media_file = store.get_media_file_by_path("a.jpg")
    store.update_media_description(media_file.id, "a red square")

    store.upsert_media_file("a.jpg", "image")

    assert store.get_media_file(media_file.id).description == "a red square"


def test_bulk_upsert_tolerates_duplicates_and_skips_unknown_types(store: Store) -> None:
    added = store.upsert_media_files(
        [
            ("c.jpg", "image"),
            ("a.mp3", MediaType.AUDIO),
            ("c.jpg", "image"),
            ("doc.pdf", "document"),
            ("b.mp4", "video"),
        ]
    )

    assert added == 3
    assert store.media_file_count() == 3
    assert store.get_media_file_by_path("doc.pdf") is None


def test_get_missing_file_returns_none(store: Store) -> None:
    assert store.get_media_file(999) is None


def test_first_and_count_on_empty_catalogue(store: Store) -> None:
    assert store.first_media_file() is None
    assert store.media_file_count() == 0


def test_first_is_lexically_smallest_path(store: Store, add_files) -> None:
    ids = add_files(("b/one.jpg", "image"), ("a/two.jpg", "image"), ("B.jpg", "image"))

    first = store.first_media_file()

    # Byte-wise ordering puts upper case before lower case
    assert first.id == ids["B.jpg"]


def test_new_file_defaults(store: Store) -> None:
    store.upsert_media_file("a.jpg", "image")
    media_file = store.get_media_file_by_path("a.jpg")

    assert media_file.description == ""
    assert media_file.created_at is not None
    assert media_file.updated_at is not None


def test_update_description_advances_updated_at(store: Store) -> None:
    store.upsert_media_file("a.jpg", "image")
    before = store.get_media_file_by_path("a.jpg")

    updated = store.update_media_description(before.id, "first")
    again = store.update_media_description(before.id, "second")

    assert updated.description == "first"
    assert updated.updated_at > before.updated_at
    assert again.updated_at > updated.updated_at
    assert store.get_media_file(before.id).description == "second"


def test_update_description_of_missing_file_fails(store: Store) -> None:
    with pytest.raises(NotFoundError):
        store.update_media_description(42, "nothing here")


def test_navigation_wraps_around(store: Store, add_files) -> None:
    ids = add_files(("c", "image"), ("a", "image"), ("b", "image"))

    first = store.navigation(ids["a"])
    middle = store.navigation(ids["b"])
    last = store.navigation(ids["c"])

    assert first.prev_id == ids["c"]
    assert first.next_id == ids["b"]
    assert first.index == 1

    assert middle.prev_id == ids["a"]
    assert middle.next_id == ids["c"]
    assert middle.index == 2
    assert middle.total == 3

    assert last.prev_id == ids["b"]
    assert last.next_id == ids["a"]
    assert last.index == 3


def test_navigation_with_single_file_points_to_itself(store: Store, add_files) -> None:
    ids = add_files(("only.mp4", "video"))

    nav = store.navigation(ids["only.mp4"])

    assert nav.prev_id == nav.next_id == ids["only.mp4"]
    assert nav.index == 1
    assert nav.total == 1


def test_navigation_follows_path_order_not_insertion_order(store: Store, add_files) -> None:
    ids = add_files(("z.jpg", "image"), ("m.jpg", "image"))
    ids.update(add_files(("a.jpg", "image")))

    nav = store.navigation(ids["m.jpg"])

    assert nav.prev_id == ids["a.jpg"]
    assert nav.next_id == ids["z.jpg"]
    assert nav.index == 2


def test_navigation_of_missing_file_fails(store: Store) -> None:
    with pytest.raises(NotFoundError):
        store.navigation(7)


def test_delete_missing_file_fails(store: Store) -> None:
    with pytest.raises(NotFoundError):
        store.delete_media_file(7)


def test_out_of_range_id_is_absent(store: Store) -> None:
    huge = 10**20

    assert store.get_media_file(huge) is None
    with pytest.raises(NotFoundError):
        store.navigation(huge)
    with pytest.raises(NotFoundError):
        store.update_media_description(huge, "x")
    with pytest.raises(NotFoundError):
        store.ensure_pinned_keyframe(huge)
