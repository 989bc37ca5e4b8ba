from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from jli.main import create_app
from jli.store import Store


@pytest.fixture
def store(tmp_path: Path) -> Iterator[Store]:
    with Store(str(tmp_path / "jli.db")) as s:
        yield s


@pytest.fixture
def media_root(tmp_path: Path) -> Path:
    root = tmp_path / "media"
    (root / "clips").mkdir(parents=True)
    (root / "b.jpg").write_bytes(b"jpeg")
    (root / "a.png").write_bytes(b"png")
    (root / "clips" / "intro.mp4").write_bytes(b"mp4")
    (root / "song.mp3").write_bytes(b"mp3")
    (root / "notes.txt").write_text("not media")
    return root


@pytest.fixture
def client(media_root: Path, tmp_path: Path) -> Iterator[TestClient]:
    app = create_app(str(media_root), database_path=str(tmp_path / "catalogue.db"))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def add_files(store: Store):
    """Upsert (path, media_type) pairs and return their ids keyed by path."""

    def _add(*specs: tuple[str, str]) -> dict[str, int]:
        store.upsert_media_files(specs)
        ids = {}
        for path, _ in specs:
            media_file = store.get_media_file_by_path(path)
            assert media_file is not None
            ids[path] = media_file.id
        return ids

    return _add
