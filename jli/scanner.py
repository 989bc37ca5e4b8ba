import logging
import os
from pathlib import Path
from typing import Dict, Iterator, NamedTuple, Optional

from jli.models.media import MediaType

logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS: Dict[str, MediaType] = {
    # Images
    ".jpg": MediaType.IMAGE,
    ".jpeg": MediaType.IMAGE,
    ".png": MediaType.IMAGE,
    ".gif": MediaType.IMAGE,
    ".bmp": MediaType.IMAGE,
    ".webp": MediaType.IMAGE,
    ".svg": MediaType.IMAGE,
    ".tiff": MediaType.IMAGE,
    ".tif": MediaType.IMAGE,
    ".avif": MediaType.IMAGE,
    # Video
    ".mp4": MediaType.VIDEO,
    ".webm": MediaType.VIDEO,
    ".mkv": MediaType.VIDEO,
    ".avi": MediaType.VIDEO,
    ".mov": MediaType.VIDEO,
    ".m4v": MediaType.VIDEO,
    ".ogv": MediaType.VIDEO,
    # Audio
    ".mp3": MediaType.AUDIO,
    ".wav": MediaType.AUDIO,
    ".ogg": MediaType.AUDIO,
    ".flac": MediaType.AUDIO,
    ".aac": MediaType.AUDIO,
    ".m4a": MediaType.AUDIO,
    ".wma": MediaType.AUDIO,
    ".opus": MediaType.AUDIO,
}


class ScannedFile(NamedTuple):
    path: str  # relative to the scan root, POSIX separators
    media_type: MediaType


def media_type_for(name: str) -> Optional[MediaType]:
    """Return the media type implied by *name*'s extension, if any."""

    return MEDIA_EXTENSIONS.get(os.path.splitext(name)[1].lower())


def _log_walk_error(exc: OSError) -> None:
    logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)


def scan(root: str | Path) -> Iterator[ScannedFile]:
    """Yield every recognised media file below *root*, lazily."""

    root_path = Path(root)
    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_log_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            media_type = media_type_for(name)
            if media_type is None:
                continue
            rel = (Path(dirpath) / name).relative_to(root_path).as_posix()
            yield ScannedFile(rel, media_type)
