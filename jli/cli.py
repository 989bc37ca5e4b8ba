import argparse
import logging
import os
import sys
import threading
import webbrowser
from typing import List, Optional

import uvicorn

from jli.config import settings
from jli.errors import StorageUnavailableError
from jli.main import create_app, sync_catalogue
from jli.store import Store
from jli.utils.logging import get_logger

logger = logging.getLogger(__name__)

COMMANDS = ("open", "serve", "version")


def build_parser(command: str) -> argparse.ArgumentParser:
    descriptions = {
        "open": "Label media files in a directory and open the labeler in a browser.",
        "serve": "Start the labeling server without opening a browser.",
    }
    parser = argparse.ArgumentParser(
        prog="jli" if command == "open" else f"jli {command}",
        description=descriptions[command],
    )
    parser.add_argument("directory", nargs="?", default=".", help="Directory to scan (default: .)")
    parser.add_argument("--bind", default=settings.BIND, help="Address to bind the server to")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Port to listen on")
    parser.add_argument(
        "--database",
        default=None,
        help=f"Database file (default: <directory>/{settings.DATABASE_NAME})",
    )
    return parser


def serve(directory: str, bind: str, port: int, database: Optional[str], open_browser: bool) -> int:
    if not os.path.isdir(directory):
        logger.error("Not a directory: %s", directory)
        return 1

    media_root = os.path.abspath(directory)
    db_path = database or settings.database_path_for(media_root)

    try:
        with Store(db_path) as store:
            sync_catalogue(store, media_root)
            app = create_app(media_root, store=store)

            url = f"http://{bind}:{port}"
            logger.info("Server running at %s", url)
            if open_browser:
                threading.Timer(1.0, webbrowser.open, args=(url,)).start()

            uvicorn.run(app, host=bind, port=port, log_level=settings.LOG_LEVEL.lower())
    except StorageUnavailableError as exc:
        logger.error("Cannot open catalogue %s: %s", db_path, exc)
        return 1

    logger.info("Shutting down...")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``jli [directory]``, ``jli serve`` and ``jli version``."""
    get_logger(settings.LOG_LEVEL)

    args = list(sys.argv[1:] if argv is None else argv)
    command = "open"
    if args and args[0] in COMMANDS:
        command = args.pop(0)

    if command == "version":
        print(f"jli {settings.VERSION}")
        return 0

    opts = build_parser(command).parse_args(args)
    return serve(
        opts.directory,
        opts.bind,
        opts.port,
        opts.database,
        open_browser=command == "open",
    )


if __name__ == "__main__":
    sys.exit(main())
