"""CLI for exporting the board to PNG.

Usage:
    boardcompose export --output board.png
    boardcompose export --output board.png --config board.yaml
"""

import argparse

from .config import load_config
from .edit_cli import open_session
from .export import export_png


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="boardcompose export",
        description="Render the persisted board to a PNG file.",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML editor config (default: built-in defaults)",
    )
    parser.add_argument(
        "--output", default=None,
        help="Output PNG path (default: export.filename from the config)",
    )
    parsed = parser.parse_args(args)

    config = load_config(parsed.config)
    output = parsed.output or config["export"]["filename"]

    composition, saver = open_session(config)
    try:
        snapshot = composition.snapshot()
        frame = snapshot.frame
        print(f"Rendering {len(snapshot.items)} item(s) at {frame.width}x{frame.height}")
        data = export_png(
            snapshot, output,
            background=config["export"]["background"],
        )
        print(f"Done: {output} ({len(data)} bytes)")
    finally:
        saver.close()


if __name__ == "__main__":
    main()
