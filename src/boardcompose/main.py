"""Subcommand dispatcher for boardcompose.

Usage:
    boardcompose add-image photo.jpg badge.png
    boardcompose add-video demo.mp4
    boardcompose add-post '<blockquote class="twitter-tweet">...</blockquote>'
    boardcompose list
    boardcompose move img_k3j9x0aa 120 80
    boardcompose resize img_k3j9x0aa 300 200
    boardcompose remove img_k3j9x0aa
    boardcompose clear
    boardcompose export --output board.png
    boardcompose parse-embed 'https://example.com/status/123'

Global flags go before the subcommand:
    boardcompose --verbose list
"""

import argparse
import logging
import sys

EDIT_COMMANDS = {
    "add-image", "add-video", "add-post", "list",
    "move", "resize", "remove", "clear",
}


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="boardcompose",
        description="Compose images, video stills and post cards on a fixed frame.",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Log debug output (including swallowed save/load failures)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("add-image", help="Add image files to the board")
    subparsers.add_parser("add-video", help="Add a still of each video file")
    subparsers.add_parser("add-post", help="Add a post card from embed HTML or a URL")
    subparsers.add_parser("list", help="List items in z-order")
    subparsers.add_parser("move", help="Move an item (clamped to the frame)")
    subparsers.add_parser("resize", help="Resize an item (floored, clamped)")
    subparsers.add_parser("remove", help="Remove an item")
    subparsers.add_parser("clear", help="Remove every item")
    subparsers.add_parser("export", help="Render the board to PNG")
    subparsers.add_parser("parse-embed", help="Print the fields parsed from an embed")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        # No subcommand given at all — show help and exit with error.
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if parsed.command in EDIT_COMMANDS:
        from .edit_cli import main as edit_main
        edit_main([parsed.command, *remaining])
    elif parsed.command == "export":
        from .export_cli import main as export_main
        export_main(remaining)
    elif parsed.command == "parse-embed":
        from .embed_cli import main as embed_main
        embed_main(remaining)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
