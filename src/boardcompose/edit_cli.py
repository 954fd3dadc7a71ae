"""CLI for editing the persisted board.

Each invocation opens the session (config + persisted slot), applies one
edit through the interaction controller, waits for the save, and exits.

Usage:
    boardcompose add-image photo.jpg --config board.yaml
    boardcompose add-post - < embed.html
    boardcompose move post_k3j9x0aa 100 40
    boardcompose resize post_k3j9x0aa 400 300
    boardcompose list
"""

import argparse
import sys

from .config import load_config
from .controller import InteractionController
from .persistence import JsonFileStorage, PersistenceAdapter, open_composition


def open_session(config: dict):
    """Open the configured slot and return (composition, saver)."""
    storage = JsonFileStorage(config["storage"]["path"])
    adapter = PersistenceAdapter(storage, key=config["storage"]["key"])
    return open_composition(config["frame"], adapter)


def _describe(item) -> str:
    if item.type == "image":
        detail = f"src {len(item.src)} chars"
    elif item.type == "video":
        detail = f"still {len(item.snapshot_src)} chars"
    elif item.type == "post":
        byline = " ".join(p for p in (item.author, item.handle) if p)
        text = item.text.replace("\n", " ")
        if len(text) > 50:
            text = text[:47] + "..."
        detail = f"{byline} \"{text}\"" if byline else f"\"{text}\""
    else:
        raise ValueError(f"Unknown item type '{item.type}'")
    return (
        f"{item.type:<5}  {item.id}  ({item.x:.0f},{item.y:.0f}) "
        f"{item.width:.0f}x{item.height:.0f} — {detail}"
    )


def _read_text_arg(value: str) -> str:
    """'-' means read from stdin (embed HTML is awkward to quote)."""
    return sys.stdin.read() if value == "-" else value


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="boardcompose",
        description="Edit the persisted board.",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML editor config (default: built-in defaults)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --config is also accepted after the subcommand. SUPPRESS keeps the
    # subparser from overwriting a value given before it.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=argparse.SUPPRESS, help=argparse.SUPPRESS)

    p = subparsers.add_parser("add-image", parents=[common], help="Add image files")
    p.add_argument("paths", nargs="+", help="Image files")
    p = subparsers.add_parser("add-video", parents=[common], help="Add a still of each video")
    p.add_argument("paths", nargs="+", help="Video files")
    p = subparsers.add_parser("add-post", parents=[common], help="Add a post card")
    p.add_argument("text", help="Embed HTML, a URL, or '-' for stdin")
    subparsers.add_parser("list", parents=[common], help="List items in z-order")
    p = subparsers.add_parser("move", parents=[common], help="Move an item")
    p.add_argument("id")
    p.add_argument("x", type=float)
    p.add_argument("y", type=float)
    p = subparsers.add_parser("resize", parents=[common], help="Resize an item")
    p.add_argument("id")
    p.add_argument("width", type=float)
    p.add_argument("height", type=float)
    p = subparsers.add_parser("remove", parents=[common], help="Remove an item")
    p.add_argument("id")
    subparsers.add_parser("clear", parents=[common], help="Remove every item")

    parsed = parser.parse_args(args)

    config = load_config(parsed.config)
    composition, saver = open_session(config)
    controller = InteractionController(
        composition,
        min_item_size=config["sizes"]["min_item"],
        transform_min_size=config["sizes"]["transform_min"],
    )

    try:
        _run(parsed, composition, controller)
    finally:
        saver.close()


def _run(parsed, composition, controller) -> None:
    command = parsed.command

    if command == "add-image":
        added = controller.add_images(parsed.paths)
        skipped = len(parsed.paths) - len(added)
        for item in added:
            print(f"  ADD    {_describe(item)}")
        if skipped:
            print(f"  SKIP   {skipped} non-image file(s)")

    elif command == "add-video":
        added = controller.add_videos(parsed.paths)
        skipped = len(parsed.paths) - len(added)
        for item in added:
            print(f"  ADD    {_describe(item)}")
        if skipped:
            print(f"  SKIP   {skipped} non-video file(s)")

    elif command == "add-post":
        post = controller.add_post(_read_text_arg(parsed.text))
        if post is None:
            raise SystemExit("add-post: input is empty")
        print(f"  ADD    {_describe(post)}")

    elif command == "list":
        frame = composition.frame
        print(f"Board {frame.width}x{frame.height}: {len(composition)} item(s)")
        for i, item in enumerate(composition.items):
            print(f"  {i}: {_describe(item)}")

    elif command in ("move", "resize", "remove"):
        item = composition.get_item(parsed.id)
        if item is None:
            raise SystemExit(f"{command}: no item with id '{parsed.id}'")
        if command == "move":
            controller.on_drag_end(item.id, parsed.x, parsed.y)
        elif command == "resize":
            controller.on_resize_end(item.id, parsed.width, parsed.height, item.x, item.y)
        else:
            controller.on_delete_click(item.id)
            print(f"  REMOVE {item.id}")
            return
        print(f"  SET    {_describe(composition.get_item(item.id))}")

    elif command == "clear":
        count = len(composition)
        controller.clear()
        print(f"Cleared {count} item(s)")
