"""CLI for inspecting what the embed parser extracts.

Usage:
    boardcompose parse-embed 'https://example.com/status/123'
    boardcompose parse-embed - < embed.html
"""

import argparse
import json
import sys

from .embed import parse_embed


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="boardcompose parse-embed",
        description="Parse embed HTML or a URL and print the post card fields as JSON.",
    )
    parser.add_argument("text", help="Embed HTML, a URL, or '-' for stdin")
    parsed = parser.parse_args(args)

    raw = sys.stdin.read() if parsed.text == "-" else parsed.text
    if not raw.strip():
        parser.error("input is empty")

    print(json.dumps(parse_embed(raw), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
