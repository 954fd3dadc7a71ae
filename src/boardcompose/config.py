"""Editor configuration loader.

Reads an optional YAML file and merges it over the defaults, resolves
${path} variables, parses the export background color, and builds the
session Frame.

Config schema (every key optional):
  frame:
    width: 1536
    height: 1024
  paths:
    data: "/home/me/.boardcompose"
  storage:
    path: "${data}/state.json"
    key: "boardcompose_state_v1"
  sizes:
    min_item: 32          # floor applied when a resize ends
    transform_min: 48     # floor for the live transform box
  export:
    background: "#FFFFFF"
    filename: "board.png"
"""

import copy
from pathlib import Path

import yaml

from .common import parse_hex_color, resolve_path_vars
from .geometry import Frame, MIN_ITEM_SIZE, TRANSFORM_MIN_SIZE
from .persistence import STORAGE_KEY


DEFAULT_CONFIG = {
    "frame": {"width": 1536, "height": 1024},
    "paths": {},
    "storage": {"path": "~/.boardcompose/state.json", "key": STORAGE_KEY},
    "sizes": {"min_item": MIN_ITEM_SIZE, "transform_min": TRANSFORM_MIN_SIZE},
    "export": {"background": "#FFFFFF", "filename": "board.png"},
}

VALID_SECTIONS = set(DEFAULT_CONFIG)


def load_config(config_path: str | Path | None = None) -> dict:
    """Load, validate, and normalize the editor config.

    Processing pipeline:
      1. Parse YAML (an empty file counts as no overrides).
      2. Merge each section over DEFAULT_CONFIG.
      3. Build frame as a Frame, resolve ${path} variables in storage.path.
      4. Parse export.background to RGB, validate size floors.

    Args:
        config_path: YAML file, or None for defaults only.

    Returns:
        Normalized config dict.

    Raises:
        ValueError: Unknown section or invalid value.
        FileNotFoundError: Missing config file.
    """
    raw = {}
    if config_path is not None:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config {config_path}: top level must be a mapping")

    unknown = sorted(set(raw) - VALID_SECTIONS)
    if unknown:
        raise ValueError(
            f"Unknown config section(s): {unknown}. Valid: {sorted(VALID_SECTIONS)}"
        )

    merged = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in raw.items():
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Config section '{section}' must be a mapping")
        merged[section].update(values)

    config = {}

    # Frame — positive integer dimensions.
    frame = merged["frame"]
    try:
        config["frame"] = Frame(frame["width"], frame["height"])
    except ValueError as exc:
        raise ValueError(f"Config frame: {exc}") from None

    # Storage — resolve ${var} then expand ~.
    paths = {str(k): str(v) for k, v in merged["paths"].items()}
    storage = merged["storage"]
    key = storage.get("key")
    if not isinstance(key, str) or not key.strip():
        raise ValueError("Config storage: 'key' must be a non-empty string")
    config["storage"] = {
        "path": Path(resolve_path_vars(str(storage["path"]), paths)).expanduser(),
        "key": key,
    }

    # Sizes — positive numbers.
    sizes = {}
    for name in ("min_item", "transform_min"):
        value = merged["sizes"].get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ValueError(
                f"Config sizes: '{name}' must be a positive number, got {value!r}"
            )
        sizes[name] = float(value)
    config["sizes"] = sizes

    # Export — background color and default filename.
    export = merged["export"]
    try:
        background = parse_hex_color(str(export["background"]))
    except ValueError as exc:
        raise ValueError(f"Config export: {exc}") from None
    config["export"] = {
        "background": background,
        "filename": str(export["filename"]),
    }

    return config
