"""CLI formatting helpers."""

import sys

_TTY = sys.stdout.isatty()

BOLD = "\033[1m" if _TTY else ""
DIM = "\033[2m" if _TTY else ""
ITALIC = "\033[3m" if _TTY else ""
RESET = "\033[0m" if _TTY else ""


def read_embedding_file(path):
    """Read a serialized embedding file (raw float32 bytes)."""
    from pathlib import Path

    from facegate.codec import deserialize

    return deserialize(Path(path).read_bytes())
