"""CLI command handlers."""

from facegate.cli.commands.info import run_info
from facegate.cli.commands.gallery import run_gallery, run_remove
from facegate.cli.commands.match import run_compare, run_match

__all__ = [
    "run_info",
    "run_gallery",
    "run_remove",
    "run_compare",
    "run_match",
]
