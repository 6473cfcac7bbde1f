"""Command-line interface for facegate."""

import sys
import argparse
import logging


def _add_store_arg(parser):
    parser.add_argument(
        "--store", type=str, metavar="PATH",
        help="Embedding store JSON (default: $FACEGATE_STORE_PATH or ~/.facegate/store.json)",
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="facegate",
        description="facegate - Face embedding matching and liveness verification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  facegate info                          # Effective settings
  facegate gallery                       # List enrolled persons
  facegate compare a.emb b.emb           # Similarity of two embeddings
  facegate match query.emb -t 0.7        # Best match against the store
  facegate remove 3                      # Delete person #3
""",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show effective settings")

    gallery_parser = subparsers.add_parser("gallery", help="List enrolled persons")
    _add_store_arg(gallery_parser)

    compare_parser = subparsers.add_parser(
        "compare", help="Cosine similarity of two serialized embeddings",
    )
    compare_parser.add_argument("a", help="First embedding file")
    compare_parser.add_argument("b", help="Second embedding file")

    match_parser = subparsers.add_parser(
        "match", help="Match a serialized query embedding against the store",
    )
    match_parser.add_argument("query", help="Query embedding file")
    match_parser.add_argument(
        "-t", "--threshold", type=float, default=None,
        help="Match threshold (default: settings threshold, 0.8)",
    )
    _add_store_arg(match_parser)

    remove_parser = subparsers.add_parser("remove", help="Delete an enrolled person")
    remove_parser.add_argument("person_id", type=int, help="Person id")
    _add_store_arg(remove_parser)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    from facegate.cli import commands
    from facegate.config import Settings
    from facegate.errors import FaceGateError

    handlers = {
        "info": commands.run_info,
        "gallery": commands.run_gallery,
        "compare": commands.run_compare,
        "match": commands.run_match,
        "remove": commands.run_remove,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        args.settings = Settings.from_env()
        return handler(args) or 0
    except (FaceGateError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
