"""Compare / match commands for facegate CLI.

Embedding files hold the raw serialized form (float32 little-endian,
no header).
"""

from pathlib import Path

from facegate.cli.utils import BOLD, DIM, RESET, read_embedding_file
from facegate.matcher import SimilarityMatcher, similarity
from facegate.store import load_store


def run_compare(args):
    """Print the cosine similarity of two embedding files."""
    a = read_embedding_file(args.a)
    b = read_embedding_file(args.b)
    print(f"{similarity(a, b):.6f}")
    return 0


def run_match(args):
    """Match a query embedding file against the store."""
    settings = args.settings
    threshold = args.threshold if args.threshold is not None else settings.threshold
    path = Path(args.store) if args.store else settings.resolved_store_path()

    store = load_store(path)
    query = Path(args.query).read_bytes()
    matcher = SimilarityMatcher(threshold=threshold, dim=settings.embedding_dim)
    result = matcher.match(query, store.embeddings())

    if result.matched:
        person = store.person(result.person_id)
        name = person.name if person else "?"
        print(f"{BOLD}Match{RESET}  #{result.person_id} {name}  "
              f"{DIM}similarity={result.similarity:.4f} angle={result.angle}{RESET}")
        return 0

    reason = "degenerate query" if result.degenerate else f"best similarity={result.similarity:.4f}"
    print(f"{BOLD}No match{RESET}  {DIM}{reason} · threshold={threshold:.2f}{RESET}")
    return 2
