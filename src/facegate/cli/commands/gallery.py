"""Gallery commands for facegate CLI.

List enrolled persons with their per-angle embeddings, or remove one.
"""

from collections import Counter
from pathlib import Path

from facegate.cli.utils import BOLD, DIM, ITALIC, RESET
from facegate.store import load_store, save_store


def _store_path(args) -> Path:
    return Path(args.store) if args.store else args.settings.resolved_store_path()


def run_gallery(args):
    """Show EmbeddingStore contents."""
    path = _store_path(args)
    if not path.exists():
        print(f"No embedding store at {path}")
        return

    store = load_store(path)
    persons = store.persons()

    print()
    print(f"{BOLD}{'Store':<10}{RESET}{path}")
    print(f"          {DIM}{len(persons)} persons · {len(store.embeddings())} embeddings{RESET}")

    if not persons:
        print(f"          {DIM}(empty){RESET}")
        return

    print()
    for person in persons:
        angles = Counter(e.angle for e in store.embeddings(person.person_id))
        angle_str = ", ".join(f"{a}×{n}" if n > 1 else a for a, n in angles.items()) or "-"
        print(f"  #{person.person_id}  {person.name}  {DIM}{angle_str}{RESET}")
        for angle, img_path in person.face_images.items():
            print(f"      {DIM}{ITALIC}{angle}: {Path(img_path).name}{RESET}")
    print()


def run_remove(args):
    """Delete a person and its embeddings."""
    path = _store_path(args)
    store = load_store(path)
    if not store.delete_person(args.person_id):
        print(f"No person #{args.person_id} in {path}")
        return 1
    save_store(store, path)
    print(f"Removed person #{args.person_id}")
    return 0
