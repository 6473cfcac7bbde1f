"""EmbeddingStore — JSON-file persistence for persons and their embeddings.

Embeddings are kept in their serialized byte form (base64 in JSON) and
handed to the matcher undecoded, so a corrupted entry only costs that
entry at match time.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from facegate import __version__
from facegate.codec import serialize
from facegate.types import Person, StoredEmbedding

logger = logging.getLogger(__name__)


class EmbeddingStore:
    """In-memory person/embedding records with insertion-ordered reads."""

    def __init__(self):
        self._persons: Dict[int, Person] = {}
        self._embeddings: List[StoredEmbedding] = []
        self._next_id: int = 1

    def add_person(self, name: str, face_images: Optional[Dict[str, str]] = None) -> int:
        """Create a person and return its id."""
        person_id = self._next_id
        self._next_id += 1
        self._persons[person_id] = Person(
            person_id=person_id,
            name=name,
            face_images=dict(face_images or {}),
        )
        return person_id

    def add_embedding(
        self,
        person_id: int,
        angle: str,
        embedding: Union[np.ndarray, bytes],
    ) -> StoredEmbedding:
        """Attach an embedding to an existing person.

        Raises:
            KeyError: If the person does not exist.
        """
        if person_id not in self._persons:
            raise KeyError(f"Unknown person_id: {person_id}")
        if isinstance(embedding, (bytes, bytearray, memoryview)):
            data = bytes(embedding)
        else:
            data = serialize(embedding)
        entry = StoredEmbedding(person_id=person_id, angle=angle, embedding=data)
        self._embeddings.append(entry)
        return entry

    def person(self, person_id: int) -> Optional[Person]:
        return self._persons.get(person_id)

    def persons(self) -> List[Person]:
        return list(self._persons.values())

    def embeddings(self, person_id: Optional[int] = None) -> List[StoredEmbedding]:
        """All embeddings (or one person's) in insertion order."""
        if person_id is None:
            return list(self._embeddings)
        return [e for e in self._embeddings if e.person_id == person_id]

    def delete_person(self, person_id: int) -> bool:
        """Remove a person and all of its embeddings. Returns False if unknown."""
        if self._persons.pop(person_id, None) is None:
            return False
        self._embeddings = [e for e in self._embeddings if e.person_id != person_id]
        return True

    def __len__(self) -> int:
        return len(self._persons)


def save_store(store: EmbeddingStore, path: Union[str, Path]) -> None:
    """Save an EmbeddingStore to JSON.

    Args:
        store: Store to save.
        path: Output JSON file path. Parent directories are created.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "persons": [
            {
                "person_id": p.person_id,
                "name": p.name,
                "face_images": p.face_images,
            }
            for p in store.persons()
        ],
        "embeddings": [
            {
                "person_id": e.person_id,
                "angle": e.angle,
                "data": base64.b64encode(e.embedding).decode("ascii"),
            }
            for e in store.embeddings()
        ],
        "_next_id": store._next_id,
        "_version": {
            "app": "facegate",
            "app_version": __version__,
            "layout": "float32-le",
            "created_at": datetime.now(timezone.utc).isoformat(),
        },
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info("Saved %d persons / %d embeddings to %s",
                len(store.persons()), len(store.embeddings()), path)


def load_store(path: Union[str, Path]) -> EmbeddingStore:
    """Load an EmbeddingStore from JSON.

    Entries whose base64 payload cannot be decoded are kept as empty byte
    strings; the matcher reports and skips them.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Embedding store not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    store = EmbeddingStore()
    for p in data.get("persons", []):
        pid = int(p["person_id"])
        store._persons[pid] = Person(
            person_id=pid,
            name=p.get("name", ""),
            face_images=p.get("face_images", {}),
        )

    for e in data.get("embeddings", []):
        try:
            raw = base64.b64decode(e.get("data", ""), validate=True)
        except (binascii.Error, ValueError):
            logger.warning("Undecodable embedding payload for person %s", e.get("person_id"))
            raw = b""
        store._embeddings.append(
            StoredEmbedding(person_id=int(e["person_id"]), angle=e.get("angle", ""), embedding=raw)
        )

    default_next = max(store._persons, default=0) + 1
    store._next_id = max(int(data.get("_next_id", default_next)), default_next)
    return store


__all__ = ["EmbeddingStore", "save_store", "load_store"]
