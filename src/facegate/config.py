"""Runtime settings and home directory resolution.

Defaults live in :class:`Settings`; each field can be overridden with a
``FACEGATE_<FIELD>`` environment variable (e.g. ``FACEGATE_THRESHOLD=0.7``).
The store defaults to ``~/.facegate/store.json``; override the home with
``FACEGATE_HOME``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

from facegate.liveness import LivenessPolicy


def get_home_dir() -> Path:
    """Return the facegate home directory, creating it if needed.

    Resolution order:
        1. ``FACEGATE_HOME`` environment variable.
        2. ``~/.facegate`` (default).
    """
    home = os.environ.get("FACEGATE_HOME")
    if home:
        home_dir = Path(home)
    else:
        home_dir = Path.home() / ".facegate"
    home_dir.mkdir(parents=True, exist_ok=True)
    return home_dir


@dataclass(frozen=True)
class Settings:
    """Deployment settings.

    Attributes:
        threshold: Match threshold on cosine similarity. Tune per model;
            practical values lie in roughly [0.5, 0.9].
        embedding_dim: Output dimension D of the deployed model.
        input_size: Square model input side in pixels.
        crop_padding: Padding around the detector box when cropping.
        frame_interval_ms: Minimum spacing between processed frames.
        policy: Liveness policy name ("behavioral" or "texture_gated").
        store_path: Embedding store file. None → ``{home}/store.json``.
    """

    threshold: float = 0.8
    embedding_dim: int = 512
    input_size: int = 160
    crop_padding: int = 20
    frame_interval_ms: int = 300
    policy: str = "behavioral"
    store_path: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from ``FACEGATE_*`` variables over the defaults.

        Raises:
            ValueError: If a variable cannot be converted or the policy is unknown.
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = env.get(f"FACEGATE_{f.name.upper()}")
            if raw is None or raw == "":
                continue
            if f.name == "store_path":
                overrides[f.name] = Path(raw)
            elif f.type in ("float", float):
                overrides[f.name] = float(raw)
            elif f.type in ("int", int):
                overrides[f.name] = int(raw)
            else:
                overrides[f.name] = raw
        settings = replace(cls(), **overrides)
        settings.liveness_policy()  # validate
        return settings

    def resolved_store_path(self) -> Path:
        if self.store_path is not None:
            return Path(self.store_path)
        return get_home_dir() / "store.json"

    def liveness_policy(self) -> LivenessPolicy:
        return LivenessPolicy.from_name(self.policy)


__all__ = ["get_home_dir", "Settings"]
