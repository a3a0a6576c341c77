"""Seeded determinism for reproducible roll sequences."""

import hashlib
import numpy as np


def derive_seed(session_seed: int, stream: str) -> int:
    """Derive a deterministic seed from context. Same inputs = same output, always."""
    key = f"{session_seed}:{stream}"
    return int(hashlib.sha256(key.encode()).hexdigest()[:16], 16)


def make_rng(seed: int) -> np.random.Generator:
    """Create a seeded RNG from a derived seed."""
    return np.random.default_rng(seed)
