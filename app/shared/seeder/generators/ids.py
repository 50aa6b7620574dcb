"""Deterministic identifiers for generated records."""

import random
import uuid


def random_uuid(rng: random.Random) -> str:
    """UUID4 string drawn from ``rng`` so a fixed seed reproduces ids."""
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))
