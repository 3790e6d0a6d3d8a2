"""Random number source seeded from the operating system."""

from __future__ import annotations

import random
import secrets


def get_random_engine() -> random.Random:
    """Return a fast generator seeded with fresh entropy."""
    return random.Random(secrets.randbits(1024 * 32))