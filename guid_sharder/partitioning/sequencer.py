"""Deterministic ordering of IDs before distribution. Seeded shuffle, stable across runs."""

import hashlib
import random
from typing import Iterable, List, Sequence


def numeric_key(identifier: str) -> int:
    """Sort key: the integer value of a decimal ID. Non-numeric IDs sort as 0."""
    if identifier.isascii() and identifier.isdigit():
        return int(identifier)
    return 0


def sort_numerically(ids: Iterable[str]) -> List[str]:
    """Return IDs ordered by numeric value, never lexically ('9' before '10')."""
    return sorted(ids, key=numeric_key)


def seed_to_int(seed: str) -> int:
    """SHA-256 the seed and read the first 8 bytes as a big-endian unsigned integer."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def shuffle(ids: Sequence[str], seed: str) -> List[str]:
    """
    Fisher-Yates shuffle driven by a generator seeded from seed_to_int(seed).
    Walks from the last index down to 1, swapping i with a uniform pick in [0, i].
    Returns a new list.
    """
    rng = random.Random(seed_to_int(seed))
    shuffled = list(ids)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def sequence(ids: Sequence[str], seed: str) -> List[str]:
    """
    Order IDs for distribution.

    An empty seed is a passthrough: IDs keep the order they arrived in. Any other
    seed sorts numerically first and then shuffles, so the result depends only on
    the seed and the set of IDs, not on their arrival order.
    """
    if seed == "":
        return list(ids)
    return shuffle(sort_numerically(ids), seed)
