"""
Load and placement analysis for hash rings.
"""

import logging
import random
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from .ring import HashRing

logger = logging.getLogger(__name__)


def generate_keys(count: int,
                  seed: Optional[int] = None,
                  prefix: str = "Key",
                  key_space: int = 10000) -> List[str]:
    """Random keys of the form '<prefix><n>' with n in [0, key_space)"""
    rng = random.Random(seed)
    return [f"{prefix}{rng.randrange(key_space)}" for _ in range(count)]


def key_distribution(ring: HashRing, keys: Iterable[str]) -> Dict[str, int]:
    """
    Count how many keys each node owns.

    Every current member appears in the result, including members that own no
    keys. Keys that find no owner (empty ring) are not counted.
    """
    counts = {node: 0 for node in ring.nodes}
    for owner in ring.get_owners(keys).values():
        if owner is not None:
            counts[owner] = counts.get(owner, 0) + 1
    return counts


def coverage(ring: HashRing) -> Dict[str, float]:
    """
    Fraction of the hash space owned by each node.

    A position owns the arc that ends at it, starting just after the previous
    position; the first position's arc wraps around from the last one.
    """
    positions = ring.positions()
    if not positions:
        return {}

    space = ring.hash_function.space
    owned = defaultdict(int)

    if len(positions) == 1:
        owned[positions[0][1]] = space
    else:
        for i, (position, node) in enumerate(positions):
            previous = positions[i - 1][0]
            if i == 0:
                owned[node] += space - previous + position
            else:
                owned[node] += position - previous

    return {node: arc / space for node, arc in owned.items()}


def moved_keys(before: HashRing, after: HashRing, keys: Iterable[str]) -> List[str]:
    """Keys whose owner differs between two rings"""
    keys = list(keys)
    owners_before = before.get_owners(keys)
    owners_after = after.get_owners(keys)

    moved = [key for key in keys if owners_before[key] != owners_after[key]]
    logger.debug(f"{len(moved)} of {len(keys)} keys changed owner")
    return moved


def imbalance(distribution: Dict[str, int]) -> float:
    """Ratio of the heaviest load to the mean load (1.0 is perfectly even)"""
    if not distribution:
        return 0.0

    total = sum(distribution.values())
    if total == 0:
        return 0.0

    mean = total / len(distribution)
    return max(distribution.values()) / mean
