"""
Consistent Hash Ring
Maps keys onto a dynamic set of nodes using virtual-node replicas.

Each node is hashed to `replicas` positions on a circular integer space. A key
belongs to the first node found clockwise from the key's own position, wrapping
from the largest position back to the smallest. Adding or removing a node only
moves the keys that fall on the arcs it gains or gives up.
"""

import logging
from threading import RLock
from typing import Dict, Iterable, List, Optional, Set, Tuple, TYPE_CHECKING

from sortedcontainers import SortedDict

from .hashing import DEFAULT_HASH_FUNCTION, HashFunction, HashSpec, get_hash_function

if TYPE_CHECKING:
    from ..config import RingConfig

logger = logging.getLogger(__name__)


class RingError(Exception):
    """Base exception for hash ring errors"""
    pass


class InvalidConfigurationError(RingError, ValueError):
    """Raised when a ring cannot be built from the given settings"""
    pass


class HashRing:
    """
    Consistent hash ring with virtual nodes.

    Positions live in a SortedDict (position -> node), giving O(log n)
    insertion, deletion and successor search. All public operations run under
    a single lock, so a lookup sees a node's replicas either all present or
    all absent.

    Hash collisions between different nodes are not resolved: the node added
    later takes the position over and the earlier node keeps one replica
    fewer. They are logged and counted in `stats['collisions']`.
    """

    def __init__(self,
                 replicas: int,
                 nodes: Optional[Iterable[str]] = None,
                 hash_function: HashSpec = DEFAULT_HASH_FUNCTION,
                 separator: str = ":"):
        if isinstance(replicas, bool) or not isinstance(replicas, int) or replicas < 1:
            raise InvalidConfigurationError(
                f"replicas must be a positive integer, got {replicas!r}"
            )

        try:
            self._hash_function: HashFunction = get_hash_function(hash_function)
        except ValueError as e:
            raise InvalidConfigurationError(str(e)) from e

        self._replicas = replicas
        self._separator = separator

        # position -> node, sorted by position
        self._ring: SortedDict = SortedDict()
        self._nodes: Set[str] = set()
        self._lock = RLock()

        self.stats = {
            'nodes_added': 0,
            'nodes_removed': 0,
            'lookups': 0,
            'collisions': 0
        }

        for node in nodes or []:
            self.add_node(node)

        logger.info(f"Hash ring initialized with {len(self._nodes)} nodes, "
                    f"{replicas} replicas each, hash={self._hash_function.name}")

    @classmethod
    def from_config(cls, config: 'RingConfig') -> 'HashRing':
        """Build a ring from a RingConfig, rejecting invalid settings"""
        errors = config.validate()
        if errors:
            raise InvalidConfigurationError("; ".join(errors))

        return cls(
            replicas=config.replicas,
            nodes=config.nodes,
            hash_function=config.hash_function,
            separator=config.separator
        )

    @property
    def replicas(self) -> int:
        return self._replicas

    @property
    def hash_function(self) -> HashFunction:
        return self._hash_function

    @property
    def nodes(self) -> List[str]:
        """Current members, sorted"""
        with self._lock:
            return sorted(self._nodes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ring)

    def __contains__(self, node: str) -> bool:
        with self._lock:
            return node in self._nodes

    def __repr__(self) -> str:
        return (f"HashRing(replicas={self._replicas}, nodes={self.nodes!r}, "
                f"hash_function={self._hash_function.name!r})")

    def hash(self, key: str) -> int:
        """Position of a key on the ring"""
        return self._hash_function(key)

    def _vnode_key(self, node: str, index: int) -> str:
        return f"{node}{self._separator}{index}"

    def _vnode_positions(self, node: str) -> List[int]:
        return [self.hash(self._vnode_key(node, i)) for i in range(self._replicas)]

    def add_node(self, node: str) -> None:
        """
        Add a node and all of its virtual positions.

        Adding a node that is already a member never takes positions from
        other nodes. It only reclaims its own positions that are currently
        empty, such as ones lost to a colliding node that has since been
        removed. Otherwise the ring is unchanged.
        """
        positions = self._vnode_positions(node)

        with self._lock:
            if node in self._nodes:
                restored = 0
                for position in positions:
                    if position not in self._ring:
                        self._ring[position] = node
                        restored += 1
                if restored:
                    logger.info(f"Restored {restored} virtual nodes for '{node}'")
                else:
                    logger.debug(f"Node '{node}' already in ring, skipping add")
                return

            for position in positions:
                owner = self._ring.get(position)
                if owner is not None and owner != node:
                    self.stats['collisions'] += 1
                    logger.warning(f"Hash collision at position {position}: "
                                   f"'{node}' replaces '{owner}'")
                self._ring[position] = node

            self._nodes.add(node)
            self.stats['nodes_added'] += 1

        logger.info(f"Added node '{node}' to ring ({len(positions)} virtual nodes)")

    def remove_node(self, node: str) -> None:
        """
        Remove a node and its virtual positions.

        Removing a node that was never added is a no-op.
        """
        positions = self._vnode_positions(node)

        with self._lock:
            if node not in self._nodes:
                logger.debug(f"Node '{node}' not in ring, skipping remove")
                return

            for position in positions:
                # Positions taken over by a colliding node stay with that node
                if self._ring.get(position) == node:
                    del self._ring[position]

            self._nodes.discard(node)
            self.stats['nodes_removed'] += 1

        logger.info(f"Removed node '{node}' from ring")

    def _owner_of(self, position: int) -> Optional[str]:
        if not self._ring:
            return None

        index = self._ring.bisect_left(position)
        if index == len(self._ring):
            # Past the largest position: wrap around to the first one
            index = 0

        return self._ring.peekitem(index)[1]

    def get_owner(self, key: str) -> Optional[str]:
        """
        Get the node owning a key.

        Args:
            key: Arbitrary key string

        Returns:
            The owning node, or None when the ring has no members
        """
        position = self.hash(key)

        with self._lock:
            self.stats['lookups'] += 1
            owner = self._owner_of(position)

        logger.debug(f"Key '{key}' (position {position}) -> {owner}")
        return owner

    def get_owners(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        """Look up several keys against a single membership state"""
        hashed = [(key, self.hash(key)) for key in keys]

        with self._lock:
            self.stats['lookups'] += len(hashed)
            return {key: self._owner_of(position) for key, position in hashed}

    def positions(self) -> List[Tuple[int, str]]:
        """All (position, node) pairs in ring order"""
        with self._lock:
            return list(self._ring.items())

    def positions_for(self, node: str) -> List[int]:
        """Positions currently owned by a node, in ring order"""
        with self._lock:
            return [position for position, owner in self._ring.items() if owner == node]

    def copy(self) -> 'HashRing':
        """Independent ring with the same settings, membership and stats"""
        clone = HashRing.__new__(HashRing)
        clone._replicas = self._replicas
        clone._hash_function = self._hash_function
        clone._separator = self._separator
        clone._lock = RLock()

        with self._lock:
            clone._ring = self._ring.copy()
            clone._nodes = set(self._nodes)
            clone.stats = dict(self.stats)

        logger.debug(f"Copied hash ring with {len(clone._nodes)} nodes")
        return clone
