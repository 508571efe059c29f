"""
Hash functions for ring placement.

Positions on the ring are plain integers produced by a HashFunction. The
built-in functions are stable across processes, so the same node layout is
rebuilt after a restart.
"""

import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Union

import mmh3

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HashFunction:
    """A named string -> int hash with a known output width"""
    name: str
    bits: int
    func: Callable[[str], int]

    @property
    def space(self) -> int:
        """Size of the position space"""
        return 1 << self.bits

    def __call__(self, key: str) -> int:
        return self.func(key)


def _digest_hash(algorithm: str) -> Callable[[str], int]:
    def _hash(key: str) -> int:
        digest = hashlib.new(algorithm, key.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big")
    _hash.__name__ = f"{algorithm}_hash"
    return _hash


def _mmh3_hash(key: str) -> int:
    return mmh3.hash(key, signed=False)


_registry: Dict[str, HashFunction] = {
    "md5": HashFunction("md5", 64, _digest_hash("md5")),
    "sha1": HashFunction("sha1", 64, _digest_hash("sha1")),
    "sha256": HashFunction("sha256", 64, _digest_hash("sha256")),
    "mmh3": HashFunction("mmh3", 32, _mmh3_hash),
}
_registry_lock = threading.Lock()

DEFAULT_HASH_FUNCTION = "md5"

HashSpec = Union[str, HashFunction, Callable[[str], int]]


def register_hash_function(name: str, func: Callable[[str], int], bits: int = 64) -> HashFunction:
    """
    Register a hash function under a name.

    Args:
        name: Registry name, used by configuration files
        func: Callable mapping a string to a non-negative integer
        bits: Width of the output space

    Returns:
        The registered HashFunction
    """
    hash_function = HashFunction(name, bits, func)
    with _registry_lock:
        if name in _registry:
            logger.warning(f"Replacing registered hash function '{name}'")
        _registry[name] = hash_function
    return hash_function


def available_hash_functions() -> List[str]:
    """Names of all registered hash functions"""
    with _registry_lock:
        return sorted(_registry)


def get_hash_function(spec: HashSpec = DEFAULT_HASH_FUNCTION) -> HashFunction:
    """Resolve a registry name, HashFunction or bare callable"""
    if isinstance(spec, HashFunction):
        return spec

    if isinstance(spec, str):
        with _registry_lock:
            hash_function = _registry.get(spec)
        if hash_function is None:
            raise ValueError(
                f"Unknown hash function '{spec}' "
                f"(available: {', '.join(available_hash_functions())})"
            )
        return hash_function

    if callable(spec):
        name = getattr(spec, "__name__", type(spec).__name__)
        return HashFunction(name, 64, spec)

    raise ValueError(f"Invalid hash function: {spec!r}")
