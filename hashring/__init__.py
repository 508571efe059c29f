"""
HashRing: consistent hashing with virtual nodes
Assigns keys to a dynamic set of nodes so that membership changes only move
a small fraction of keys.
"""

__version__ = "1.0.0"

from .core import (
    HashRing,
    RingError,
    InvalidConfigurationError,
    HashFunction,
    get_hash_function,
    register_hash_function,
    available_hash_functions,
)
from .config import RingConfig

__all__ = [
    'HashRing',
    'RingError',
    'InvalidConfigurationError',
    'HashFunction',
    'get_hash_function',
    'register_hash_function',
    'available_hash_functions',
    'RingConfig'
]
