"""
Core hash ring implementation
Ring structure, pluggable hash functions and placement analysis.
"""

from .ring import HashRing, RingError, InvalidConfigurationError
from .hashing import (
    HashFunction,
    DEFAULT_HASH_FUNCTION,
    get_hash_function,
    register_hash_function,
    available_hash_functions,
)
from .distribution import generate_keys, key_distribution, coverage, moved_keys, imbalance

__all__ = [
    'HashRing',
    'RingError',
    'InvalidConfigurationError',
    'HashFunction',
    'DEFAULT_HASH_FUNCTION',
    'get_hash_function',
    'register_hash_function',
    'available_hash_functions',
    'generate_keys',
    'key_distribution',
    'coverage',
    'moved_keys',
    'imbalance'
]
