"""
Configuration management for HashRing
"""

import os
import yaml
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from pathlib import Path

from .core.hashing import DEFAULT_HASH_FUNCTION, available_hash_functions
from .core.ring import InvalidConfigurationError


VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class RingConfig:
    """Hash ring configuration"""
    replicas: int = 150
    nodes: List[str] = field(default_factory=list)
    hash_function: str = DEFAULT_HASH_FUNCTION
    separator: str = ":"  # between node id and replica index

    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_file(cls, config_path: str) -> 'RingConfig':
        """Load configuration from YAML file"""
        config_path = Path(config_path)
        if not config_path.exists():
            return cls()

        with open(config_path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise InvalidConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RingConfig':
        """Create config from dictionary, ignoring unknown keys"""
        if not isinstance(data, dict):
            raise InvalidConfigurationError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )

        config = cls()

        for key, value in data.items():
            if hasattr(config, key):
                setattr(config, key, value)

        if isinstance(config.nodes, str):
            config.nodes = _split_nodes(config.nodes)

        return config

    @classmethod
    def from_env(cls) -> 'RingConfig':
        """Load configuration from environment variables"""
        config = cls()

        replicas = os.getenv('HASHRING_REPLICAS')
        if replicas:
            try:
                config.replicas = int(replicas)
            except ValueError as e:
                raise InvalidConfigurationError(
                    f"HASHRING_REPLICAS must be an integer, got {replicas!r}"
                ) from e

        nodes_env = os.getenv('HASHRING_NODES', '')
        if nodes_env:
            config.nodes = _split_nodes(nodes_env)

        config.hash_function = os.getenv('HASHRING_HASH_FUNCTION', config.hash_function)
        config.separator = os.getenv('HASHRING_SEPARATOR', config.separator)
        config.log_level = os.getenv('HASHRING_LOG_LEVEL', config.log_level)
        config.log_file = os.getenv('HASHRING_LOG_FILE', config.log_file)

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return {
            'replicas': self.replicas,
            'nodes': list(self.nodes),
            'hash_function': self.hash_function,
            'separator': self.separator,
            'log_level': self.log_level,
            'log_file': self.log_file
        }

    def save_to_file(self, config_path: str):
        """Save configuration to YAML file"""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2)

    def validate(self) -> List[str]:
        """Validate configuration and return any errors"""
        errors = []

        if isinstance(self.replicas, bool) or not isinstance(self.replicas, int):
            errors.append(f"replicas must be an integer, got {self.replicas!r}")
        elif self.replicas < 1:
            errors.append(f"replicas must be at least 1, got {self.replicas}")

        if not isinstance(self.nodes, list) or not all(isinstance(n, str) for n in self.nodes):
            errors.append("nodes must be a list of strings")

        if self.hash_function not in available_hash_functions():
            errors.append(f"Invalid hash function: {self.hash_function}")

        if not isinstance(self.separator, str):
            errors.append("separator must be a string")

        if str(self.log_level).upper() not in VALID_LOG_LEVELS:
            errors.append(f"Invalid log level: {self.log_level}")

        return errors


def _split_nodes(value: str) -> List[str]:
    return [n.strip() for n in value.split(',') if n.strip()]
