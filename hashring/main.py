"""
HashRing Main Entry Point
Command-line driver for looking up key owners and simulating membership changes.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import VALID_LOG_LEVELS, RingConfig
from .core import HashRing, InvalidConfigurationError, available_hash_functions
from .core.distribution import coverage, generate_keys, imbalance, key_distribution, moved_keys


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Set up logging configuration"""

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Console handler; stderr keeps stdout free for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""

    parser = argparse.ArgumentParser(
        prog="hashring",
        description="HashRing - consistent hashing with virtual nodes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Find the owners of some keys
  python -m hashring.main --nodes Node1,Node2,Node3 lookup user:42 user:43

  # Use a config file
  python -m hashring.main --config ring.yaml lookup user:42

  # Simulate adding and removing nodes over 10000 random keys
  python -m hashring.main -n Node1,Node2,Node3,Node4,Node5 -r 3 \\
      simulate --keys 10000 --add Node6 --remove Node3
        """,
    )

    # Configuration options
    parser.add_argument(
        "--config", "-c", type=str, help="Path to YAML configuration file"
    )

    parser.add_argument(
        "--replicas", "-r", type=int, help="Virtual nodes per node (default: 150)"
    )

    parser.add_argument(
        "--nodes", "-n", type=str, help="Comma-separated node identifiers"
    )

    parser.add_argument(
        "--hash-function",
        choices=available_hash_functions(),
        help="Hash function for positions (default: md5)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=VALID_LOG_LEVELS,
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-file", type=str, help="Log file path (logs to stderr if not specified)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup = subparsers.add_parser("lookup", help="Print the owner of each key")
    lookup.add_argument("keys", nargs="+", help="Keys to look up")

    simulate = subparsers.add_parser(
        "simulate", help="Measure distribution and key movement for membership changes"
    )
    simulate.add_argument(
        "--keys", type=int, default=10000, help="Number of random keys (default: 10000)"
    )
    simulate.add_argument("--seed", type=int, help="Random seed for key generation")
    simulate.add_argument(
        "--add", action="append", default=[], metavar="NODE", help="Node to add (repeatable)"
    )
    simulate.add_argument(
        "--remove", action="append", default=[], metavar="NODE",
        help="Node to remove (repeatable)",
    )

    return parser


def create_config_from_args(args: argparse.Namespace) -> RingConfig:
    """Create RingConfig from command line arguments"""

    # Start with config file if provided, else the environment
    if args.config:
        config = RingConfig.from_file(args.config)
    else:
        config = RingConfig.from_env()

    # Override with command line arguments
    if args.replicas is not None:
        config.replicas = args.replicas

    if args.nodes:
        config.nodes = [n.strip() for n in args.nodes.split(",") if n.strip()]

    if args.hash_function:
        config.hash_function = args.hash_function

    if args.log_level:
        config.log_level = args.log_level

    if args.log_file:
        config.log_file = args.log_file

    return config


def _print_distribution(title: str, ring: HashRing, keys: List[str]):
    distribution = key_distribution(ring, keys)
    shares = coverage(ring)

    print(title)
    for node in sorted(distribution):
        print(f"  {node}: {distribution[node]} keys, "
              f"{shares.get(node, 0.0) * 100:.2f}% of ring")
    print(f"  imbalance: {imbalance(distribution):.3f}")


def run_lookup(ring: HashRing, keys: List[str]) -> int:
    """Print the owner of each key"""
    owners = ring.get_owners(keys)
    for key in keys:
        owner = owners[key]
        print(f"{key} -> {owner if owner is not None else '<none>'}")
    return 0


def run_simulate(ring: HashRing, args: argparse.Namespace) -> int:
    """Print distribution before and after the requested membership changes"""
    keys = generate_keys(args.keys, seed=args.seed)

    _print_distribution("Initial distribution:", ring, keys)

    if not args.add and not args.remove:
        return 0

    before = ring.copy()
    for node in args.add:
        ring.add_node(node)
        print(f"Added {node}")
    for node in args.remove:
        ring.remove_node(node)
        print(f"Removed {node}")

    _print_distribution("Final distribution:", ring, keys)

    moved = moved_keys(before, ring, keys)
    fraction = len(moved) / len(keys) if keys else 0.0
    print(f"Moved keys: {len(moved)} of {len(keys)} ({fraction * 100:.2f}%)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""

    # Parse arguments
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    logger = logging.getLogger(__name__)

    try:
        config = create_config_from_args(args)
    except InvalidConfigurationError as e:
        setup_logging(args.log_level or "INFO", args.log_file)
        logger.error(f"Invalid configuration: {e}")
        return 1

    # Set up logging before building the ring
    setup_logging(config.log_level, config.log_file)

    try:
        ring = HashRing.from_config(config)
    except InvalidConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.debug(f"Configuration: {config}")

    if args.command == "lookup":
        return run_lookup(ring, args.keys)
    return run_simulate(ring, args)


def sync_main():
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    sync_main()
