"""
Command Line Interface for icecast-fleet

Provides commands for:
- run: Launch the instances described in a config file
- setup: Install and configure Icecast on every node
- playlist: Write listener playlists for one or more mounts
- shutdown: Terminate every instance

Every command reads the state file (run reads the config file instead) and
writes the state file back when it finishes, successful or not.
"""

import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from .configs import ConfigLoader, FleetConfig, StateManager
from .main import FleetManager
from .utils.logger import configure_logger

DEFAULT_STATE_FILE = "state.json"


def load_fleet(args) -> FleetConfig:
    """run starts from the config file; every other command from saved state"""
    if args.command == "run":
        return ConfigLoader.load_from_file(args.config)

    config = StateManager(args.state).load()
    if config is None:
        raise FileNotFoundError(f"No fleet state found at {args.state}; run a config first")
    return config


# === Command handlers ===

def run_command(manager: FleetManager, args) -> None:
    report = manager.run()
    for name, error in report.failures.items():
        logger.warning(f"{name} not ready: {error}")


def setup_command(manager: FleetManager, args) -> None:
    manager.setup()


def playlist_command(manager: FleetManager, args) -> None:
    manager.playlist(args.mounts, args.output_dir)


def shutdown_command(manager: FleetManager, args) -> None:
    manager.shutdown()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icecast-fleet",
        description="Provision and manage a fleet of Icecast relays on EC2",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Launch the servers in a config file
  icecast-fleet run config.json

  # Install and configure Icecast on them
  icecast-fleet setup

  # Write live-<relay>.m3u / live-<relay>.pls
  icecast-fleet playlist live

  # Terminate everything
  icecast-fleet shutdown
        """
    )

    # Global arguments
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-s", "--state", default=DEFAULT_STATE_FILE,
                        help=f"File in which to store system state (default: {DEFAULT_STATE_FILE})")
    parser.add_argument("--log-file", help="Also write a DEBUG log to this file")

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Launch instances from a config file")
    run_parser.add_argument("config", help="Configuration file path")
    run_parser.set_defaults(func=run_command)

    setup_parser = subparsers.add_parser("setup", help="Configure Icecast on every node")
    setup_parser.set_defaults(func=setup_command)

    playlist_parser = subparsers.add_parser("playlist", help="Write playlists for mounts")
    playlist_parser.add_argument("mounts", nargs="+", help="Mount names (e.g. live)")
    playlist_parser.add_argument("-o", "--output-dir", default=".", help="Directory for playlist files")
    playlist_parser.set_defaults(func=playlist_command)

    shutdown_parser = subparsers.add_parser("shutdown", help="Terminate every instance")
    shutdown_parser.set_defaults(func=shutdown_command)

    return parser


def main(argv: Optional[List[str]] = None, manager_factory=FleetManager) -> int:
    """Main CLI entry point; returns the process exit status"""
    args = build_parser().parse_args(argv)
    configure_logger(args.verbose, args.log_file)
    load_dotenv()

    try:
        config = load_fleet(args)
    except (OSError, ValueError) as e:
        logger.error(f"{e}")
        return 1

    state_manager = StateManager(args.state)
    status = 0
    try:
        args.func(manager_factory(config), args)
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        status = 1
    finally:
        try:
            state_manager.save(config)
        except OSError as e:
            logger.error(f"Failed to write state to {args.state}: {e}")
            status = 1

    return status


def entry_point():
    sys.exit(main())


if __name__ == "__main__":
    entry_point()
