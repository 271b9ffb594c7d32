#!/usr/bin/env python3
"""
reel.py - Search for films and retrieve comprehensive data from TMDb

Single entry point that dispatches to the command scripts:

  reel configure    -> reel_configure.py
  reel search       -> reel_search.py
  reel list         -> reel_list.py
  reel export       -> reel_export.py
  reel test         -> reel_check.py
  reel help [cmd]   -> usage guide

Global options (--debug, --verbose, --config-dir) may be given before the
command and are passed through to it.
"""

import sys
import logging
import argparse
from typing import Callable, List, Optional

import reel_check
import reel_configure
import reel_export
import reel_list
import reel_search

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = '1.0.0'

# name -> (module, one-line description, usage)
COMMANDS = {
    'configure': (reel_configure, 'Set up TMDB API credentials and preferences', 'reel configure [options]'),
    'search': (reel_search, 'Search for films by title', 'reel search <title> [options]'),
    'help': (None, 'Show this help information', 'reel help [command]'),
    'test': (reel_check, 'Test TMDB API connection and credentials', 'reel test'),
    'list': (reel_list, 'List all saved films and manage storage', 'reel list [options]'),
    'export': (reel_export, 'Export saved film data to different formats', 'reel export [options]'),
}


def print_general_help() -> None:
    print("reel-cli 🍿 Search for films and retrieve comprehensive data from TMDB")
    print("=" * 60)
    print("\nAvailable Commands:\n")
    for name, (_, description, usage) in COMMANDS.items():
        print(f"  {name:<12} {description}")
        print(f"    Usage: {usage}\n")

    print("Getting Started:")
    print('  1. Run "reel configure" to set up your TMDB API key')
    print('  2. Use "reel search <title>" to search for films')
    print("  3. Select a film and save the data locally\n")

    print("Examples:")
    print("  # Search for a specific film")
    print('  reel search "The Matrix"\n')
    print("  # Search with year filter")
    print('  reel search "Batman" --year 2022\n')
    print("  # Configure with custom settings")
    print("  reel configure --api-key YOUR_KEY --output-dir ./movies\n")

    print("For more information:")
    print("  • TMDB API: https://www.themoviedb.org/documentation/api")
    print('  • Run "reel help <command>" for command-specific help')


def print_command_help(name: str) -> int:
    if name not in COMMANDS:
        print(f"❌ Unknown command: {name}", file=sys.stderr)
        print(f"Available commands: {', '.join(COMMANDS)}")
        return 1

    module = COMMANDS[name][0]
    if module is None:
        print_general_help()
    else:
        module.build_parser().print_help()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='reel',
        description='Search for films and retrieve comprehensive data from TMDB',
        add_help=True,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {VERSION}')
    parser.add_argument('--debug', '-d', action='store_true', help='Enable debug mode')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')
    parser.add_argument('--config-dir', default=None, help='Configuration directory')
    parser.add_argument('command', nargs='?', choices=list(COMMANDS), help='Command to run')
    parser.add_argument('args', nargs=argparse.REMAINDER, help='Arguments for the command')
    return parser


def forwarded_args(args: argparse.Namespace) -> List[str]:
    """Command arguments plus the global options given before the command"""
    argv = list(args.args)
    if args.debug:
        argv.append('--debug')
    if args.verbose:
        argv.append('--verbose')
    if args.config_dir:
        argv += ['--config-dir', args.config_dir]
    return argv


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == 'help' and args.args:
        return print_command_help(args.args[0])

    if args.command in (None, 'help'):
        print_general_help()
        return 0

    runner: Callable[[List[str]], int] = COMMANDS[args.command][0].main
    return runner(forwarded_args(args))


if __name__ == '__main__':
    sys.exit(main())
