#!/usr/bin/env python3
"""
Console helpers shared by the command scripts

- status lines for the user (print, not logging)
- interactive prompts built on input()
- logging level setup
- the error boundary every command runs inside
- the options every command accepts (--config-dir, --debug, --verbose)
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from reellib.config_manager import ConfigManager
from reellib.constants import DEFAULT_CONFIG_DIR
from reellib.errors import ReelError

logger = logging.getLogger(__name__)

T = TypeVar('T')

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# config.json logLevel -> logging level
_LOG_LEVELS = {
    'error': logging.ERROR,
    'warn': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG,
}


class PromptCancelled(Exception):
    """The user aborted an interactive prompt (Ctrl-C / end of input)"""


def configure_logging(level_name: str = 'warn', debug: bool = False, verbose: bool = False) -> None:
    """Set the root log level: --debug > --verbose > configured level"""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = _LOG_LEVELS.get(level_name, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


# ----------------------------------------------------------------------
# Status lines
# ----------------------------------------------------------------------

def info(message: str) -> None:
    print(message)


def success(message: str) -> None:
    print(f"✓ {message}")


def warning(message: str) -> None:
    print(f"⚠ {message}")


def error(message: str) -> None:
    print(f"❌ {message}", file=sys.stderr)


def banner(title: str, width: int = 60) -> None:
    print("\n" + "=" * width)
    print(title)
    print("=" * width)


def mask_api_key(api_key: str) -> str:
    return '***' + api_key[-4:] if api_key else '(none)'


# ----------------------------------------------------------------------
# Prompts
# ----------------------------------------------------------------------

def _read(prompt: str) -> str:
    try:
        return input(prompt)
    except (EOFError, KeyboardInterrupt) as e:
        print()
        raise PromptCancelled() from e


def ask(message: str, default: Optional[str] = None,
        validate: Optional[Callable[[str], Optional[str]]] = None) -> str:
    """
    Ask for a line of text. validate(answer) returns an error message to
    re-prompt, or None to accept.
    """
    suffix = f" [{default}]" if default else ''
    while True:
        answer = _read(f"{message}{suffix}: ").strip()
        if not answer and default is not None:
            answer = default
        problem = validate(answer) if validate else None
        if problem is None:
            return answer
        print(f"  {problem}")


def ask_secret(message: str, validate: Optional[Callable[[str], Optional[str]]] = None) -> str:
    while True:
        try:
            answer = getpass.getpass(f"{message}: ").strip()
        except (EOFError, KeyboardInterrupt) as e:
            print()
            raise PromptCancelled() from e
        problem = validate(answer) if validate else None
        if problem is None:
            return answer
        print(f"  {problem}")


def confirm(message: str, default: bool = False) -> bool:
    hint = '[Y/n]' if default else '[y/N]'
    while True:
        answer = _read(f"{message} {hint}: ").strip().lower()
        if not answer:
            return default
        if answer in ('y', 'yes'):
            return True
        if answer in ('n', 'no'):
            return False
        print("  Please answer y or n.")


def choose(message: str, choices: Sequence[Tuple[str, T]], allow_cancel: bool = False,
           default: Optional[int] = None) -> Optional[T]:
    """
    Numbered menu. Returns the value of the chosen entry, or None when the
    user picks the cancel entry (0).
    """
    print(message)
    for i, (label, _) in enumerate(choices, 1):
        print(f"  {i}. {label}")
    if allow_cancel:
        print("  0. Cancel")

    low = 0 if allow_cancel else 1
    default_hint = f" [{default}]" if default is not None else ''
    while True:
        answer = _read(f"Choice{default_hint}: ").strip()
        if not answer and default is not None:
            answer = str(default)
        if answer.isdigit() and low <= int(answer) <= len(choices):
            index = int(answer)
            return None if index == 0 else choices[index - 1][1]
        print(f"  Enter a number between {low} and {len(choices)}.")


# ----------------------------------------------------------------------
# Error boundary
# ----------------------------------------------------------------------

def run_with_error_handling(func: Callable[..., Optional[int]], *args, **kwargs) -> int:
    """
    Run a command body and turn failures into an exit status.

    ReelError -> its message (+ details at DEBUG), exit 1
    PromptCancelled -> 'Cancelled', exit 130
    anything else -> generic message (+ traceback at DEBUG), exit 1
    """
    try:
        result = func(*args, **kwargs)
        return 0 if result is None else result
    except PromptCancelled:
        info("Cancelled.")
        return 130
    except ReelError as e:
        error(f"{e.kind.label}: {e.message}")
        if e.details:
            logger.debug(f"Details: {e.details}")
        return 1
    except Exception as e:
        error(f"Error: {e}")
        logger.debug("Unhandled exception", exc_info=True)
        return 1


# ----------------------------------------------------------------------
# Shared command-line options
# ----------------------------------------------------------------------

def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--config-dir', type=Path, default=None,
                        help=f'Configuration directory (default: {DEFAULT_CONFIG_DIR})')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')


def init_command(args: argparse.Namespace) -> ConfigManager:
    """Build the ConfigManager for a command and apply its log level"""
    config_manager = ConfigManager(args.config_dir)
    try:
        level_name = config_manager.load_config().app.log_level
    except ReelError:
        level_name = 'warn'
    configure_logging(level_name, debug=args.debug, verbose=args.verbose)
    return config_manager
