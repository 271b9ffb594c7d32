#!/usr/bin/env python3
"""
reel_configure.py - Set up TMDb credentials and user preferences

Values not given on the command line are prompted for (API key, default
output directory, image quality). The API key goes to credentials.json; the
preferences go to config.json. Finishes with a connection test.

Examples:
  python reel_configure.py
  python reel_configure.py --api-key YOUR_API_KEY
  python reel_configure.py --output-dir ./movies --image-quality high
"""

import sys
import logging
import argparse
from typing import Optional

from reellib import console
from reellib.config_manager import ConfigManager
from reellib.constants import IMAGE_QUALITIES, MAX_IMAGE_SIZES, MIN_API_KEY_LENGTH
from reellib.errors import ReelError
from reellib.film_service import FilmService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def api_key_problem(api_key: Optional[str]) -> Optional[str]:
    if not api_key or not api_key.strip():
        return 'API key is required'
    if len(api_key.strip()) < MIN_API_KEY_LENGTH:
        return 'API key seems too short'
    return None


def output_dir_problem(output_dir: Optional[str]) -> Optional[str]:
    if not output_dir or not output_dir.strip():
        return 'Output directory is required'
    return None


def validate_settings(api_key: str, output_dir: str, image_quality: str) -> None:
    """Raise a configuration ReelError for the first invalid setting"""
    for problem in (api_key_problem(api_key), output_dir_problem(output_dir)):
        if problem:
            raise ReelError.configuration(problem)
    if image_quality not in IMAGE_QUALITIES:
        raise ReelError.configuration(
            f"Invalid image quality. Must be one of: {', '.join(IMAGE_QUALITIES)}",
            value=image_quality,
        )


def prompt_missing(args: argparse.Namespace, current_output_dir: str) -> None:
    """Fill api_key / output_dir / image_quality interactively when absent"""
    if not args.api_key:
        args.api_key = console.ask_secret('Enter your TMDB API key', validate=api_key_problem)

    if not args.output_dir:
        args.output_dir = console.ask('Default output directory for films',
                                      default=current_output_dir, validate=output_dir_problem)

    if not args.image_quality:
        args.image_quality = console.choose(
            'Default image quality:',
            [
                ('Low (faster, smaller files)', 'low'),
                ('Medium (balanced)', 'medium'),
                ('High (slower, larger files)', 'high'),
            ],
            default=2,
        )


def run_configure(config_manager: ConfigManager, args: argparse.Namespace) -> int:
    console.info("Configuring reel-cli...")

    current = config_manager.load_config().user
    prompt_missing(args, current.default_output_dir)

    api_key = args.api_key.strip()
    validate_settings(api_key, args.output_dir, args.image_quality)

    updates = {
        'default_output_dir': args.output_dir.strip(),
        'image_quality': args.image_quality,
    }
    if args.language:
        updates['language'] = args.language
    if args.max_image_size:
        updates['max_image_size'] = args.max_image_size
    if args.download_images is not None:
        updates['download_images'] = args.download_images
    if args.include_adult is not None:
        updates['include_adult'] = args.include_adult

    config_manager.save_credentials(api_key)
    config = config_manager.update_user_config(**updates)

    console.success("Configuration completed successfully!")
    console.info(f"API Key: {console.mask_api_key(api_key)}")
    console.info(f"Output Directory: {config.user.default_output_dir}")
    console.info(f"Image Quality: {config.user.image_quality}")
    console.info(f"Language: {config.user.language}")
    console.info(f"Download Images: {'yes' if config.user.download_images else 'no'}")
    console.info(f"Config file: {config_manager.config_path}")

    console.info("\nTesting TMDB API connection...")
    if FilmService.from_api_key(api_key, config_manager).test_connection():
        console.success("TMDB API connection successful!")
        console.info('\nYou can now use "reel search <title>" to search for films!')
    else:
        console.warning("TMDB API connection failed. Please check your API key.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='reel configure',
        description='Configure TMDB API credentials and settings',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  reel configure
  reel configure --api-key YOUR_API_KEY
  reel configure --output-dir ./movies --image-quality high
        """
    )
    parser.add_argument('--api-key', '-k', default=None, help='TMDB API key')
    parser.add_argument('--output-dir', '-o', default=None,
                        help='Default output directory for films')
    parser.add_argument('--image-quality', '-q', choices=IMAGE_QUALITIES, default=None,
                        help='Image quality (low|medium|high)')
    parser.add_argument('--language', '-l', default=None,
                        help='Language for film details (e.g. en-US, fr-FR)')
    parser.add_argument('--max-image-size', choices=MAX_IMAGE_SIZES, default=None,
                        help='Largest poster size to download')
    parser.add_argument('--download-images', dest='download_images', action='store_true',
                        default=None, help='Download poster/backdrop when saving')
    parser.add_argument('--no-download-images', dest='download_images', action='store_false',
                        help='Save metadata only')
    parser.add_argument('--include-adult', dest='include_adult', action='store_true',
                        default=None, help='Include adult content in searches by default')
    parser.add_argument('--no-include-adult', dest='include_adult', action='store_false',
                        help='Exclude adult content from searches by default')
    console.add_common_arguments(parser)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config_manager = console.init_command(args)
    return console.run_with_error_handling(run_configure, config_manager, args)


if __name__ == '__main__':
    sys.exit(main())
