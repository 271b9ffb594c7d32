#!/usr/bin/env python3
"""
reel_check.py - Test configuration, credentials and the TMDb API connection

Runs as `reel test`. Checks, in order:
1. config.json loads
2. an API key resolves (credentials file or TMDB_API_KEY)
3. the TMDb configuration endpoint answers
4. a sample search succeeds
"""

import sys
import logging
import argparse

from reellib import console
from reellib.config_manager import ConfigManager
from reellib.errors import ReelError
from reellib.film_service import FilmService
from reellib.models import SearchParams

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_checks(config_manager: ConfigManager, args: argparse.Namespace) -> int:
    console.info("Testing reel-cli configuration and TMDB API connection...\n")
    failures = 0

    try:
        config = config_manager.load_config()
        console.success("Configuration loaded successfully")
        console.info(f"  📁 Config directory: {config_manager.config_dir}")
        console.info(f"  🖼️  Image quality: {config.user.image_quality}")
        console.info(f"  📂 Output directory: {config.user.default_output_dir}")
    except ReelError as e:
        console.error("Failed to load configuration")
        logger.debug(f"Configuration error: {e}")
        failures += 1

    api_key = config_manager.get_api_key()
    if not api_key:
        console.warning("No API key found")
        console.info('  Run "reel configure" to set up your API key')
        return 1

    console.success("API key found")
    console.info(f"  🔑 API Key: {console.mask_api_key(api_key)}")

    film_service = FilmService.from_api_key(api_key, config_manager)
    if not film_service.test_connection():
        console.error("TMDB API connection failed")
        console.info("  Please check your API key and internet connection")
        return 1

    console.success("TMDB API connection successful")

    console.info("\n🧪 Testing search functionality...")
    try:
        results = film_service.search_films(SearchParams(query=args.query, page=1))
        console.success(f"Search test successful - Found {len(results)} results")
    except ReelError as e:
        console.warning("Search test failed")
        logger.debug(f"Search test error: {e}")
        failures += 1

    console.info("\n🎯 Test completed!")
    return 0 if failures == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='reel test',
        description='Test TMDB API connection and credentials',
    )
    parser.add_argument('--query', default='test',
                        help='Title used for the sample search (default: test)')
    console.add_common_arguments(parser)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config_manager = console.init_command(args)
    return console.run_with_error_handling(run_checks, config_manager, args)


if __name__ == '__main__':
    sys.exit(main())
