#!/usr/bin/env python3
"""
reel_search.py - Search TMDb by title, inspect a result, save it locally

Flow:
1. Resolve the API key (credentials file, else TMDB_API_KEY)
2. Validate the query and search TMDb
3. Pick a result from the numbered list (0 cancels)
4. Optionally show full details and image URLs
5. Optionally save data.json / metadata.txt / images under the output dir

Examples:
  python reel_search.py "The Matrix"
  python reel_search.py "Batman" --year 2022
  python reel_search.py "Avengers" --output ./action-movies
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from reellib import console
from reellib.config_manager import ConfigManager
from reellib.errors import ReelError
from reellib.file_helpers import format_bytes
from reellib.film_service import FilmService
from reellib.models import Film, SearchParams, SearchResult
from reellib.storage import StorageService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_KEY_HELP_URL = 'https://www.themoviedb.org/settings/api'


def result_label(result: SearchResult) -> str:
    release = result.release_date or 'Unknown Date'
    return f"{result.title} ({release}) - Rating: {result.vote_average}/10"


def select_result(results: List[SearchResult], title: str) -> Optional[SearchResult]:
    console.success(f"Found {len(results)} film(s) matching \"{title}\"")
    choices = [(result_label(r), r) for r in results]
    return console.choose("Select a film to view details:", choices, allow_cancel=True)


def show_details(film_service: FilmService, film: Film) -> None:
    print("\n" + film_service.format_film_for_display(film))

    images = film_service.get_film_images(film)
    if images:
        console.info("\n🖼️  Available Images:")
        if 'poster' in images:
            console.info(f"  Poster:   {images['poster']}")
        if 'backdrop' in images:
            console.info(f"  Backdrop: {images['backdrop']}")


def save_film(storage: StorageService, film: Film, output_dir: Optional[Path]) -> Path:
    console.info("Saving film data...")
    saved_path = storage.save_film(film, output_dir)

    console.success("Film data saved successfully!")
    console.info(f"📁 Saved to: {saved_path}")
    console.info("📄 Files saved:")
    for name, size in storage.saved_files(saved_path):
        console.info(f"  {name} ({format_bytes(size)})")
    return saved_path


def run_search(config_manager: ConfigManager, args: argparse.Namespace) -> int:
    title = ' '.join(args.title).strip()
    console.info(f"Searching for films with title: \"{title}\"")

    api_key = config_manager.get_api_key()
    if not api_key:
        console.warning('No API key configured. Run "reel configure" to set up your TMDB API key.')
        console.info(f"You can get a free API key from: {API_KEY_HELP_URL}")
        return 1

    user = config_manager.load_config().user
    params = SearchParams(
        query=title,
        page=args.page,
        year=args.year,
        include_adult=args.adult or user.include_adult,
    )

    film_service = FilmService.from_api_key(api_key, config_manager)
    results = film_service.search_films(params)

    if not results:
        console.warning(f"No films found matching \"{title}\"")
        return 0

    selected = select_result(results, title)
    if selected is None:
        console.info("Search cancelled")
        return 0

    console.info(f"\n📽️  {selected.title}")
    console.info(f"📅 Release Date: {selected.release_date or 'Unknown Date'}")
    console.info(f"⭐ Rating: {selected.vote_average}/10 ({selected.vote_count} votes)")
    console.info(f"📝 Overview: {selected.overview or 'No overview available'}")

    film: Optional[Film] = None
    if console.confirm("Would you like to see detailed information about this film?", default=True):
        try:
            film = film_service.get_film_details(selected.id, user.language)
            show_details(film_service, film)
        except ReelError as e:
            console.warning("Failed to get detailed film information")
            logger.debug(f"Details lookup failed: {e}")

    if not console.confirm("Would you like to save this film data locally?", default=True):
        console.info("Film data not saved")
        return 0

    if film is None:
        film = film_service.get_film_details(selected.id, user.language)

    storage = StorageService(config_manager)
    save_film(storage, film, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='reel search',
        description='Search for films by title',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  reel search "The Matrix"
  reel search "Batman" --year 2022
  reel search "Avengers" --output ./action-movies
        """
    )
    parser.add_argument('title', nargs='+', help='Film title to search for')
    parser.add_argument('--year', '-y', type=int, default=None,
                        help='Filter by release year')
    parser.add_argument('--adult', '-a', action='store_true',
                        help='Include adult content in search results')
    parser.add_argument('--page', '-p', type=int, default=1,
                        help='Result page to show (default: 1)')
    parser.add_argument('--output', '-o', type=Path, default=None,
                        help='Output directory for this film (default: from config)')
    console.add_common_arguments(parser)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config_manager = console.init_command(args)
    return console.run_with_error_handling(run_search, config_manager, args)


if __name__ == '__main__':
    sys.exit(main())
