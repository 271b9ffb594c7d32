#!/usr/bin/env python3
"""
reel_list.py - List, inspect and delete saved films

Without flags: list saved films, then offer view / delete / stats.

Examples:
  python reel_list.py
  python reel_list.py --stats
  python reel_list.py --output ./movies
  python reel_list.py --delete
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from reellib import console
from reellib.config_manager import ConfigManager
from reellib.errors import ReelError
from reellib.exporter import extract_film_name
from reellib.file_helpers import format_bytes
from reellib.storage import StorageService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def display_name(film_dir: str) -> str:
    return extract_film_name(film_dir).replace('-', ' ')


def list_films(storage: StorageService, output_dir: Optional[Path]) -> List[str]:
    films = storage.list_saved_films(output_dir)

    if not films:
        console.warning("No films found in storage")
        console.info('Use "reel search <title>" to search and save films')
        return films

    console.success(f"Found {len(films)} saved film(s):\n")
    for i, film_dir in enumerate(films, 1):
        print(f"{i}. {display_name(film_dir)}")
        print(f"   📁 {film_dir}")
        print()
    return films


def pick_film(films: List[str], message: str) -> Optional[str]:
    return console.choose(message, [(display_name(d), d) for d in films], allow_cancel=True)


def show_film_details(storage: StorageService, film_dir: str, output_dir: Optional[Path]) -> None:
    try:
        film = storage.get_saved_film(film_dir, output_dir)
    except ReelError as e:
        console.warning("Film data is corrupted")
        logger.debug(f"Could not read {film_dir}: {e}")
        return

    if film is None:
        console.warning("Film data not found")
        return

    console.banner("📽️  Film Details", width=50)
    print(f"Title: {film.title}")
    print(f"Original Title: {film.original_title}")
    print(f"Release Date: {film.release_date}")
    print(f"Runtime: {film.runtime} minutes")
    print(f"Rating: {film.vote_average}/10 ({film.vote_count} votes)")
    print(f"Popularity: {film.popularity}")
    print(f"Status: {film.status}")
    if film.tagline:
        print(f'Tagline: "{film.tagline}"')
    print(f"\nOverview: {film.overview}")
    if film.genres:
        print(f"\nGenres: {', '.join(film.genre_names)}")
    if film.budget > 0:
        print(f"Budget: ${film.budget:,}")
    if film.revenue > 0:
        print(f"Revenue: ${film.revenue:,}")
    if film.imdb_url:
        print(f"IMDB: {film.imdb_url}")
    print("=" * 50)


def delete_film(storage: StorageService, output_dir: Optional[Path]) -> None:
    films = storage.list_saved_films(output_dir)
    if not films:
        console.warning("No films to delete")
        return

    film_dir = pick_film(films, "Select a film to delete:")
    if film_dir is None:
        console.info("Deletion cancelled")
        return

    if console.confirm(f"Are you sure you want to delete \"{display_name(film_dir)}\"?", default=False):
        storage.delete_film(film_dir, output_dir)
        console.success("Film deleted successfully")
    else:
        console.info("Deletion cancelled")


def show_stats(storage: StorageService, output_dir: Optional[Path]) -> None:
    stats = storage.get_storage_stats(output_dir)

    console.banner("📊 Storage Statistics", width=30)
    print(f"Total Films:  {stats.total_films}")
    print(f"Total Size:   {format_bytes(stats.total_size)}")
    print(f"Average Size: {format_bytes(stats.average_size)}")
    print("=" * 30)

    if stats.total_films > 0:
        console.info(f"Storage location: {storage.resolve_base_dir(output_dir)}")


def run_list(config_manager: ConfigManager, args: argparse.Namespace) -> int:
    storage = StorageService(config_manager)

    if args.stats:
        show_stats(storage, args.output)
        return 0

    if args.delete:
        delete_film(storage, args.output)
        return 0

    films = list_films(storage, args.output)
    if not films:
        return 0

    action = console.choose("What would you like to do?", [
        ('View film details', 'view'),
        ('Delete a film', 'delete'),
        ('Show storage statistics', 'stats'),
        ('Exit', 'exit'),
    ])

    if action == 'view':
        film_dir = pick_film(films, "Select a film to view details:")
        if film_dir is not None:
            show_film_details(storage, film_dir, args.output)
    elif action == 'delete':
        delete_film(storage, args.output)
    elif action == 'stats':
        show_stats(storage, args.output)
    else:
        console.info("Goodbye!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='reel list',
        description='List all saved films and manage storage',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  reel list
  reel list --stats
  reel list --output ./movies
  reel list --delete
        """
    )
    parser.add_argument('--output', '-o', type=Path, default=None,
                        help='Directory to list films from (default: from config)')
    parser.add_argument('--stats', '-s', action='store_true', help='Show storage statistics')
    parser.add_argument('--delete', '-d', action='store_true', help='Delete a film')
    console.add_common_arguments(parser)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config_manager = console.init_command(args)
    return console.run_with_error_handling(run_list, config_manager, args)


if __name__ == '__main__':
    sys.exit(main())
