#!/usr/bin/env python3
"""
Film storage: local persistence of Film records

Layout under the base directory (explicit argument, else the configured
default output directory):

    {base}/{id}-{sanitized title}/
        data.json       canonical Film record (the only file read back)
        metadata.txt    human-readable summary, regenerated on every save
        poster.jpg      optional, when image downloads are enabled
        backdrop.jpg    optional

A directory counts as a saved film if and only if it contains data.json.

Image downloads are best-effort: poster and backdrop are fetched
concurrently, each attempted once, and a failed download never fails the
save (the partial file is removed and the failure is logged).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import requests

from reellib import file_helpers
from reellib.config_manager import ConfigManager
from reellib.constants import (
    BACKDROP_FILENAME, FILM_DATA_FILENAME, FILM_METADATA_FILENAME,
    IMAGE_DOWNLOAD_TIMEOUT, IMAGE_SIZES_BY_QUALITY, MAX_IMAGE_SIZES,
    POSTER_FILENAME, TMDB_IMAGE_BASE_URL,
)
from reellib.errors import ReelError
from reellib.models import Film, StorageStats, UserConfig, utc_timestamp

logger = logging.getLogger(__name__)


def poster_size_for(user: UserConfig) -> str:
    """Poster size for the quality tier, capped at the max image size preference"""
    size = IMAGE_SIZES_BY_QUALITY[user.image_quality][0]
    if MAX_IMAGE_SIZES.index(size) > MAX_IMAGE_SIZES.index(user.max_image_size):
        return user.max_image_size
    return size


def backdrop_size_for(user: UserConfig) -> str:
    return IMAGE_SIZES_BY_QUALITY[user.image_quality][1]


class StorageService:
    """Save, list, read and delete films on local disk"""

    def __init__(self, config_manager: Optional[ConfigManager] = None,
                 image_base_url: str = TMDB_IMAGE_BASE_URL):
        self.config_manager = config_manager or ConfigManager()
        self.image_base_url = image_base_url

    def resolve_base_dir(self, output_dir=None) -> Path:
        if output_dir:
            return Path(output_dir)
        return Path(self.config_manager.load_config().user.default_output_dir)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save_film(self, film: Film, output_dir=None) -> Path:
        """
        Persist a film and return the absolute path of its directory.

        Raises a file system ReelError (operation 'save') if the directory
        or data.json cannot be written. metadata.txt and images are
        best-effort.
        """
        config = self.config_manager.load_config()
        base_dir = Path(output_dir) if output_dir else Path(config.user.default_output_dir)
        film_dir = (base_dir / file_helpers.create_film_directory_name(film.id, film.title)).resolve()

        try:
            file_helpers.ensure_directory(film_dir)
            file_helpers.write_json_file(film_dir / FILM_DATA_FILENAME, film.to_dict())
        except ReelError as e:
            raise ReelError.filesystem(
                f"Failed to save film data: {e}", e.path or film_dir, 'save',
                film_id=film.id, film_title=film.title,
            ) from e

        try:
            file_helpers.write_text_file(film_dir / FILM_METADATA_FILENAME, self.generate_metadata_text(film))
        except ReelError as e:
            logger.warning(f"Could not write {FILM_METADATA_FILENAME} for '{film.title}': {e}")

        if config.user.download_images:
            failures = self.download_film_images(film, film_dir, config.user)
            for name, error in failures.items():
                logger.warning(f"Skipped {name} for '{film.title}': {error}")

        logger.info(f"Saved '{film.title}' ({film.id}) to {film_dir}")
        return film_dir

    def download_film_images(self, film: Film, film_dir: Path,
                             user: Optional[UserConfig] = None) -> Dict[str, Exception]:
        """
        Download poster and backdrop concurrently.

        Every download is independent: all are joined, and the failures are
        returned (file name -> exception) instead of raised.
        """
        user = user or self.config_manager.load_config().user
        jobs: List[Tuple[str, Path]] = []

        if film.poster_path:
            jobs.append((self._image_url(film.poster_path, poster_size_for(user)),
                         film_dir / POSTER_FILENAME))
        if film.backdrop_path:
            jobs.append((self._image_url(film.backdrop_path, backdrop_size_for(user)),
                         film_dir / BACKDROP_FILENAME))

        failures: Dict[str, Exception] = {}
        if not jobs:
            return failures

        with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
            futures = {pool.submit(self._download_image, url, dest): dest for url, dest in jobs}
            for future, dest in futures.items():
                error = future.exception()
                if error is not None:
                    failures[dest.name] = error

        return failures

    def _image_url(self, image_path: str, size: str) -> str:
        return f"{self.image_base_url}{size}{image_path}"

    def _download_image(self, url: str, dest: Path) -> None:
        """Stream url to dest; remove the partial file on any failure"""
        try:
            response = requests.get(url, stream=True, timeout=IMAGE_DOWNLOAD_TIMEOUT)
            try:
                if response.status_code != 200:
                    raise ReelError.network(
                        f"Failed to download {dest.stem}: HTTP {response.status_code}", url,
                        status_code=response.status_code,
                    )
                with open(dest, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
            finally:
                response.close()
        except requests.exceptions.RequestException as e:
            file_helpers.remove_file(dest)
            raise ReelError.network(f"Failed to download {dest.stem}: {e}", url, e) from e
        except (ReelError, OSError):
            file_helpers.remove_file(dest)
            raise

        logger.debug(f"Downloaded {url} -> {dest}")

    # ------------------------------------------------------------------
    # Read / list / delete
    # ------------------------------------------------------------------

    def list_saved_films(self, output_dir=None) -> List[str]:
        """
        Directory names of saved films under the base directory.

        Order is whatever the file system yields; use it for display only.
        A missing base directory is an empty collection.
        """
        base_dir = self.resolve_base_dir(output_dir)
        return [
            name for name in file_helpers.get_directory_contents(base_dir)
            if file_helpers.directory_exists(base_dir / name)
            and file_helpers.file_exists(base_dir / name / FILM_DATA_FILENAME)
        ]

    def get_saved_film(self, film_dir_name: str, output_dir=None) -> Optional[Film]:
        """Parsed data.json of a saved film; None when it does not exist"""
        data_path = self.resolve_base_dir(output_dir) / film_dir_name / FILM_DATA_FILENAME
        if not file_helpers.file_exists(data_path):
            return None

        document = file_helpers.read_json_file(data_path)
        try:
            return Film.from_dict(document)
        except (KeyError, TypeError, ValueError) as e:
            raise ReelError.filesystem(
                f"Failed to get saved film: malformed film record ({e})", data_path, 'read'
            ) from e

    def delete_film(self, film_dir_name: str, output_dir=None) -> None:
        """Remove a saved film directory; deleting a missing film is a no-op"""
        film_dir = self.resolve_base_dir(output_dir) / film_dir_name
        try:
            file_helpers.remove_directory(film_dir)
        except ReelError as e:
            raise ReelError.filesystem(
                f"Failed to delete film: {e}", film_dir, 'delete'
            ) from e
        logger.info(f"Deleted {film_dir}")

    def saved_files(self, film_dir) -> List[Tuple[str, int]]:
        """(file name, size in bytes) for each top-level file in a film directory"""
        film_dir = Path(film_dir)
        files = []
        for name in sorted(file_helpers.get_directory_contents(film_dir)):
            path = film_dir / name
            if file_helpers.file_exists(path):
                files.append((name, file_helpers.get_file_size(path)))
        return files

    def get_storage_stats(self, output_dir=None) -> StorageStats:
        """
        Totals over recognized film directories only.

        Sizes are summed over the top-level files of each film directory
        (no recursion). Directories without data.json are not films, so they
        count towards neither the total nor the average.
        """
        base_dir = self.resolve_base_dir(output_dir)
        film_dirs = self.list_saved_films(base_dir)

        total_size = 0
        for name in film_dirs:
            try:
                total_size += sum(size for _, size in self.saved_files(base_dir / name))
            except ReelError as e:
                raise ReelError.filesystem(
                    f"Failed to get storage stats: {e}", e.path or base_dir, 'stats'
                ) from e

        total_films = len(film_dirs)
        return StorageStats(
            total_films=total_films,
            total_size=total_size,
            average_size=total_size / total_films if total_films else 0,
        )

    # ------------------------------------------------------------------
    # metadata.txt
    # ------------------------------------------------------------------

    @staticmethod
    def generate_metadata_text(film: Film) -> str:
        lines = [
            f"Film: {film.title}",
            f"Original Title: {film.original_title}",
            f"Release Date: {film.release_date}",
            f"Runtime: {film.runtime} minutes",
            f"Rating: {film.vote_average}/10 ({film.vote_count} votes)",
            f"Popularity: {film.popularity}",
            f"Status: {film.status}",
            '',
        ]

        if film.tagline:
            lines += [f'Tagline: "{film.tagline}"', '']

        lines += [
            'Overview:',
            film.overview,
            '',
            'Genres:',
            *[f"- {g.name}" for g in film.genres],
            '',
            'Production Companies:',
            *[f"- {c.name} ({c.origin_country})" if c.origin_country else f"- {c.name}"
              for c in film.production_companies],
            '',
            'Production Countries:',
            *[f"- {c.name}" for c in film.production_countries],
            '',
            'Spoken Languages:',
            *[f"- {l.name} ({l.english_name})" if l.english_name else f"- {l.name}"
              for l in film.spoken_languages],
            '',
        ]

        if film.budget > 0:
            lines.append(f"Budget: ${film.budget:,}")
        if film.revenue > 0:
            lines.append(f"Revenue: ${film.revenue:,}")
        if film.imdb_url:
            lines.append(f"IMDB: {film.imdb_url}")
        if film.homepage:
            lines.append(f"Homepage: {film.homepage}")

        lines += ['', f"Data retrieved on: {utc_timestamp()}"]
        return '\n'.join(lines)
