#!/usr/bin/env python3
"""
Export the saved film collection to JSON, CSV or plain text

Output, into the destination directory:
    films-summary.<ext>          one aggregate file
    <sanitized title>.<ext>      one file per film
    <sanitized title>-images/    poster/backdrop copies (json + include_images only)
"""

import csv
import io
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from reellib import file_helpers
from reellib.constants import (
    CSV_EXPORT_HEADERS, EXPORT_FORMATS, EXPORT_SUMMARY_STEM, IMAGE_FILENAMES,
    MAX_EXPORT_FILENAME_LENGTH, MAX_FILENAME_BYTES,
)
from reellib.errors import ReelError
from reellib.models import ExportOptions, Film, utc_timestamp
from reellib.storage import StorageService

logger = logging.getLogger(__name__)


def extract_film_name(film_dir_name: str) -> str:
    """'603-The-Matrix' -> 'The-Matrix' (directory name without the id prefix)"""
    prefix, sep, rest = film_dir_name.partition('-')
    if sep and prefix.isdigit() and rest:
        return rest
    return film_dir_name


def export_filename(title: str) -> str:
    # Leave room for the longest suffix added to the stem ("-images")
    max_bytes = MAX_FILENAME_BYTES - len('-images')
    return file_helpers.sanitize_filename(title, MAX_EXPORT_FILENAME_LENGTH, max_bytes) or 'Untitled'


def film_to_json(film: Film) -> str:
    return json.dumps(film.to_dict(), indent=2, ensure_ascii=False)


def film_to_csv(film: Film) -> str:
    """Header row plus one data row; text fields quoted, quotes doubled"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator='\n')
    writer.writerow(CSV_EXPORT_HEADERS)
    writer.writerow([
        film.title,
        film.original_title,
        film.release_date,
        film.runtime,
        film.vote_average,
        film.vote_count,
        film.overview,
        '; '.join(film.genre_names),
        film.budget,
        film.revenue,
    ])
    return buffer.getvalue()


def film_to_text(film: Film) -> str:
    return '\n'.join([
        f"Film: {film.title}",
        f"Original Title: {film.original_title}",
        f"Release Date: {film.release_date}",
        f"Runtime: {film.runtime} minutes",
        f"Rating: {film.vote_average}/10 ({film.vote_count} votes)",
        f"Popularity: {film.popularity}",
        f"Status: {film.status}",
        '',
        'Overview:',
        film.overview,
        '',
        f"Genres: {', '.join(film.genre_names)}",
        '',
        f"Production Companies: {', '.join(c.name for c in film.production_companies)}",
        '',
        f"Production Countries: {', '.join(c.name for c in film.production_countries)}",
        '',
        f"Spoken Languages: {', '.join(l.name for l in film.spoken_languages)}",
        '',
        f"Budget: ${film.budget:,}",
        f"Revenue: ${film.revenue:,}",
        '',
        f"IMDB: {film.imdb_url or 'N/A'}",
        f"Homepage: {film.homepage or 'N/A'}",
        '',
        f"Exported on: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
    ])


def generate_summary(film_dir_names: List[str], fmt: str) -> str:
    names = [extract_film_name(d) for d in film_dir_names]

    if fmt == 'json':
        return json.dumps({
            'totalFilms': len(names),
            'films': names,
            'exportDate': utc_timestamp(),
        }, indent=2, ensure_ascii=False)

    if fmt == 'csv':
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        writer.writerow(['Title'])
        writer.writerows([name] for name in names)
        return buffer.getvalue()

    if fmt == 'txt':
        lines = ['Film Export Summary', '=' * 30, f"Total Films: {len(names)}", '']
        lines += [f"{i}. {name}" for i, name in enumerate(names, 1)]
        lines += ['', f"Exported on: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"]
        return '\n'.join(lines)

    raise ReelError.validation(f"Unsupported export format: {fmt}", 'format', fmt)


_FILM_RENDERERS = {
    'json': film_to_json,
    'csv': film_to_csv,
    'txt': film_to_text,
}


class ExportService:
    """Project the saved collection into export files"""

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or StorageService()

    @staticmethod
    def validate_options(options: ExportOptions) -> None:
        if not options.is_supported:
            raise ReelError.validation(
                f"Invalid format '{options.format}'. Supported formats: {', '.join(EXPORT_FORMATS)}",
                'format', options.format,
            )

    def export(self, options: ExportOptions, source_dir=None) -> List[str]:
        """
        Export every saved film; return the written paths relative to the
        destination. An empty collection writes nothing and returns [].

        One unreadable film is skipped (and logged) without aborting the rest.
        """
        self.validate_options(options)

        film_dirs = self.storage.list_saved_films(source_dir)
        if not film_dirs:
            logger.info("No saved films to export")
            return []

        destination = file_helpers.ensure_directory(options.destination)
        ext = options.format
        exported: List[str] = []

        summary_name = f"{EXPORT_SUMMARY_STEM}.{ext}"
        file_helpers.write_text_file(destination / summary_name, generate_summary(film_dirs, ext))
        exported.append(summary_name)

        base_dir = self.storage.resolve_base_dir(source_dir)
        render = _FILM_RENDERERS[ext]

        for film_dir in film_dirs:
            try:
                film = self.storage.get_saved_film(film_dir, base_dir)
            except ReelError as e:
                logger.warning(f"Skipping {film_dir}: {e}")
                continue
            if film is None:
                continue

            try:
                content = render(film)
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping {film_dir}: cannot render film record ({e})")
                continue

            name = export_filename(film.title)
            file_helpers.write_text_file(destination / f"{name}.{ext}", content)
            exported.append(f"{name}.{ext}")

            if options.include_images and ext == 'json':
                exported += self._copy_images(base_dir / film_dir, destination / f"{name}-images")

        logger.info(f"Exported {len(exported)} file(s) to {destination}")
        return exported

    @staticmethod
    def _copy_images(source_dir: Path, image_dir: Path) -> List[str]:
        copied = []
        for image_name in IMAGE_FILENAMES:
            source = source_dir / image_name
            if file_helpers.file_exists(source):
                file_helpers.copy_file(source, image_dir / image_name)
                copied.append(f"{image_dir.name}/{image_name}")
        return copied
