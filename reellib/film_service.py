#!/usr/bin/env python3
"""
Film service: validated search/details calls on top of TMDbClient
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from reellib.config_manager import ConfigManager
from reellib.constants import EARLIEST_FILM_YEAR, IMAGE_SIZES_BY_QUALITY, MIN_QUERY_LENGTH
from reellib.errors import ReelError
from reellib.models import Film, MovieDetailsParams, SearchParams, SearchResult
from reellib.tmdb import TMDbClient

logger = logging.getLogger(__name__)


class FilmService:
    """Search and fetch films, applying user preferences"""

    def __init__(self, client: TMDbClient, config_manager: Optional[ConfigManager] = None):
        self.client = client
        self.config_manager = config_manager or ConfigManager()

    @classmethod
    def from_api_key(cls, api_key: str, config_manager: Optional[ConfigManager] = None) -> 'FilmService':
        return cls(TMDbClient(api_key), config_manager)

    @staticmethod
    def validate_search_params(params: SearchParams) -> None:
        """
        Reject bad input before calling out.

        Rules:
        - query is required and at least two characters (ignoring whitespace)
        - year, when given, is within [1888, current year + 1]
        - page is a positive integer
        """
        query = (params.query or '').strip()
        if not query:
            raise ReelError.api('Search query is required', 400, 'validation', field='query')
        if len(query) < MIN_QUERY_LENGTH:
            raise ReelError.api(
                f"Search query must be at least {MIN_QUERY_LENGTH} characters", 400, 'validation',
                field='query', value=params.query,
            )

        latest_year = date.today().year + 1
        if params.year is not None and not (EARLIEST_FILM_YEAR <= params.year <= latest_year):
            raise ReelError.api(
                f"Invalid year specified: {params.year} (expected {EARLIEST_FILM_YEAR}-{latest_year})",
                400, 'validation', field='year', value=params.year,
            )

        if params.page is not None and params.page < 1:
            raise ReelError.api('Page must be 1 or greater', 400, 'validation',
                                field='page', value=params.page)

    def search_films(self, params: SearchParams) -> List[SearchResult]:
        self.validate_search_params(params)
        logger.info(f"Searching TMDb for '{params.query}'")
        results = self.client.search_movies(params)
        logger.info(f"Found {len(results)} film(s)")
        return results

    def get_film_details(self, film_id: int, language: Optional[str] = None) -> Film:
        if language is None:
            language = self.config_manager.load_config().user.language
        logger.info(f"Fetching details for film {film_id}")
        return self.client.get_movie_details(MovieDetailsParams(id=film_id, language=language))

    def test_connection(self) -> bool:
        connected = self.client.test_connection()
        if connected:
            logger.info("TMDb API connection successful")
        else:
            logger.warning("TMDb API connection failed")
        return connected

    def get_film_images(self, film: Film) -> Dict[str, str]:
        """Poster/backdrop URLs at the configured quality; {} if unavailable"""
        try:
            quality = self.config_manager.load_config().user.image_quality
            image_config = self.client.get_configuration()
        except ReelError as e:
            logger.debug(f"Could not build image URLs: {e}")
            return {}

        poster_size, backdrop_size = IMAGE_SIZES_BY_QUALITY[quality]
        images = {}
        if film.poster_path:
            images['poster'] = f"{image_config.base_url}{poster_size}{film.poster_path}"
        if film.backdrop_path:
            images['backdrop'] = f"{image_config.base_url}{backdrop_size}{film.backdrop_path}"
        return images

    @staticmethod
    def format_film_for_display(film: Film) -> str:
        lines = [
            f"📽️  {film.title}",
            f"📅 Release Date: {film.release_date or 'Unknown'}",
            f"⭐ Rating: {film.vote_average}/10 ({film.vote_count} votes)",
            f"⏱️  Runtime: {film.runtime} minutes",
            f"📝 Overview: {film.overview or 'No overview available'}",
            f"🎭 Genres: {', '.join(film.genre_names)}",
            f"💰 Budget: ${film.budget:,}",
            f"💵 Revenue: ${film.revenue:,}",
            f"🏢 Production Companies: {', '.join(c.name for c in film.production_companies)}",
            f"🌍 Countries: {', '.join(c.name for c in film.production_countries)}",
            f"🗣️  Languages: {', '.join(l.name for l in film.spoken_languages)}",
        ]

        if film.tagline:
            lines.insert(2, f'💬 Tagline: "{film.tagline}"')
        if film.imdb_url:
            lines.append(f"🔗 IMDB: {film.imdb_url}")
        if film.homepage:
            lines.append(f"🌐 Homepage: {film.homepage}")

        return '\n'.join(lines)
