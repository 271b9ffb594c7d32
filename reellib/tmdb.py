#!/usr/bin/env python3
"""
TMDb API client

Translates search/details requests into TMDb v3 calls and normalizes the
responses into Film / SearchResult records. Missing optional fields get safe
defaults ("Unknown Title", empty overview, zero counts) rather than failing.
"""

import logging
from typing import Dict, List, Optional

import requests

from reellib.constants import (
    DEFAULT_BACKDROP_SIZES, DEFAULT_POSTER_SIZES, REQUEST_TIMEOUT,
    TMDB_BASE_URL, TMDB_IMAGE_BASE_URL,
)
from reellib.errors import ReelError
from reellib.models import (
    Film, Genre, ImageConfig, MovieDetailsParams, ProductionCompany,
    ProductionCountry, SearchParams, SearchResult, SpokenLanguage,
)

logger = logging.getLogger(__name__)


class TMDbClient:
    """Interface to The Movie Database API"""

    def __init__(self, api_key: str, base_url: str = TMDB_BASE_URL, timeout: int = REQUEST_TIMEOUT):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _get(self, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """
        GET {base_url}/{endpoint} and return the decoded JSON payload.

        HTTP errors become an API ReelError with the response status;
        transport errors (timeout, connection refused) use status 500.
        """
        query = {'api_key': self.api_key}
        query.update(params or {})

        try:
            response = requests.get(f"{self.base_url}/{endpoint}", params=query, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else 500
            message = self._status_message(e.response) or str(e)
            logger.warning(f"TMDb API HTTP error on {endpoint}: {status} {message}")
            raise ReelError.api(f"TMDb request failed: {message}", status, endpoint) from e
        except requests.exceptions.Timeout as e:
            logger.warning(f"TMDb API timeout on {endpoint}")
            raise ReelError.api("TMDb request timed out", 500, endpoint) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.debug(f"TMDb API error on {endpoint}: {e}")
            raise ReelError.api(f"TMDb request failed: {e}", 500, endpoint) from e

    @staticmethod
    def _status_message(response) -> Optional[str]:
        """Extract TMDb's status_message from an error response, if any"""
        if response is None:
            return None
        try:
            return response.json().get('status_message')
        except (ValueError, AttributeError):
            return None

    def search_movies(self, params: SearchParams) -> List[SearchResult]:
        """Search films by title; an empty result set is [] (not an error)"""
        query = {
            'query': params.query,
            'page': params.page or 1,
            'include_adult': 'true' if params.include_adult else 'false',
        }
        if params.year is not None:
            query['year'] = params.year
        if params.primary_release_year is not None:
            query['primary_release_year'] = params.primary_release_year

        try:
            data = self._get('search/movie', query)
        except ReelError as e:
            e.details.setdefault('query', params.query)
            raise

        results = data.get('results') or []
        logger.debug(f"TMDb search '{params.query}' page {query['page']}: {len(results)} results")
        return [self._to_search_result(movie) for movie in results]

    def get_movie_details(self, params: MovieDetailsParams) -> Film:
        """Fetch full details for one film id"""
        endpoint = f"movie/{params.id}"
        query = {'language': params.language or 'en-US'}
        if params.append_to_response:
            query['append_to_response'] = ','.join(params.append_to_response)

        movie = self._get(endpoint, query)
        if not movie.get('id'):
            raise ReelError.api('Movie not found', 404, endpoint, id=params.id)

        film = self._to_film(movie)
        logger.info(f"TMDb: movie {film.id} -> '{film.title}' ({film.release_date or 'no date'})")
        return film

    def get_configuration(self) -> ImageConfig:
        """Image base URL and sizes; TMDb defaults when the call fails"""
        try:
            data = self._get('configuration')
        except ReelError as e:
            logger.debug(f"Using default image configuration: {e}")
            return ImageConfig()

        images = data.get('images') or {}
        return ImageConfig(
            base_url=images.get('secure_base_url') or images.get('base_url') or TMDB_IMAGE_BASE_URL,
            poster_sizes=images.get('poster_sizes') or list(DEFAULT_POSTER_SIZES),
            backdrop_sizes=images.get('backdrop_sizes') or list(DEFAULT_BACKDROP_SIZES),
        )

    def build_image_url(self, path: Optional[str], size: str = 'w500',
                        image_config: Optional[ImageConfig] = None) -> Optional[str]:
        if not path:
            return None
        config = image_config or self.get_configuration()
        return f"{config.base_url}{size}{path}"

    def test_connection(self) -> bool:
        """Probe the configuration endpoint; False on any failure"""
        try:
            self._get('configuration')
            return True
        except ReelError as e:
            logger.debug(f"TMDb connection test failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    @staticmethod
    def _to_search_result(movie: Dict) -> SearchResult:
        return SearchResult(
            id=movie.get('id'),
            title=movie.get('title') or 'Unknown Title',
            release_date=movie.get('release_date') or '',
            overview=movie.get('overview') or '',
            vote_average=movie.get('vote_average') or 0,
            vote_count=movie.get('vote_count') or 0,
            popularity=movie.get('popularity') or 0,
            adult=bool(movie.get('adult')),
            video=bool(movie.get('video')),
            poster_path=movie.get('poster_path') or None,
        )

    @staticmethod
    def _to_film(movie: Dict) -> Film:
        title = movie.get('title') or 'Unknown Title'
        return Film(
            id=movie['id'],
            title=title,
            original_title=movie.get('original_title') or title,
            overview=movie.get('overview') or '',
            release_date=movie.get('release_date') or '',
            poster_path=movie.get('poster_path') or None,
            backdrop_path=movie.get('backdrop_path') or None,
            genres=tuple(
                Genre(id=g.get('id'), name=g.get('name', ''))
                for g in movie.get('genres') or []
            ),
            runtime=movie.get('runtime') or 0,
            vote_average=movie.get('vote_average') or 0,
            vote_count=movie.get('vote_count') or 0,
            popularity=movie.get('popularity') or 0,
            status=movie.get('status') or 'Unknown',
            tagline=movie.get('tagline') or '',
            budget=movie.get('budget') or 0,
            revenue=movie.get('revenue') or 0,
            production_companies=tuple(
                ProductionCompany(
                    id=c.get('id'),
                    name=c.get('name', ''),
                    origin_country=c.get('origin_country') or '',
                    logo_path=c.get('logo_path'),
                )
                for c in movie.get('production_companies') or []
            ),
            production_countries=tuple(
                ProductionCountry(iso_3166_1=c.get('iso_3166_1', ''), name=c.get('name', ''))
                for c in movie.get('production_countries') or []
            ),
            spoken_languages=tuple(
                SpokenLanguage(
                    iso_639_1=l.get('iso_639_1', ''),
                    name=l.get('name', ''),
                    english_name=l.get('english_name') or '',
                )
                for l in movie.get('spoken_languages') or []
            ),
            adult=bool(movie.get('adult')),
            video=bool(movie.get('video')),
            original_language=movie.get('original_language') or 'en',
            imdb_id=movie.get('imdb_id') or None,
            homepage=movie.get('homepage') or None,
        )
