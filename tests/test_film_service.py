#!/usr/bin/env python3
"""Test suite for FilmService validation and preference handling"""

import pytest
import sys
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).parent.parent))

from reellib.config_manager import ConfigManager
from reellib.errors import ErrorKind, ReelError
from reellib.film_service import FilmService
from reellib.models import Film, Genre, ImageConfig, SearchParams, SearchResult


@pytest.fixture
def config_manager(tmp_path):
    return ConfigManager(tmp_path / 'config', environ={})


@pytest.fixture
def client():
    mock = MagicMock()
    mock.search_movies.return_value = [SearchResult(id=603, title='The Matrix')]
    mock.get_configuration.return_value = ImageConfig()
    return mock


@pytest.fixture
def service(client, config_manager):
    return FilmService(client, config_manager)


class TestValidation:
    """Test validate_search_params() rules"""

    def test_single_character_rejected(self, service, client):
        with pytest.raises(ReelError) as exc_info:
            service.search_films(SearchParams(query='a'))
        assert exc_info.value.kind is ErrorKind.API
        assert exc_info.value.status_code == 400
        assert exc_info.value.endpoint == 'validation'
        client.search_movies.assert_not_called()

    def test_two_characters_accepted(self, service, client):
        results = service.search_films(SearchParams(query='ab'))
        assert results[0].id == 603
        client.search_movies.assert_called_once()

    def test_blank_query_rejected(self, service):
        with pytest.raises(ReelError):
            service.search_films(SearchParams(query='   '))

    def test_padded_single_character_rejected(self, service):
        with pytest.raises(ReelError):
            service.search_films(SearchParams(query=' a '))

    @pytest.mark.parametrize('year', [1887, date.today().year + 2])
    def test_year_out_of_range(self, service, year):
        with pytest.raises(ReelError) as exc_info:
            service.search_films(SearchParams(query='Heat', year=year))
        assert exc_info.value.details['field'] == 'year'

    @pytest.mark.parametrize('year', [1888, date.today().year + 1])
    def test_year_bounds_inclusive(self, service, year):
        service.search_films(SearchParams(query='Heat', year=year))

    def test_page_must_be_positive(self, service):
        with pytest.raises(ReelError):
            service.search_films(SearchParams(query='Heat', page=0))


class TestDetailsAndImages:
    """Test preference-driven details and image URLs"""

    def test_details_use_configured_language(self, service, client, config_manager):
        config_manager.update_user_config(language='de-DE')
        service.get_film_details(603)
        params = client.get_movie_details.call_args.args[0]
        assert params.id == 603
        assert params.language == 'de-DE'

    def test_explicit_language_wins(self, service, client):
        service.get_film_details(603, 'fr-FR')
        assert client.get_movie_details.call_args.args[0].language == 'fr-FR'

    def test_image_urls_for_quality(self, service, config_manager):
        config_manager.update_user_config(image_quality='low')
        film = Film(id=1, title='Heat', poster_path='/p.jpg', backdrop_path='/b.jpg')
        images = service.get_film_images(film)
        assert images == {
            'poster': 'https://image.tmdb.org/t/p/w185/p.jpg',
            'backdrop': 'https://image.tmdb.org/t/p/w300/b.jpg',
        }

    def test_no_image_paths(self, service):
        assert service.get_film_images(Film(id=1, title='Heat')) == {}

    def test_connection_delegates(self, service, client):
        client.test_connection.return_value = False
        assert service.test_connection() is False


class TestDisplay:
    """Test format_film_for_display()"""

    def test_display_lines(self):
        film = Film(id=603, title='The Matrix', tagline='Free your mind',
                    genres=(Genre(28, 'Action'),), budget=63000000, imdb_id='tt0133093')
        text = FilmService.format_film_for_display(film)
        lines = text.splitlines()
        assert lines[0] == '📽️  The Matrix'
        assert lines[2] == '💬 Tagline: "Free your mind"'
        assert '💰 Budget: $63,000,000' in lines
        assert '🎭 Genres: Action' in lines
        assert lines[-1] == '🔗 IMDB: https://www.imdb.com/title/tt0133093'

    def test_unknown_date_and_empty_overview(self):
        text = FilmService.format_film_for_display(Film(id=1, title='X'))
        assert '📅 Release Date: Unknown' in text
        assert '📝 Overview: No overview available' in text
