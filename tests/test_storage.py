#!/usr/bin/env python3
"""Test suite for local film storage"""

import json
import logging
import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

sys.path.insert(0, str(Path(__file__).parent.parent))

from reellib.config_manager import ConfigManager
from reellib.errors import ErrorKind, ReelError
from reellib.models import Film, Genre, ProductionCompany, UserConfig
from reellib.storage import StorageService, backdrop_size_for, poster_size_for


def make_film(film_id=603, title='The Matrix', **overrides):
    values = dict(
        id=film_id,
        title=title,
        original_title=title,
        overview='A hacker learns the truth.',
        release_date='1999-03-30',
        poster_path='/poster.jpg',
        backdrop_path='/backdrop.jpg',
        genres=(Genre(28, 'Action'), Genre(878, 'Science Fiction')),
        runtime=136,
        vote_average=8.2,
        vote_count=24000,
        popularity=80.5,
        status='Released',
        tagline='Welcome to the Real World.',
        budget=63000000,
        revenue=463517383,
        production_companies=(ProductionCompany(79, 'Village Roadshow Pictures', 'US'),),
        imdb_id='tt0133093',
    )
    values.update(overrides)
    return Film(**values)


def image_response(status=200, chunks=(b'img',)):
    response = MagicMock()
    response.status_code = status
    response.iter_content.return_value = list(chunks)
    return response


@pytest.fixture
def config_manager(tmp_path):
    manager = ConfigManager(tmp_path / 'config', environ={})
    manager.update_user_config(default_output_dir=str(tmp_path / 'films'), download_images=False)
    return manager


@pytest.fixture
def storage(config_manager):
    return StorageService(config_manager)


@pytest.fixture
def films_dir(tmp_path):
    return tmp_path / 'films'


class TestImageSizes:
    """Test poster/backdrop size selection"""

    def test_quality_tiers(self):
        assert poster_size_for(UserConfig(image_quality='low', max_image_size='original')) == 'w185'
        assert poster_size_for(UserConfig(image_quality='medium')) == 'w500'
        assert backdrop_size_for(UserConfig(image_quality='high')) == 'w1280'

    def test_max_image_size_caps_poster(self):
        user = UserConfig(image_quality='high', max_image_size='w342')
        assert poster_size_for(user) == 'w342'


class TestSaveFilm:
    """Test save_film() layout and failure handling"""

    def test_save_creates_directory_and_files(self, storage, films_dir):
        path = storage.save_film(make_film())
        assert path == (films_dir / '603-The-Matrix').resolve()
        assert (path / 'data.json').is_file()
        assert (path / 'metadata.txt').is_file()

    def test_returned_path_is_absolute(self, storage):
        assert storage.save_film(make_film()).is_absolute()

    def test_explicit_output_dir_wins(self, storage, tmp_path):
        other = tmp_path / 'elsewhere'
        path = storage.save_film(make_film(), other)
        assert path.parent == other.resolve()

    def test_data_json_uses_camel_case(self, storage):
        path = storage.save_film(make_film())
        document = json.loads((path / 'data.json').read_text(encoding='utf-8'))
        assert document['originalTitle'] == 'The Matrix'
        assert document['releaseDate'] == '1999-03-30'
        assert document['genres'][0] == {'id': 28, 'name': 'Action'}

    def test_resave_overwrites(self, storage, films_dir):
        storage.save_film(make_film(runtime=100))
        storage.save_film(make_film(runtime=136))
        assert storage.list_saved_films() == ['603-The-Matrix']
        assert storage.get_saved_film('603-The-Matrix').runtime == 136

    def test_same_title_different_ids(self, storage):
        storage.save_film(make_film(1, 'Heat'))
        storage.save_film(make_film(2, 'Heat'))
        assert sorted(storage.list_saved_films()) == ['1-Heat', '2-Heat']

    def test_unsafe_title_sanitized(self, storage):
        path = storage.save_film(make_film(7, 'What/If?'))
        assert path.name == '7-What-If'

    def test_unwritable_base_raises_save_error(self, storage, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a directory')
        with pytest.raises(ReelError) as exc_info:
            storage.save_film(make_film(), blocker)
        assert exc_info.value.kind is ErrorKind.FILESYSTEM
        assert exc_info.value.operation == 'save'

    def test_metadata_text_content(self, storage):
        path = storage.save_film(make_film())
        text = (path / 'metadata.txt').read_text(encoding='utf-8')
        assert text.startswith('Film: The Matrix')
        assert 'Tagline: "Welcome to the Real World."' in text
        assert '- Village Roadshow Pictures (US)' in text
        assert 'Budget: $63,000,000' in text
        assert 'IMDB: https://www.imdb.com/title/tt0133093' in text
        assert 'Data retrieved on:' in text


class TestImageDownloads:
    """Test best-effort image downloads"""

    @pytest.fixture
    def downloading(self, config_manager):
        config_manager.update_user_config(download_images=True)
        return StorageService(config_manager)

    def test_downloads_poster_and_backdrop(self, downloading):
        with patch('reellib.storage.requests.get', return_value=image_response()) as mock_get:
            path = downloading.save_film(make_film())
        assert (path / 'poster.jpg').read_bytes() == b'img'
        assert (path / 'backdrop.jpg').read_bytes() == b'img'
        urls = sorted(call.args[0] for call in mock_get.call_args_list)
        assert urls == [
            'https://image.tmdb.org/t/p/w500/poster.jpg',
            'https://image.tmdb.org/t/p/w780/backdrop.jpg',
        ]

    def test_failed_download_does_not_fail_save(self, downloading, caplog):
        def fake_get(url, **kwargs):
            if 'poster' in url:
                return image_response(status=404)
            return image_response()

        with caplog.at_level(logging.WARNING):
            with patch('reellib.storage.requests.get', side_effect=fake_get):
                path = downloading.save_film(make_film())

        assert (path / 'data.json').is_file()
        assert not (path / 'poster.jpg').exists()
        assert (path / 'backdrop.jpg').is_file()
        assert 'poster.jpg' in caplog.text

    def test_connection_error_removes_partial_file(self, downloading):
        with patch('reellib.storage.requests.get',
                   side_effect=requests.exceptions.ConnectionError('refused')):
            path = downloading.save_film(make_film())
        assert sorted(p.name for p in path.iterdir()) == ['data.json', 'metadata.txt']

    def test_missing_image_paths_skip_download(self, downloading):
        with patch('reellib.storage.requests.get') as mock_get:
            downloading.save_film(make_film(poster_path=None, backdrop_path=None))
        mock_get.assert_not_called()

    def test_download_disabled(self, storage):
        with patch('reellib.storage.requests.get') as mock_get:
            storage.save_film(make_film())
        mock_get.assert_not_called()

    def test_failures_reported_per_file(self, storage, tmp_path):
        film_dir = tmp_path / 'film'
        film_dir.mkdir()
        with patch('reellib.storage.requests.get', return_value=image_response(status=500)):
            failures = storage.download_film_images(make_film(), film_dir, UserConfig())
        assert set(failures) == {'poster.jpg', 'backdrop.jpg'}
        assert all(e.kind is ErrorKind.NETWORK for e in failures.values())


class TestReadListDelete:
    """Test list_saved_films()/get_saved_film()/delete_film()"""

    def test_round_trip(self, storage):
        film = make_film()
        path = storage.save_film(film)
        assert storage.get_saved_film(path.name) == film

    def test_empty_collection(self, storage):
        assert storage.list_saved_films() == []

    def test_directories_without_data_json_ignored(self, storage, films_dir):
        storage.save_film(make_film())
        (films_dir / 'random-folder').mkdir()
        (films_dir / 'notes.txt').write_text('x')
        assert storage.list_saved_films() == ['603-The-Matrix']

    def test_get_missing_film_is_none(self, storage):
        assert storage.get_saved_film('999-Nothing') is None

    def test_corrupt_data_json_raises(self, storage, films_dir):
        film_dir = films_dir / '1-Broken'
        film_dir.mkdir(parents=True)
        (film_dir / 'data.json').write_text('{oops', encoding='utf-8')
        with pytest.raises(ReelError) as exc_info:
            storage.get_saved_film('1-Broken')
        assert exc_info.value.kind is ErrorKind.FILESYSTEM

    def test_non_film_document_raises(self, storage, films_dir):
        film_dir = films_dir / '1-Odd'
        film_dir.mkdir(parents=True)
        (film_dir / 'data.json').write_text('{"title": "no id"}', encoding='utf-8')
        with pytest.raises(ReelError):
            storage.get_saved_film('1-Odd')

    @pytest.mark.parametrize('document', [
        '{"id": 1, "title": "Odd", "genres": ["Drama"]}',
        '{"id": 1, "title": "Odd", "productionCompanies": [42]}',
        '{"id": 1, "title": "Odd", "genres": "Drama"}',
        '{"id": 1, "title": "Odd", "budget": "n/a"}',
        '{"id": 1, "title": "Odd", "runtime": true}',
        '{"id": 1, "title": ["Odd"]}',
    ])
    def test_wrong_shaped_fields_raise_filesystem_error(self, storage, films_dir, document):
        film_dir = films_dir / '1-Odd'
        film_dir.mkdir(parents=True)
        (film_dir / 'data.json').write_text(document, encoding='utf-8')
        with pytest.raises(ReelError) as exc_info:
            storage.get_saved_film('1-Odd')
        assert exc_info.value.kind is ErrorKind.FILESYSTEM
        assert exc_info.value.operation == 'read'

    def test_null_optional_fields_default(self, storage, films_dir):
        film_dir = films_dir / '1-Sparse'
        film_dir.mkdir(parents=True)
        (film_dir / 'data.json').write_text(
            '{"id": 1, "title": "Sparse", "overview": null, "runtime": null, "posterPath": null}',
            encoding='utf-8',
        )
        film = storage.get_saved_film('1-Sparse')
        assert film.overview == ''
        assert film.runtime == 0
        assert film.poster_path is None

    def test_delete(self, storage):
        path = storage.save_film(make_film())
        storage.delete_film(path.name)
        assert not path.exists()
        assert storage.list_saved_films() == []

    def test_delete_missing_is_noop(self, storage):
        storage.delete_film('999-Nothing')


class TestStorageStats:
    """Test get_storage_stats() totals"""

    def test_empty_stats(self, storage):
        stats = storage.get_storage_stats()
        assert stats.total_films == 0
        assert stats.total_size == 0
        assert stats.average_size == 0

    def test_totals(self, storage):
        a = storage.save_film(make_film(1, 'Heat'))
        b = storage.save_film(make_film(2, 'Ronin'))
        expected = sum(p.stat().st_size for d in (a, b) for p in d.iterdir())

        stats = storage.get_storage_stats()
        assert stats.total_films == 2
        assert stats.total_size == expected
        assert stats.average_size == expected / 2

    def test_unrecognized_directories_not_counted(self, storage, films_dir):
        storage.save_film(make_film())
        junk = films_dir / 'junk'
        junk.mkdir()
        (junk / 'big.bin').write_bytes(b'x' * 10000)
        assert storage.get_storage_stats().total_films == 1
        assert storage.get_storage_stats().total_size < 10000

    def test_saved_files_sorted_with_sizes(self, storage):
        path = storage.save_film(make_film())
        names = [name for name, _ in storage.saved_files(path)]
        assert names == ['data.json', 'metadata.txt']
