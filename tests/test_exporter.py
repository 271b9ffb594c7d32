#!/usr/bin/env python3
"""Test suite for collection export (json / csv / txt)"""

import csv
import io
import json
import logging
import pytest
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent))

from reellib.config_manager import ConfigManager
from reellib.errors import ErrorKind, ReelError
from reellib.exporter import (
    ExportService, export_filename, extract_film_name, film_to_csv,
    film_to_json, film_to_text, generate_summary,
)
from reellib.models import ExportOptions, Film, Genre
from reellib.storage import StorageService


def make_film(film_id, title, **overrides):
    values = dict(
        id=film_id,
        title=title,
        original_title=title,
        overview='Plot with "quotes", commas',
        release_date='1999-03-30',
        genres=(Genre(28, 'Action'), Genre(878, 'Science Fiction')),
        runtime=136,
        vote_average=8.2,
        vote_count=100,
        budget=1000,
        revenue=2000,
    )
    values.update(overrides)
    return Film(**values)


@pytest.fixture
def storage(tmp_path):
    manager = ConfigManager(tmp_path / 'config', environ={})
    manager.update_user_config(default_output_dir=str(tmp_path / 'films'), download_images=False)
    return StorageService(manager)


@pytest.fixture
def service(storage):
    return ExportService(storage)


class TestNames:
    """Test directory-name and export-file naming"""

    def test_extract_film_name(self):
        assert extract_film_name('603-The-Matrix') == 'The-Matrix'

    def test_extract_keeps_hyphenated_titles(self):
        assert extract_film_name('12-Spider-Man-2') == 'Spider-Man-2'

    def test_extract_without_id_prefix(self):
        assert extract_film_name('random-folder') == 'random-folder'

    def test_export_filename(self):
        assert export_filename('The Matrix: Reloaded') == 'The-Matrix-Reloaded'
        assert export_filename('???') == 'Untitled'
        assert len(export_filename('z' * 300)) == 100

    def test_export_filename_fits_in_bytes(self):
        name = export_filename('\u6620' * 100)
        assert len((name + '-images').encode('utf-8')) <= 255


class TestRenderers:
    """Test per-film renderers"""

    def test_json_is_data_json_shape(self):
        document = json.loads(film_to_json(make_film(603, 'The Matrix')))
        assert document['id'] == 603
        assert document['originalTitle'] == 'The Matrix'

    def test_csv_header_and_row(self):
        text = film_to_csv(make_film(603, 'The Matrix'))
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0][0] == 'Title'
        assert len(rows) == 2
        assert rows[1][0] == 'The Matrix'
        assert rows[1][6] == 'Plot with "quotes", commas'
        assert rows[1][7] == 'Action; Science Fiction'

    def test_csv_escapes_quotes(self):
        text = film_to_csv(make_film(1, 'Say "Hi"'))
        assert '"Say ""Hi"""' in text

    def test_text_rendering(self):
        text = film_to_text(make_film(603, 'The Matrix'))
        assert text.startswith('Film: The Matrix')
        assert 'Genres: Action, Science Fiction' in text
        assert 'IMDB: N/A' in text


class TestSummary:
    """Test generate_summary() for each format"""

    def test_json_summary(self):
        document = json.loads(generate_summary(['603-The-Matrix', '1-Heat'], 'json'))
        assert document['totalFilms'] == 2
        assert document['films'] == ['The-Matrix', 'Heat']
        assert document['exportDate'].endswith('Z')

    def test_csv_summary(self):
        text = generate_summary(['603-The-Matrix', '1-Heat'], 'csv')
        assert text.splitlines() == ['Title', 'The-Matrix', 'Heat']

    def test_txt_summary(self):
        text = generate_summary(['603-The-Matrix'], 'txt')
        assert 'Total Films: 1' in text
        assert '1. The-Matrix' in text

    def test_unknown_format(self):
        with pytest.raises(ReelError) as exc_info:
            generate_summary([], 'xml')
        assert exc_info.value.kind is ErrorKind.VALIDATION


class TestExportService:
    """Test ExportService.export() end to end"""

    def test_csv_export_two_films(self, storage, service, tmp_path):
        storage.save_film(make_film(603, 'The Matrix'))
        storage.save_film(make_film(1, 'Heat'))
        destination = tmp_path / 'out'

        exported = service.export(ExportOptions(destination, 'csv'))

        assert exported[0] == 'films-summary.csv'
        assert sorted(exported[1:]) == ['Heat.csv', 'The-Matrix.csv']
        summary = (destination / 'films-summary.csv').read_text(encoding='utf-8')
        assert len(summary.splitlines()) == 3
        assert summary.splitlines()[0] == 'Title'
        assert (destination / 'The-Matrix.csv').is_file()
        assert (destination / 'Heat.csv').is_file()

    def test_empty_collection_writes_nothing(self, service, tmp_path):
        destination = tmp_path / 'out'
        assert service.export(ExportOptions(destination, 'json')) == []
        assert not destination.exists()

    def test_invalid_format_rejected_before_work(self, storage, service, tmp_path):
        storage.save_film(make_film(603, 'The Matrix'))
        destination = tmp_path / 'out'
        with pytest.raises(ReelError) as exc_info:
            service.export(ExportOptions(destination, 'xml'))
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert not destination.exists()

    def test_format_is_case_insensitive(self, storage, service, tmp_path):
        storage.save_film(make_film(603, 'The Matrix'))
        exported = service.export(ExportOptions(tmp_path / 'out', 'TXT'))
        assert 'The-Matrix.txt' in exported

    def test_json_export_with_images(self, storage, service, tmp_path):
        path = storage.save_film(make_film(603, 'The Matrix'))
        (path / 'poster.jpg').write_bytes(b'poster')
        destination = tmp_path / 'out'

        exported = service.export(ExportOptions(destination, 'json', include_images=True))

        assert 'The-Matrix-images/poster.jpg' in exported
        assert (destination / 'The-Matrix-images' / 'poster.jpg').read_bytes() == b'poster'
        assert not (destination / 'The-Matrix-images' / 'backdrop.jpg').exists()

    def test_images_ignored_for_csv(self, storage, service, tmp_path):
        path = storage.save_film(make_film(603, 'The Matrix'))
        (path / 'poster.jpg').write_bytes(b'poster')
        destination = tmp_path / 'out'
        service.export(ExportOptions(destination, 'csv', include_images=True))
        assert not (destination / 'The-Matrix-images').exists()

    def test_corrupt_film_skipped(self, storage, service, tmp_path):
        storage.save_film(make_film(603, 'The Matrix'))
        broken = tmp_path / 'films' / '2-Broken'
        broken.mkdir()
        (broken / 'data.json').write_text('{oops', encoding='utf-8')

        exported = service.export(ExportOptions(tmp_path / 'out', 'json'))
        assert 'The-Matrix.json' in exported
        assert len(exported) == 2

    def test_wrong_typed_film_skipped(self, storage, service, tmp_path):
        storage.save_film(make_film(603, 'The Matrix'))
        odd = tmp_path / 'films' / '1-Odd'
        odd.mkdir()
        (odd / 'data.json').write_text('{"id": 1, "title": "Odd", "budget": "n/a"}', encoding='utf-8')

        exported = service.export(ExportOptions(tmp_path / 'out', 'txt'))
        assert exported[0] == 'films-summary.txt'
        assert 'The-Matrix.txt' in exported
        assert 'Odd.txt' not in exported

    def test_unrenderable_film_skipped(self, storage, service, tmp_path, caplog):
        storage.save_film(make_film(603, 'The Matrix'))
        storage.save_film(make_film(2, 'Broken'))

        def fake_text(film):
            if film.title == 'Broken':
                raise ValueError("Unknown format code ',' for object of type 'str'")
            return film_to_text(film)

        with caplog.at_level(logging.WARNING):
            with patch.dict('reellib.exporter._FILM_RENDERERS', {'txt': fake_text}):
                exported = service.export(ExportOptions(tmp_path / 'out', 'txt'))
        assert 'The-Matrix.txt' in exported
        assert 'Broken.txt' not in exported
        assert '2-Broken' in caplog.text

    def test_explicit_source_dir(self, storage, service, tmp_path):
        source = tmp_path / 'other'
        storage.save_film(make_film(1, 'Heat'), source)
        exported = service.export(ExportOptions(tmp_path / 'out', 'txt'), source)
        assert exported == ['films-summary.txt', 'Heat.txt']
