#!/usr/bin/env python3
"""
Data containers for film metadata, search parameters and configuration

Film records are frozen: a saved film is a point-in-time snapshot and is
never edited in place. ``to_dict()`` / ``from_dict()`` use the camelCase keys
of the on-disk JSON documents (data.json, config.json).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from reellib.constants import (
    DEFAULT_APP_CONFIG, DEFAULT_APPEND_TO_RESPONSE, DEFAULT_BACKDROP_SIZES,
    DEFAULT_POSTER_SIZES, DEFAULT_USER_CONFIG, EXPORT_FORMATS, TMDB_IMAGE_BASE_URL,
)


def utc_timestamp() -> str:
    """Current time as ISO-8601 UTC with millisecond precision ('...T12:00:00.000Z')"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _record(data: Any, kind: str) -> Dict:
    if not isinstance(data, dict):
        raise TypeError(f"{kind} entry must be an object, got {type(data).__name__}")
    return data


def _number(data: Dict, key: str, default: float = 0) -> Any:
    value = data.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"'{key}' must be a number, got {value!r}")
    return value


def _text(data: Dict, key: str, default: str = '') -> str:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string, got {value!r}")
    return value


def _optional_text(data: Dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string or null, got {value!r}")
    return value


def _records(data: Dict, key: str) -> List[Dict]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise TypeError(f"'{key}' must be a list, got {type(value).__name__}")
    return [_record(item, key) for item in value]


@dataclass(frozen=True)
class Genre:
    id: int
    name: str

    def to_dict(self) -> Dict:
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict) -> 'Genre':
        return cls(id=data.get('id'), name=_text(data, 'name'))


@dataclass(frozen=True)
class ProductionCompany:
    id: int
    name: str
    origin_country: str = ''
    logo_path: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'logoPath': self.logo_path,
            'originCountry': self.origin_country,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ProductionCompany':
        return cls(
            id=data.get('id'),
            name=_text(data, 'name'),
            origin_country=_text(data, 'originCountry'),
            logo_path=_optional_text(data, 'logoPath'),
        )


@dataclass(frozen=True)
class ProductionCountry:
    iso_3166_1: str
    name: str

    def to_dict(self) -> Dict:
        return {'iso31661': self.iso_3166_1, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict) -> 'ProductionCountry':
        return cls(iso_3166_1=_text(data, 'iso31661'), name=_text(data, 'name'))


@dataclass(frozen=True)
class SpokenLanguage:
    iso_639_1: str
    name: str
    english_name: str = ''

    def to_dict(self) -> Dict:
        return {'englishName': self.english_name, 'iso6391': self.iso_639_1, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict) -> 'SpokenLanguage':
        return cls(
            iso_639_1=_text(data, 'iso6391'),
            name=_text(data, 'name'),
            english_name=_text(data, 'englishName'),
        )


@dataclass(frozen=True)
class Film:
    """Normalized film metadata record (canonical content of data.json)"""
    id: int
    title: str
    original_title: str = ''
    overview: str = ''
    release_date: str = ''
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    genres: Tuple[Genre, ...] = ()
    runtime: int = 0
    vote_average: float = 0
    vote_count: int = 0
    popularity: float = 0
    status: str = 'Unknown'
    tagline: str = ''
    budget: int = 0
    revenue: int = 0
    production_companies: Tuple[ProductionCompany, ...] = ()
    production_countries: Tuple[ProductionCountry, ...] = ()
    spoken_languages: Tuple[SpokenLanguage, ...] = ()
    adult: bool = False
    video: bool = False
    original_language: str = 'en'
    imdb_id: Optional[str] = None
    homepage: Optional[str] = None

    def __post_init__(self):
        # Collections are stored as tuples so that equal records compare equal
        for name in ('genres', 'production_companies', 'production_countries', 'spoken_languages'):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value or ()))

    @property
    def genre_names(self) -> List[str]:
        return [g.name for g in self.genres]

    @property
    def imdb_url(self) -> Optional[str]:
        return f"https://www.imdb.com/title/{self.imdb_id}" if self.imdb_id else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'originalTitle': self.original_title,
            'overview': self.overview,
            'releaseDate': self.release_date,
            'posterPath': self.poster_path,
            'backdropPath': self.backdrop_path,
            'genres': [g.to_dict() for g in self.genres],
            'runtime': self.runtime,
            'voteAverage': self.vote_average,
            'voteCount': self.vote_count,
            'popularity': self.popularity,
            'status': self.status,
            'tagline': self.tagline,
            'budget': self.budget,
            'revenue': self.revenue,
            'productionCompanies': [c.to_dict() for c in self.production_companies],
            'productionCountries': [c.to_dict() for c in self.production_countries],
            'spokenLanguages': [l.to_dict() for l in self.spoken_languages],
            'adult': self.adult,
            'video': self.video,
            'originalLanguage': self.original_language,
            'imdbId': self.imdb_id,
            'homepage': self.homepage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Film':
        """
        Build a Film from a data.json document.

        Raises KeyError/TypeError/ValueError when the document is not a
        film record, including nested entries that are not objects and
        numeric or text fields of the wrong type (callers wrap these into a
        file system error).
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")

        return cls(
            id=int(data['id']),
            title=_text(data, 'title'),
            original_title=_text(data, 'originalTitle'),
            overview=_text(data, 'overview'),
            release_date=_text(data, 'releaseDate'),
            poster_path=_optional_text(data, 'posterPath'),
            backdrop_path=_optional_text(data, 'backdropPath'),
            genres=tuple(Genre.from_dict(g) for g in _records(data, 'genres')),
            runtime=_number(data, 'runtime'),
            vote_average=_number(data, 'voteAverage'),
            vote_count=_number(data, 'voteCount'),
            popularity=_number(data, 'popularity'),
            status=_text(data, 'status', 'Unknown'),
            tagline=_text(data, 'tagline'),
            budget=_number(data, 'budget'),
            revenue=_number(data, 'revenue'),
            production_companies=tuple(
                ProductionCompany.from_dict(c) for c in _records(data, 'productionCompanies')
            ),
            production_countries=tuple(
                ProductionCountry.from_dict(c) for c in _records(data, 'productionCountries')
            ),
            spoken_languages=tuple(
                SpokenLanguage.from_dict(l) for l in _records(data, 'spokenLanguages')
            ),
            adult=bool(data.get('adult', False)),
            video=bool(data.get('video', False)),
            original_language=_text(data, 'originalLanguage', 'en'),
            imdb_id=_optional_text(data, 'imdbId'),
            homepage=_optional_text(data, 'homepage'),
        )


@dataclass(frozen=True)
class SearchResult:
    """Lightweight projection of a Film used for the selection list"""
    id: int
    title: str
    release_date: str = ''
    overview: str = ''
    vote_average: float = 0
    vote_count: int = 0
    popularity: float = 0
    adult: bool = False
    video: bool = False
    poster_path: Optional[str] = None


@dataclass
class SearchParams:
    query: str
    page: int = 1
    include_adult: bool = False
    year: Optional[int] = None
    primary_release_year: Optional[int] = None


@dataclass
class MovieDetailsParams:
    id: int
    append_to_response: Tuple[str, ...] = DEFAULT_APPEND_TO_RESPONSE
    language: str = 'en-US'


@dataclass
class ImageConfig:
    """Image capabilities reported by the TMDb configuration endpoint"""
    base_url: str = TMDB_IMAGE_BASE_URL
    poster_sizes: List[str] = field(default_factory=lambda: list(DEFAULT_POSTER_SIZES))
    backdrop_sizes: List[str] = field(default_factory=lambda: list(DEFAULT_BACKDROP_SIZES))


@dataclass
class UserConfig:
    """Mutable user preferences"""
    tmdb_api_key: str = DEFAULT_USER_CONFIG['tmdbApiKey']
    default_output_dir: str = DEFAULT_USER_CONFIG['defaultOutputDir']
    image_quality: str = DEFAULT_USER_CONFIG['imageQuality']
    language: str = DEFAULT_USER_CONFIG['language']
    include_adult: bool = DEFAULT_USER_CONFIG['includeAdult']
    download_images: bool = DEFAULT_USER_CONFIG['downloadImages']
    max_image_size: str = DEFAULT_USER_CONFIG['maxImageSize']

    # snake_case attribute -> camelCase document key
    KEYS = {
        'tmdb_api_key': 'tmdbApiKey',
        'default_output_dir': 'defaultOutputDir',
        'image_quality': 'imageQuality',
        'language': 'language',
        'include_adult': 'includeAdult',
        'download_images': 'downloadImages',
        'max_image_size': 'maxImageSize',
    }

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in self.KEYS.items()}


@dataclass
class AppConfig:
    """Fixed-shape application metadata"""
    version: str = DEFAULT_APP_CONFIG['version']
    config_dir: str = DEFAULT_APP_CONFIG['configDir']
    output_dir: str = DEFAULT_APP_CONFIG['outputDir']
    temp_dir: str = DEFAULT_APP_CONFIG['tempDir']
    log_level: str = DEFAULT_APP_CONFIG['logLevel']

    KEYS = {
        'version': 'version',
        'config_dir': 'configDir',
        'output_dir': 'outputDir',
        'temp_dir': 'tempDir',
        'log_level': 'logLevel',
    }

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in self.KEYS.items()}


@dataclass
class ConfigFile:
    """The persisted configuration document"""
    user: UserConfig = field(default_factory=UserConfig)
    app: AppConfig = field(default_factory=AppConfig)
    last_updated: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user': self.user.to_dict(),
            'app': self.app.to_dict(),
            'lastUpdated': self.last_updated,
        }


@dataclass
class Credentials:
    api_key: str
    encrypted: bool = False
    last_used: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'apiKey': self.api_key, 'encrypted': self.encrypted, 'lastUsed': self.last_used}


@dataclass(frozen=True)
class StorageStats:
    total_films: int = 0
    total_size: int = 0
    average_size: float = 0


@dataclass
class ExportOptions:
    """Where and how to export the saved collection"""
    destination: Path
    format: str
    include_images: bool = False

    def __post_init__(self):
        self.destination = Path(self.destination)
        self.format = (self.format or '').lower()

    @property
    def is_supported(self) -> bool:
        return self.format in EXPORT_FORMATS
