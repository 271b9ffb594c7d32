#!/usr/bin/env python3
"""
Shared constants for reel-cli

Single source of truth for preference enumerations, defaults, file names
and TMDb endpoints. DO NOT duplicate these values in other modules - import
from here instead.
"""

from pathlib import Path

# Preference enumerations (order matters for MAX_IMAGE_SIZES: smallest first)
IMAGE_QUALITIES = ('low', 'medium', 'high')
MAX_IMAGE_SIZES = ('w92', 'w154', 'w185', 'w342', 'w500', 'w780', 'original')
LOG_LEVELS = ('error', 'warn', 'info', 'debug')

# Defaults for the persisted user preferences (camelCase = on-disk keys)
DEFAULT_USER_CONFIG = {
    'tmdbApiKey': '',
    'defaultOutputDir': './films',
    'imageQuality': 'medium',
    'language': 'en-US',
    'includeAdult': False,
    'downloadImages': True,
    'maxImageSize': 'w500',
}

DEFAULT_APP_CONFIG = {
    'version': '1.0.0',
    'configDir': '~/.reel-cli',
    'outputDir': './films',
    'tempDir': '~/.reel-cli/temp',
    'logLevel': 'warn',
}

# Per-user configuration location
DEFAULT_CONFIG_DIR = Path.home() / '.reel-cli'
CONFIG_FILENAME = 'config.json'
CREDENTIALS_FILENAME = 'credentials.json'
API_KEY_ENV_VAR = 'TMDB_API_KEY'

# Owner-only permissions for the config directory and its documents
CONFIG_DIR_MODE = 0o700
CONFIG_FILE_MODE = 0o600

# Saved film directory layout
FILM_DATA_FILENAME = 'data.json'
FILM_METADATA_FILENAME = 'metadata.txt'
POSTER_FILENAME = 'poster.jpg'
BACKDROP_FILENAME = 'backdrop.jpg'
IMAGE_FILENAMES = (POSTER_FILENAME, BACKDROP_FILENAME)

# Characters that are illegal in file names on at least one supported OS
INVALID_FILENAME_CHARS = '<>:"/\\|?*'
MAX_DIRECTORY_NAME_LENGTH = 255
# File systems limit a single name to 255 bytes, not characters
MAX_FILENAME_BYTES = 255
MAX_EXPORT_FILENAME_LENGTH = 100

# TMDb API
TMDB_BASE_URL = 'https://api.themoviedb.org/3'
TMDB_IMAGE_BASE_URL = 'https://image.tmdb.org/t/p/'
DEFAULT_POSTER_SIZES = ['w92', 'w154', 'w185', 'w342', 'w500', 'w780', 'original']
DEFAULT_BACKDROP_SIZES = ['w300', 'w780', 'w1280', 'original']
DEFAULT_APPEND_TO_RESPONSE = ('credits', 'images', 'videos')
REQUEST_TIMEOUT = 10
IMAGE_DOWNLOAD_TIMEOUT = 30

# (poster size, backdrop size) per image quality tier
IMAGE_SIZES_BY_QUALITY = {
    'low': ('w185', 'w300'),
    'medium': ('w500', 'w780'),
    'high': ('w780', 'w1280'),
}

# Earliest year a film can have been released (Roundhay Garden Scene)
EARLIEST_FILM_YEAR = 1888
MIN_QUERY_LENGTH = 2
MIN_API_KEY_LENGTH = 10

# Export
EXPORT_FORMATS = ('json', 'csv', 'txt')
EXPORT_SUMMARY_STEM = 'films-summary'
DEFAULT_EXPORT_DESTINATION = './exported-films'
CSV_EXPORT_HEADERS = [
    'Title', 'Original Title', 'Release Date', 'Runtime', 'Rating',
    'Vote Count', 'Overview', 'Genres', 'Budget', 'Revenue',
]
