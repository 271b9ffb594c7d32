#!/usr/bin/env python3
"""
Error type shared by every reel-cli module

One exception class, discriminated by ``kind``. Callers branch on
``error.kind`` instead of catching subclasses:

    try:
        storage.save_film(film)
    except ReelError as e:
        if e.kind is ErrorKind.FILESYSTEM:
            ...

Each kind has a named constructor that fills the payload it needs
(status code + endpoint for API errors, path + operation for file system
errors, and so on).
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Error categories, valued by their machine-readable code"""
    CONFIGURATION = 'CONFIGURATION_ERROR'
    API = 'API_ERROR'
    VALIDATION = 'VALIDATION_ERROR'
    FILESYSTEM = 'FILE_SYSTEM_ERROR'
    NETWORK = 'NETWORK_ERROR'
    USER_INPUT = 'USER_INPUT_ERROR'

    @property
    def label(self) -> str:
        return {
            ErrorKind.CONFIGURATION: 'Configuration error',
            ErrorKind.API: 'API error',
            ErrorKind.VALIDATION: 'Validation error',
            ErrorKind.FILESYSTEM: 'File system error',
            ErrorKind.NETWORK: 'Network error',
            ErrorKind.USER_INPUT: 'Input error',
        }[self]


class ReelError(Exception):
    """Tagged-variant error carrying a kind, a message and a details payload"""

    def __init__(self, message: str, kind: ErrorKind, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details: Dict[str, Any] = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ReelError({self.kind.name}, {self.message!r}, {self.details!r})"

    @property
    def code(self) -> str:
        return self.kind.value

    # Payload accessors (None when the kind does not carry the field)

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get('status_code')

    @property
    def endpoint(self) -> Optional[str]:
        return self.details.get('endpoint')

    @property
    def path(self) -> Optional[str]:
        return self.details.get('path')

    @property
    def operation(self) -> Optional[str]:
        return self.details.get('operation')

    # Named constructors

    @classmethod
    def configuration(cls, message: str, **details) -> 'ReelError':
        return cls(message, ErrorKind.CONFIGURATION, details)

    @classmethod
    def api(cls, message: str, status_code: int, endpoint: Optional[str] = None,
            **details) -> 'ReelError':
        details.update(status_code=status_code, endpoint=endpoint)
        return cls(message, ErrorKind.API, details)

    @classmethod
    def validation(cls, message: str, field: str, value: Any = None, **details) -> 'ReelError':
        details.update(field=field, value=value)
        return cls(message, ErrorKind.VALIDATION, details)

    @classmethod
    def filesystem(cls, message: str, path, operation: str, **details) -> 'ReelError':
        details.update(path=str(path), operation=operation)
        return cls(message, ErrorKind.FILESYSTEM, details)

    @classmethod
    def network(cls, message: str, url: str, original: Optional[BaseException] = None,
                **details) -> 'ReelError':
        details.update(url=url, original_error=str(original) if original else None)
        return cls(message, ErrorKind.NETWORK, details)

    @classmethod
    def user_input(cls, message: str, input_value: str, expected_format: Optional[str] = None,
                   **details) -> 'ReelError':
        details.update(input=input_value, expected_format=expected_format)
        return cls(message, ErrorKind.USER_INPUT, details)
