#!/usr/bin/env python3
"""Tests for the ReelError variants"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from reellib.errors import ErrorKind, ReelError


class TestNamedConstructors:
    """Each constructor fills its kind and payload"""

    def test_api(self):
        error = ReelError.api('Not found', 404, 'movie/1')
        assert error.kind is ErrorKind.API
        assert error.code == 'API_ERROR'
        assert error.status_code == 404
        assert error.endpoint == 'movie/1'
        assert str(error) == 'Not found'

    def test_filesystem(self):
        error = ReelError.filesystem('boom', Path('/tmp/x'), 'write')
        assert error.code == 'FILE_SYSTEM_ERROR'
        assert error.path == '/tmp/x'
        assert error.operation == 'write'

    def test_validation(self):
        error = ReelError.validation('bad format', 'format', 'xml')
        assert error.details == {'field': 'format', 'value': 'xml'}

    def test_network_keeps_original_message(self):
        error = ReelError.network('failed', 'https://x', ValueError('reset'))
        assert error.kind is ErrorKind.NETWORK
        assert error.details['original_error'] == 'reset'

    def test_configuration_and_user_input(self):
        assert ReelError.configuration('x').details == {}
        error = ReelError.user_input('bad', 'abc', 'number')
        assert error.details == {'input': 'abc', 'expected_format': 'number'}

    def test_payload_absent_for_other_kinds(self):
        error = ReelError.configuration('x')
        assert error.status_code is None
        assert error.path is None

    def test_labels(self):
        assert ErrorKind.FILESYSTEM.label == 'File system error'
        assert all(kind.label for kind in ErrorKind)
