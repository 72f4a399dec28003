# -*- coding: utf-8 -*-

import pytest
import requests

from altshift.errors import Error
from altshift.http import errors


def _http_error(status_code, reason, content):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = content
    return requests.exceptions.HTTPError(response=response)


class TestHTTPError(object):

    def test_json_response(self):
        error = errors.HTTPError(_http_error(404, 'Not Found',
                                             b'{"error": "missing"}'))
        assert isinstance(error, errors.NetworkError)
        assert isinstance(error, Error)
        assert error.code == 404
        assert error.status_text == 'Not Found'
        assert error.response == {'error': 'missing'}
        assert str(error) == \
            'The server has returned an HTTP error: 404 Not Found'

    def test_text_response(self):
        error = errors.HTTPError(_http_error(500, 'Internal Server Error',
                                             b'Oops'))
        assert error.response == 'Oops'
        assert 'HTTP Error: 500 Internal Server Error' in repr(error)


class TestHandler(object):

    @pytest.mark.parametrize('raised, expected', [
        (requests.exceptions.ConnectionError(), errors.ConnectionError),
        (requests.exceptions.ConnectTimeout(), errors.TimeoutError),
        (requests.exceptions.ReadTimeout(), errors.TimeoutError),
        (requests.exceptions.TooManyRedirects(), errors.NetworkError),
        (_http_error(403, 'Forbidden', b''), errors.HTTPError),
    ])
    def test_conversion(self, raised, expected):
        @errors.handler
        def send():
            raise raised

        with pytest.raises(expected) as exc_info:
            send()
        assert exc_info.value.reason is raised

    def test_no_error(self):
        @errors.handler
        def send(value):
            return value

        assert send(3) == 3
        assert send.__name__ == 'send'
