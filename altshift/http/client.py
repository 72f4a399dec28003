# -*- coding: utf-8 -*-

import logging

import requests

from ..common import config
from ..promise import ThreadPoolExecutor
from . import errors

_logger = logging.getLogger(__name__)


class HTTPClient(object):
    """HTTP client returning promises.

    The requests are executed by the `requests` library, in a thread pool.
    All promises are cancellable as long as the request has not started.
    Errors are converted into `altshift.http.errors` exceptions.

    Example:
        >>> client = HTTPClient()
        >>> client.json('GET', 'https://example.com/api/status') \\
        ...     .get('content').then(print)
    """

    def __init__(self, session=None, executor=None, timeout=None):
        """
        Args:
            session (requests.Session, optional): session used to send the
                requests. A new one is created if not set.
            executor (ThreadPoolExecutor, optional): pool executing the
                requests. If not set, the client creates its own pool, and
                releases it at `close()`.
            timeout (float, optional): network timeout of each request, in
                seconds. Default to the config entry `http_timeout`.
        """
        self._session = session or requests.Session()
        self._own_executor = executor is None
        self._executor = executor or ThreadPoolExecutor()
        if timeout is None:
            timeout = config.get('http_timeout')
        self.timeout = timeout

    def request(self, method, url, **kwargs):
        """Send an HTTP request.

        Args:
            method (str): HTTP verb.
            url (str): target URL.
            **kwargs: arguments of `requests.Session.request()`.
        Returns:
            Promise<requests.Response>: resolved with the response, or
                rejected with a NetworkError. A status code >= 400 is an
                error (HTTPError).
        """
        kwargs.setdefault('timeout', self.timeout)
        return self._executor.submit(self._send, method, url, **kwargs)

    def get(self, url, **kwargs):
        return self.request('GET', url, **kwargs)

    def post(self, url, **kwargs):
        return self.request('POST', url, **kwargs)

    def put(self, url, **kwargs):
        return self.request('PUT', url, **kwargs)

    def delete(self, url, **kwargs):
        return self.request('DELETE', url, **kwargs)

    def json(self, method, url, **kwargs):
        """Performs a json HTTP requests, then returns the result.

        Returns:
            Promise<dict>: contains 3 keys:
              - 'code': the HTTP response code
              - 'headers': a dict containing all headers (key: value)
              - 'content': JSON response, or None if the body is empty.
        """
        kwargs.setdefault('timeout', self.timeout)
        return self._executor.submit(self._send_json, method, url, **kwargs)

    def close(self):
        """Close the session, and the thread pool if it's owned."""
        self._session.close()
        if self._own_executor:
            self._executor.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, _type, _value, _tb):
        self.close()

    @errors.handler
    def _send(self, method, url, **kwargs):
        response = self._session.request(method=method, url=url, **kwargs)
        _logger.log(5, 'request %s %s -> %s', method, url,
                    response.status_code)
        response.raise_for_status()
        return response

    @errors.handler
    def _send_json(self, method, url, **kwargs):
        response = self._session.request(method=method, url=url, **kwargs)
        _logger.log(5, 'request %s %s -> %s', method, url,
                    response.status_code)
        response.raise_for_status()

        content = None
        if response.content:
            content = response.json()

        return {
            'code': response.status_code,
            'headers': dict(response.headers),
            'content': content
        }
