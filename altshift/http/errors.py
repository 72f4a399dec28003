# -*- coding: utf-8 -*-
"""Errors which can occur in the http module.

requests exceptions can be converted to altshift.http errors using the
``handler`` decorator.
"""

import functools

import requests.exceptions

from ..errors import Error


class NetworkError(Error):
    """Base class for altshift.http errors.

    Attributes:
        reason (Exception): the requests exception which've produced this
            error. Can be None.
    """
    code = 'network'
    default_message = 'A network error has occurred.'

    def __init__(self, reason=None, message=None, **data):
        Error.__init__(self, message, **data)
        self.reason = reason


class ConnectionError(NetworkError):
    code = 'connection'
    default_message = 'Unable to connect to the server.'


class TimeoutError(NetworkError):
    """The server did not answer in time.

    Not to be confused with `altshift.promise.TimeoutError`, which is the
    expiration of a promise's timeout.
    """
    code = 'network-timeout'
    default_message = 'The server did not respond on time.'


class HTTPError(NetworkError):
    """The server has returned a status code >= 400.

    Attributes:
        code (int): HTTP status code
        status_text (str): HTTP status text
        request (str): representation of the request.
        response (dict or text): If the response content was in json, the
            corresponding dict, else the content as text.
    """
    default_message = ('The server has returned an HTTP error: '
                       '%(status)s %(status_text)s')

    def __init__(self, error, message=None):
        """
        Args:
            error (requests.exceptions.HTTPError): base error.
        """
        response = error.response
        NetworkError.__init__(self, error, message,
                              status=response.status_code,
                              status_text=response.reason)

        self.code = response.status_code
        self.status_text = response.reason
        self.request = None
        if error.request is not None:
            self.request = '%s %s' % (error.request.method,
                                      error.request.url)

        try:
            self.response = response.json()
        except ValueError:
            self.response = response.text

    def __repr__(self):
        return '\n'.join(('HTTP Error: %s %s' % (self.code, self.status_text),
                          '\tRequest: %s' % self.request,
                          '\tResponse: %s' % (self.response,)))


def handler(func):
    """Decorator who handles errors of the requests.

    Converts requests.exceptions.* into altshift.http.errors.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except requests.exceptions.Timeout as error:
            # ConnectTimeout is also a ConnectionError: it must be caught
            # first.
            raise TimeoutError(error)
        except requests.exceptions.ConnectionError as error:
            raise ConnectionError(error)
        except requests.exceptions.HTTPError as error:
            raise HTTPError(error)
        except requests.exceptions.RequestException as error:
            raise NetworkError(error)

    return wrapper
