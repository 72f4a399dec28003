# -*- coding: utf-8 -*-

from .client import HTTPClient
from .errors import ConnectionError, HTTPError, NetworkError, TimeoutError

__all__ = ['HTTPClient', 'ConnectionError', 'HTTPError', 'NetworkError',
           'TimeoutError']
