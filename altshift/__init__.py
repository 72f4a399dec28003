# -*- coding: utf-8 -*-

from .__version__ import __version__  # noqa
from .errors import Error, ExecutionError, InvalidValueError, \
    NotImplementedMethodError

__all__ = ['__version__', 'Error', 'ExecutionError', 'InvalidValueError',
           'NotImplementedMethodError']
