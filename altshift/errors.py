# -*- coding: utf-8 -*-
"""Base exceptions of the altshift toolkit.

All errors raised by altshift carry a short, stable ``code`` (usable by the
caller to distinguish errors without checking the type) and a
human-readable message.

The message is a template: it's formatted at read time with the keyword
arguments given to the constructor, plus ``code`` and ``name``.

    >>> class MissingFile(Error):
    ...     code = 'missing-file'
    ...     default_message = 'File %(path)s not found'
    >>> str(MissingFile(path='/tmp/foo'))
    'File /tmp/foo not found'
"""


class Error(Exception):
    """Base class for altshift errors.

    Attributes:
        code (str): stable identifier of the kind of error.
        default_message (str): message template used when none is given.
        data (dict): extra values given at creation. They're used to format
            the message.
    """

    code = 'error'
    default_message = 'Error thrown'

    def __init__(self, message=None, **data):
        """
        Args:
            message (str, optional): message template. If not set,
                `default_message` is used. Non-string values are converted.
            **data: values available to the template, as ``%(key)s``.
        """
        if message is None:
            message = self.default_message
        self._message = '%s' % (message,)
        self.data = data
        Exception.__init__(self, self._message)

    @property
    def name(self):
        return self.__class__.__name__

    @property
    def message(self):
        if '%(' not in self._message:
            return self._message

        values = dict(self.data)
        values.setdefault('code', self.code)
        values.setdefault('name', self.name)
        try:
            return self._message % values
        except (KeyError, TypeError, ValueError):
            # Incomplete data: the raw template is better than nothing.
            return self._message

    def to_dict(self):
        return {
            'name': self.name,
            'code': self.code,
            'message': self.message,
            'data': dict(self.data)
        }

    def __str__(self):
        return self.message

    def __repr__(self):
        return '%s[%s]: %s' % (self.name, self.code, self.message)


class ExecutionError(Error):
    """Error happening during the execution of an operation."""
    code = 'runtime'
    default_message = 'Error during execution'


class NotImplementedMethodError(ExecutionError):
    code = 'implementation'
    default_message = '%(method)s not implemented'


class InvalidValueError(Error):
    code = 'value'
    default_message = 'Value error thrown'
