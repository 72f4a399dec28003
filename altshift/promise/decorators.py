# -*- coding: utf-8 -*-

import functools

from .combinators import rejected, resolved


def wrap_promise(f):
    """Decorator who converts the result in a Promise object.

    If the function decorated returns a thenable, it's transmitted as is.
    Else, a new Promise is created with the returned value as result. If the
    function raises an exception, the Promise is rejected with it.
    """
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return resolved(f(*args, **kwargs))
        except Exception as error:
            return rejected(error)

    return wrapper
