# -*- coding: utf-8 -*-


def is_thenable(value):
    """Check if an object can be chained, like a Promise, or is a "result".

    The promise module uses this function to differentiate "chainable" objects
    and direct return values, when using a callback who can returns both.

    Returns:
        boolean: True if the value has an attribute 'then' who is callable.
            False if not.
    """
    return callable(getattr(value, 'then', None))


def is_cancellable(value):
    """Check if an object (thenable) can be cancelled (has a cancel() method).

    A Promise always has a cancel() method, but it's a no-op if its Deferred
    has no canceller: in this case, the `cancellable` attribute is False.

    Args:
        value: object to test, usually a Promise.
    Returns:
        boolean: True if it can be cancelled, False if not.
    """
    if not callable(getattr(value, 'cancel', None)):
        return False
    return getattr(value, 'cancellable', True)
