# -*- coding: utf-8 -*-
"""Functions composing promises, and plain values, into new promises.

All functions accept indifferently thenables and direct values: a direct
value is considered as an already resolved promise. They only rely on the
`then()` method, and so work with any thenable, not only the Promise class
of this package.

Note that some names (``all``, ``set``, ``reduce``) shadow builtins; import
the module rather than the names:

    >>> from altshift.promise import combinators
    >>> combinators.all([p1, p2]).then(print)
"""

from collections import deque
import functools
import logging

from .deferred import Deferred
from .errors import GroupRejectedError
from .promise import get_property, set_property
from .scheduler import get_scheduler
from .util import is_thenable

_logger = logging.getLogger(__name__)


def defer(canceller=None, scheduler=None):
    """Create a new pending Deferred."""
    return Deferred(canceller, scheduler)


def resolved(value):
    """Create a promise who resolves the selected value.

    Args:
        value: result of the promise. If it's a thenable, it's returned as
            is.
    Returns:
        Promise: new Promise already fulfilled.
    """
    if is_thenable(value):
        return value
    df = Deferred(_name='RESOLVE')
    df.resolve(value)
    return df.get_promise()


def rejected(reason):
    """Create a Promise rejected for the reason specified.

    As any rejection, it must be handled before the next turn of the
    scheduler.
    """
    df = Deferred(_name='REJECT')
    df.reject(reason)
    return df.get_promise()


def when_promise(value, on_resolved=None, on_rejected=None, on_progress=None):
    """Register callbacks on a thenable.

    Unlike calling `value.then()` directly, an exception raised by the
    thenable is converted into a rejected promise, and the result is always
    a promise.
    """
    try:
        if on_progress is None:
            result = value.then(on_resolved, on_rejected)
        else:
            result = value.then(on_resolved, on_rejected, on_progress)
    except Exception as error:
        return rejected(error)
    return resolved(result)


def when(value, on_resolved=None, on_rejected=None, on_progress=None):
    """Register callbacks on a value, who can be a promise or not.

    If the value is a thenable, it's equivalent to `when_promise()`. Else,
    `on_resolved` is called immediately, and its result is wrapped in a
    promise.

    Returns:
        Promise: promise of the value returned by the callback.
    """
    if is_thenable(value):
        return when_promise(value, on_resolved, on_rejected, on_progress)

    try:
        result = on_resolved(value) if on_resolved is not None else value
    except Exception as error:
        return rejected(error)
    return resolved(result)


def get(target, name):
    """Promise of a property (item or attribute) of a value or a promise."""
    def _get(obj):
        return get_property(obj, name)
    return when(target, _get)


def set(target, name, value):
    """Set a property (item or attribute) of a value or of a promise result.

    Returns:
        Promise: resolved with `value`, when the property has been set.
    """
    def _set(obj):
        set_property(obj, name, value)
        return value
    return when(target, _set)


def apply(target, method_name, args=()):
    """Call a method of a value, or of a promise result.

    Returns:
        Promise: promise of the method's return value.
    """
    def _apply(obj):
        return get_property(obj, method_name)(*args)
    return when(target, _apply)


def _to_list(items, more, function_name):
    """Accept either a single iterable, or several positional values."""
    if more:
        return [items] + list(more)
    try:
        return list(items)
    except TypeError:
        raise TypeError('%s() expects an iterable of promises, got %r'
                        % (function_name, items))


def all(promises, *more):
    """Create a Promise who waits a list of promises to be all settled.

    The resulting promise is settled only when all the promises are settled,
    even if one of them fails early.
    If all of them are fulfilled, it resolves with the list of values,
    keeping the order of the promise list (not the order of completion).
    Else, it's rejected with a GroupRejectedError, containing the values
    and the rejection reasons (see `all_fail_fast()` for the fail-fast
    variant).

    Args:
        promises (iterable): promises or direct values. Several values can
            also be passed as positional arguments.
    Returns:
        Promise<list>
    Raises:
        TypeError: if `promises` is not iterable.
    """
    items = _to_list(promises, more, 'all')
    df = Deferred(_name='ALL')
    if not items:
        df.resolve([])
        return df.get_promise()

    results = [None] * len(items)
    errors = {}
    remaining = [len(items)]

    def _settle_one(index, value, is_error=False):
        results[index] = value
        if is_error:
            errors[index] = value
        remaining[0] -= 1
        if remaining[0] == 0:
            if errors:
                df.reject(GroupRejectedError(results, errors))
            else:
                df.resolve(results)

    for index, item in enumerate(items):
        when(item, functools.partial(_settle_one, index),
             functools.partial(_settle_one, index, is_error=True))
    return df.get_promise()


def all_fail_fast(promises, *more):
    """Like `all()`, but rejected as soon as one of the promises fails.

    The rejection reason is the reason of the first failing promise. Other
    results are ignored.
    """
    items = _to_list(promises, more, 'all_fail_fast')
    df = Deferred(_name='ALL_FAIL_FAST')
    if not items:
        df.resolve([])
        return df.get_promise()

    results = [None] * len(items)
    remaining = [len(items)]

    def _resolve_one(index, value):
        if df.finished:
            return
        results[index] = value
        remaining[0] -= 1
        if remaining[0] == 0:
            df.resolve(results)

    def _reject_one(reason):
        if not df.finished:
            df.reject(reason)

    for index, item in enumerate(items):
        when(item, functools.partial(_resolve_one, index), _reject_one)
    return df.get_promise()


def first(promises, *more):
    """Settle with the first of the promises to be settled.

    The result (value or rejection reason) of the first promise settled is
    transmitted. All other results are ignored. Direct values are
    considered as already settled, so the first direct value of the list
    wins over any pending promise.

    Args:
        promises (iterable): promises or direct values.
    Returns:
        Promise
    Raises:
        TypeError: if `promises` is not iterable.
        ValueError: If the promise list is empty.
    """
    items = _to_list(promises, more, 'first')
    if not items:
        raise ValueError('Empty promise list in first()')

    df = Deferred(_name='FIRST')

    def _resolve_once(value):
        if not df.finished:
            df.resolve(value)

    def _reject_once(reason):
        if not df.finished:
            df.reject(reason)

    for item in items:
        when(item, _resolve_once, _reject_once)
    return df.get_promise()


def reduce(functions, initial_value=None):
    """Execute asynchronous functions one after the other.

    Each function is called with the result of the previous one (or
    `initial_value` for the first one), and can return a direct value or a
    promise. A function is called only when the result of the previous one
    is known. A failure stops the sequence.

    Args:
        functions (iterable): functions taking one argument.
        initial_value (optional): value passed to the first function.
    Returns:
        Promise: promise of the value returned by the last function.
    Raises:
        TypeError: if `functions` is not iterable.
    """
    try:
        remaining = deque(functions)
    except TypeError:
        raise TypeError('reduce() expects an iterable of functions, got %r'
                        % (functions,))
    df = Deferred(_name='REDUCE')

    def _next_step(value):
        # Direct values are chained in a loop: only a thenable result
        # suspends the sequence.
        while remaining:
            step = remaining.popleft()
            try:
                value = step(value)
            except Exception as error:
                df.reject(error)
                return
            if is_thenable(value):
                try:
                    value.then(_next_step, df.reject)
                except Exception as error:
                    df.reject(error)
                return
        df.resolve(value)

    _next_step(initial_value)
    return df.get_promise()


serial = reduce


def delay(seconds, scheduler=None):
    """Create a promise resolved (with None) after a delay.

    The promise can be cancelled, which stops the timer.

    Args:
        seconds (float): the delay.
        scheduler (Scheduler, optional): scheduler running the timer.
    """
    scheduler = scheduler or get_scheduler()
    timer = []

    def _stop_timer():
        if timer:
            timer[0].cancel()

    df = Deferred(_stop_timer, scheduler, _name='DELAY %ss' % seconds)

    def _on_time():
        if not df.finished:
            df.resolve(None)

    timer.append(scheduler.call_later(seconds, _on_time))
    return df.get_promise()


def execute(function, *args, **kwargs):
    """Run a callback-style function, and returns a Promise instead.

    The function is called with all arguments, plus a trailing callback
    ``callback(error, *results)``. A true `error` rejects the promise.
    Otherwise, the promise resolves with the single result, or with the
    list of results if there are several.

    If the function raises an exception before calling the callback, the
    promise is rejected with it.
    """
    df = Deferred(_name='EXECUTE %s' % getattr(function, '__name__', '???'))

    def _callback(error=None, *results):
        if error:
            df.reject(error)
        elif len(results) > 1:
            df.resolve(list(results))
        elif results:
            df.resolve(results[0])
        else:
            df.resolve(None)

    try:
        function(*(args + (_callback,)), **kwargs)
    except Exception as error:
        if df.finished:
            raise
        df.reject(error)
    return df.get_promise()


def convert_callback_function(function):
    """Convert a callback-style function into a promise-returning function.

    The new function takes the same arguments, without the trailing callback
    (see `execute()`). For the callers who still want the callback style, a
    callback can be given with the `callback` keyword argument: it'll be
    called with ``(None, result)`` or ``(error, None)``.
    """
    @functools.wraps(function)
    def wrapper(*args, **kwargs):
        callback = kwargs.pop('callback', None)
        promise = execute(function, *args, **kwargs)

        if callback is not None:
            def _on_resolved(result):
                callback(None, result)

            def _on_rejected(error):
                callback(error, None)

            promise.then(_on_resolved, _on_rejected)
        return promise

    return wrapper
