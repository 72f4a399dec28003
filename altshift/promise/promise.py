# -*- coding: utf-8 -*-

from collections.abc import Mapping, MutableMapping
import logging

from ..errors import NotImplementedMethodError

_logger = logging.getLogger(__name__)


def get_property(obj, name):
    """Read an entry of a mapping, or an attribute of any other object."""
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


def set_property(obj, name, value):
    """Set an entry of a mapping, or an attribute of any other object."""
    if isinstance(obj, MutableMapping):
        obj[name] = value
    else:
        setattr(obj, name, value)


def _callback_name(on_resolved, on_rejected):
    if not on_rejected:
        return '%s' % getattr(on_resolved, '__name__', '???')
    elif not on_resolved:
        return '<None, %s>' % getattr(on_rejected, '__name__', '???')
    return '<%s, %s>' % (getattr(on_resolved, '__name__', '???'),
                         getattr(on_rejected, '__name__', '???'))


class Thenable(object):
    """Base of the objects representing a value not yet known.

    Subclasses implement `then()`; all other methods are sugar built upon
    it, and so return a new Promise each.
    """

    def then(self, on_resolved=None, on_rejected=None, on_progress=None):
        """Register callbacks called when the value is known.

        The callbacks are never called synchronously: they're always
        executed by the scheduler, on a future turn.

        If a callback is not defined, the state of `self` is transferred to
        the new promise (the value or the rejection reason).

        Args:
            on_resolved (callable, optional): receives the resolved value.
            on_rejected (callable, optional): receives the rejection reason.
            on_progress (callable, optional): receives the progress updates
                emitted before the settlement.
        Returns:
            Promise: new promise of the value returned by the callback. If
                the callback returns a thenable, the new promise follows it.
                If the callback raises an exception, the new promise is
                rejected with it.
        """
        raise NotImplementedMethodError(method='then')

    def catch(self, on_rejected):
        """Alias of `self.then(None, on_rejected)`"""
        return self.then(None, on_rejected)

    def get(self, name):
        """Promise of a property (item or attribute) of the resolved value."""
        def _get(value):
            return get_property(value, name)
        return self.then(_get)

    def set(self, name, value):
        """Set a property (item or attribute) of the resolved value.

        Returns:
            Promise: resolved with `value` once it has been set.
        """
        def _set(obj):
            set_property(obj, name, value)
            return value
        return self.then(_set)

    def apply(self, method_name, args=()):
        """Call a method of the resolved value.

        Returns:
            Promise: promise of the method's return value.
        """
        def _apply(obj):
            return get_property(obj, method_name)(*args)
        return self.then(_apply)

    def add_callback(self, callback):
        return self.then(callback)

    def add_errback(self, errback):
        return self.then(None, errback)

    def add_both(self, callback):
        """Use the same callback on resolution and on rejection."""
        return self.then(callback, callback)

    def add_callbacks(self, callback, errback):
        return self.then(callback, errback)

    def safeguard(self):
        """Catch all errors and log them with the most details possible.

        An unhandled rejection is fatal: it's raised in the scheduler. Calling
        `safeguard()` after all chains are set will catch these errors, and
        log them as ERROR instead.

        Returns:
            Promise: resolved with None if `self` is rejected; with the same
                value as `self` otherwise.
        """
        def guard(error):
            if isinstance(error, BaseException):
                _logger.error('[SAFEGUARD] %r', self,
                              exc_info=(type(error), error,
                                        error.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %r rejected with %r', self, error)

        return self.then(None, guard)


class Promise(Thenable):
    """Read-only view of a Deferred.

    The Promise is the "consumer" side of an asynchronous task: it allows to
    chain callbacks, but not to resolve or reject the value. Use
    `Deferred.get_promise()` to obtain it.
    """

    def __init__(self, deferred):
        self._deferred = deferred

    def then(self, on_resolved=None, on_rejected=None, on_progress=None):
        return self._deferred.then(on_resolved, on_rejected, on_progress)

    @property
    def state(self):
        return self._deferred.state

    @property
    def cancellable(self):
        """True if the underlying Deferred has a canceller."""
        return self._deferred.canceller is not None

    def cancel(self):
        """Cancel the operation, if it's cancellable.

        A promise returned by `then()` shares the canceller of its parent.
        Cancelling it stops the parent's operation, but only this promise is
        rejected: the parent, and the other promises chained on it, stay
        pending unless the canceller settles the parent itself.

        Returns:
            boolean: True if the cancellation error has been handled by a
                callback. False if it hasn't, or if the promise can't be
                cancelled.
        """
        if not self.cancellable:
            return False
        return self._deferred.cancel()

    def __repr__(self):
        return 'Promise(%s)' % self._deferred._inner_print()
