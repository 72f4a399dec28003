# -*- coding: utf-8 -*-

from collections import namedtuple
import logging
from threading import Lock

from ..common import config
from .errors import AlreadyResolvedError, CancelledError, TimeoutError, \
    UnhandledRejectionError
from .promise import Promise, Thenable, _callback_name
from .scheduler import get_scheduler
from .util import is_thenable

_logger = logging.getLogger(__name__)

_NOT_SET = object()


# Callbacks registered by a call to then(), and the Deferred of the promise
# returned by this call.
_Listener = namedtuple('_Listener', ['on_resolved', 'on_rejected',
                                     'on_progress', 'deferred'])


class Deferred(Thenable):
    """Resolution cell of an asynchronous operation.

    A Deferred is the "producer" side of an async task, whereas a Promise
    represents the asynchronous value from the "consumer" side. The owner of
    the Deferred settles it exactly once, by calling `resolve()` or
    `reject()`, and gives the Promise (`get_promise()`) to the consumers.

    The callbacks registered with `then()` are always executed by the
    scheduler, on a future turn: when `resolve()` returns, no callback has
    been called yet. Callbacks registered on the same Deferred are called in
    the order of registration.

    A rejection that no callback handles is fatal: the rejection reason is
    raised in the scheduler at the next turn (see the config entry
    `unhandled_rejection`).

    The state is protected by a lock, so a Deferred can be settled from any
    thread.

    Attributes:
        state (str): one of PENDING, RESOLVED or REJECTED.
        result: resolved value, or rejection reason. None while pending.
        handled (boolean): True if the result has been consumed by at least
            one callback.
    """

    PENDING = 'pending'
    RESOLVED = 'resolved'
    REJECTED = 'rejected'

    def __init__(self, canceller=None, scheduler=None, _name=None,
                 _previous=None):
        """
        Args:
            canceller (callable, optional): called without argument by
                `cancel()`. Its return value is used as rejection reason.
            scheduler (Scheduler, optional): scheduler executing the
                callbacks. Default to `get_scheduler()`.
        """
        self._canceller = canceller
        self._scheduler = scheduler or get_scheduler()
        self._lock = Lock()
        self._name = _name or 'DEFERRED'
        self._previous = _previous

        self._state = self.PENDING
        self._result = None
        self._waiting = []
        self._handled = False
        # Deferred whose rejection has been transmitted as is to self.
        self._rejection_source = None

        self._timeout = None
        self._timer = None
        self._promise = None

    @property
    def state(self):
        return self._state

    @property
    def result(self):
        return self._result

    @property
    def finished(self):
        return self._state != self.PENDING

    @property
    def handled(self):
        return self._handled

    @property
    def canceller(self):
        return self._canceller

    @property
    def cancellable(self):
        return self._canceller is not None

    @property
    def scheduler(self):
        return self._scheduler

    def get_promise(self):
        """Returns the read-only Promise bound to this Deferred.

        The same instance is returned at each call.
        """
        with self._lock:
            if self._promise is None:
                self._promise = Promise(self)
            return self._promise

    def then(self, on_resolved=None, on_rejected=None, on_progress=None):
        """Register callbacks, and returns the Promise of their result.

        The new Promise inherits the canceller of this Deferred. Its
        cancellation calls the canceller but rejects only the new Promise;
        this Deferred is left as is.
        """
        child = Deferred(self._canceller, self._scheduler,
                         _name=_callback_name(on_resolved, on_rejected),
                         _previous=self)
        listener = _Listener(on_resolved, on_rejected, on_progress, child)

        with self._lock:
            is_pending = self._state == self.PENDING
            if is_pending:
                self._waiting.append(listener)

        if not is_pending:
            self._notify(listener)
        return child.get_promise()

    def resolve(self, value=None):
        """Fulfill the Deferred with a value.

        Returns:
            boolean: True if at least one callback will receive the value.
        Raises:
            AlreadyResolvedError: if the Deferred is already settled.
        """
        self._notify_all(self.RESOLVED, value)
        return self._handled

    def reject(self, reason, suppress_unhandled=False):
        """Reject the Deferred.

        Args:
            reason: cause of the failure, usually an exception.
            suppress_unhandled (boolean, optional): if True, the reason will
                not be raised if no callback handles it.
        Returns:
            boolean: True if at least one callback will handle the reason.
        Raises:
            AlreadyResolvedError: if the Deferred is already settled.
        """
        if not isinstance(reason, BaseException):
            _logger.debug('%r rejected with non-exception value: %r',
                          self, reason)
        self._notify_all(self.REJECTED, reason)
        if not suppress_unhandled:
            self._scheduler.call_soon(self._check_handled)
        return self._handled

    def progress(self, update):
        """Notify the waiting callbacks of a progress of the operation.

        Only the callbacks registered before this call are notified.
        """
        with self._lock:
            if self._state != self.PENDING:
                return self
            callbacks = [listener.on_progress for listener in self._waiting
                         if listener.on_progress is not None]

        for callback in callbacks:
            self._scheduler.call_soon(callback, update)
        return self

    def cancel(self):
        """Cancel the operation, by calling the canceller.

        The Deferred is rejected by the value returned by the canceller. If
        this value is not an exception, it's wrapped in a CancelledError.
        Nothing is done if the Deferred is already settled, or if there is no
        canceller.

        Returns:
            boolean: True if the rejection has been handled by a callback.
        """
        return self._cancel()

    def timeout(self, seconds=_NOT_SET):
        """Set the delay after which the Deferred is automatically cancelled.

        When the delay expires, the canceller (if any) is called, and the
        Deferred is rejected with a TimeoutError.

        Args:
            seconds (float, optional): the delay. A new call replaces the
                previous delay. None or 0 removes it. If not set, the method
                returns the current delay.
        Returns:
            Deferred: self, or the current timeout if `seconds` is not set.
        """
        if seconds is _NOT_SET:
            return self._timeout

        with self._lock:
            old_timer, self._timer = self._timer, None
            self._timeout = seconds or None
            is_pending = self._state == self.PENDING

        if old_timer is not None:
            old_timer.cancel()

        if seconds and is_pending:
            timer = self._scheduler.call_later(seconds, self._on_timeout)
            with self._lock:
                if self._state == self.PENDING and self._timer is None:
                    self._timer = timer
                    timer = None
            if timer is not None:
                timer.cancel()
        return self

    def _on_timeout(self):
        with self._lock:
            self._timer = None
            if self._state != self.PENDING:
                return

        _logger.debug('%r has timed out after %ss', self, self._timeout)
        if self._canceller is not None:
            self._cancel(is_timeout=True)
        else:
            self.reject(TimeoutError())

    def _cancel(self, is_timeout=False):
        with self._lock:
            if self._state != self.PENDING or self._canceller is None:
                return False

        reason = self._canceller()

        if self.finished:
            # The canceller has settled the Deferred by itself.
            return self._handled

        if is_timeout:
            error = TimeoutError(cancel_reason=reason)
        elif isinstance(reason, BaseException):
            error = reason
        else:
            error = CancelledError(reason)
        _logger.debug('%r cancelled: %r', self, error)
        return self.reject(error)

    def _notify_all(self, state, result):
        with self._lock:
            if self._state != self.PENDING:
                raise AlreadyResolvedError(
                    'This deferred has already been resolved: %r' % self)
            self._state = state
            self._result = result
            timer, self._timer = self._timer, None
            waiting, self._waiting = self._waiting, None

        if timer is not None:
            timer.cancel()

        for listener in waiting:
            self._notify(listener)

    def _notify(self, listener):
        child = listener.deferred
        if child.finished:
            # The chained Deferred has been cancelled meanwhile: its
            # consumer doesn't expect any result.
            self._mark_handled()
            return

        if self._state == self.REJECTED:
            callback = listener.on_rejected
        else:
            callback = listener.on_resolved

        if callback is not None:
            self._mark_handled()
            self._scheduler.call_soon(self._exec_callback, callback,
                                      self._result, child)
        elif self._state == self.REJECTED:
            child._rejection_source = self
            if child.reject(self._result, suppress_unhandled=True):
                self._mark_handled()
        else:
            child.resolve(self._result)

    def _mark_handled(self):
        self._handled = True
        if self._rejection_source is not None:
            self._rejection_source._mark_handled()

    @staticmethod
    def _exec_callback(callback, result, child):
        if child.finished:
            return
        try:
            new_result = callback(result)
        except Exception as error:
            child._settle_chained(child.REJECTED, error)
            return

        if is_thenable(new_result):
            def _on_resolved(value):
                child._settle_chained(child.RESOLVED, value)

            def _on_rejected(reason):
                child._settle_chained(child.REJECTED, reason)

            new_result.then(_on_resolved, _on_rejected)
        else:
            child._settle_chained(child.RESOLVED, new_result)

    def _settle_chained(self, state, value):
        """Settle a Deferred created by then(), unless it's been cancelled."""
        if self.finished:
            _logger.debug('%r already settled (cancelled?). Result of the '
                          'callback ignored: %r', self, value)
            return
        if state == self.RESOLVED:
            self.resolve(value)
        else:
            self.reject(value)

    def _check_handled(self):
        if self._handled:
            return

        reason = self._result
        if isinstance(reason, BaseException):
            _logger.error('Unhandled rejection of %r', self,
                          exc_info=(type(reason), reason,
                                    reason.__traceback__))
        else:
            _logger.error('Unhandled rejection of %r: %r', self, reason)

        if config.get('unhandled_rejection') == 'log':
            return
        if isinstance(reason, BaseException):
            raise reason
        raise UnhandledRejectionError(reason)

    def _inner_print(self):
        if self._state == self.REJECTED:
            state = 'R'
        elif self._state == self.RESOLVED:
            state = 'F'
        else:
            state = 'P'

        if self._previous:
            return '%s -> %s %s' % (self._previous._inner_print(), self._name,
                                    state)
        return '%s %s' % (self._name, state)

    def __repr__(self):
        return 'Deferred(%s)' % self._inner_print()
