# -*- coding: utf-8 -*-
"""Execution of callbacks on a future turn.

The promise engine never calls a continuation synchronously: every callback
is given to a scheduler, who runs it "soon", after the current code has
returned. The scheduler is a very small interface (``call_soon()`` and
``call_later()``) so the engine can run on top of any event loop.

Two implementations are provided:

- ``EventLoop``: a minimal, self-contained loop, with a FIFO queue of ready
  tasks and a heap of timers. Each call to ``run_once()`` is a "turn": it
  executes the tasks ready at this moment; tasks added meanwhile will be
  executed in the next turn.
- ``AsyncioScheduler``: an adapter to an ``asyncio`` event loop.

Unless specified, the promises use the default scheduler, returned by
``get_scheduler()``.
"""

from collections import deque
import heapq
import itertools
import logging
from threading import Condition, Lock
import time

from ..errors import NotImplementedMethodError
from .errors import TimeoutError, UnhandledRejectionError
from .util import is_thenable

_logger = logging.getLogger(__name__)


class TimerHandle(object):
    """Handle of a callback scheduled by `call_later()`.

    Attributes:
        when (float): monotonic time at which the callback is expected.
        cancelled (boolean): True if `cancel()` has been called.
    """

    def __init__(self, when, callback, args):
        self.when = when
        self.cancelled = False
        self._callback = callback
        self._args = args

    def cancel(self):
        """Prevent the callback to be executed.

        It has no effect if the callback has already been executed.
        """
        self.cancelled = True

    def _run(self):
        if not self.cancelled:
            self._callback(*self._args)

    def __repr__(self):
        return '<TimerHandle %s at %.3f%s>' % (
            getattr(self._callback, '__name__', '???'), self.when,
            ' cancelled' if self.cancelled else '')


class Scheduler(object):
    """Interface of the objects able to run callbacks on a future turn.

    Both methods must be callable from any thread.
    """

    def call_soon(self, callback, *args):
        """Execute ``callback(*args)`` on a future turn, as soon as possible.

        Callbacks scheduled by successive calls are executed in the same
        order.
        """
        raise NotImplementedMethodError(method='call_soon')

    def call_later(self, delay, callback, *args):
        """Execute ``callback(*args)`` after at least `delay` seconds.

        Returns:
            TimerHandle: object with a `cancel()` method.
        """
        raise NotImplementedMethodError(method='call_later')


class EventLoop(Scheduler):
    """Single-threaded event loop executing the scheduled callbacks.

    Callbacks can be scheduled from any thread, but are always executed in
    the thread calling `run()`, `run_once()` or `run_until_complete()`.

    If a callback raises an exception, the exception handler (see
    `set_exception_handler()`) is called. Without handler, the exception
    is propagated to the caller of `run()`: it's considered as fatal. The
    callbacks not yet executed are kept, and will be executed at the next
    run.
    """

    def __init__(self):
        self._condition = Condition()
        self._ready = deque()
        self._timers = []
        self._counter = itertools.count()
        self._stop_order = False
        self._exception_handler = None

    def call_soon(self, callback, *args):
        with self._condition:
            self._ready.append((callback, args))
            self._condition.notify_all()

    def call_later(self, delay, callback, *args):
        handle = TimerHandle(time.monotonic() + max(delay, 0), callback, args)
        with self._condition:
            heapq.heappush(self._timers,
                           (handle.when, next(self._counter), handle))
            self._condition.notify_all()
        return handle

    def set_exception_handler(self, handler):
        """Set the function called when a callback raises an exception.

        Args:
            handler (callable, optional): takes two arguments: the loop and
                the exception. If None, exceptions are propagated out of the
                loop.
        """
        self._exception_handler = handler

    def stop(self):
        """Ask `run()` to return after the current turn."""
        with self._condition:
            self._stop_order = True
            self._condition.notify_all()

    def has_pending_tasks(self):
        """Returns True if a callback or a (non-cancelled) timer is waiting."""
        with self._condition:
            self._drop_cancelled_timers()
            return bool(self._ready or self._timers)

    def run_once(self, timeout=None):
        """Execute one turn of the loop.

        If no callback is ready, wait until the next timer expires, a callback
        is scheduled (possibly from another thread), or `timeout` expires.

        Args:
            timeout (float, optional): maximum time to wait, in seconds.
                None means wait as long as needed.
        Returns:
            int: number of callbacks executed.
        """
        with self._condition:
            self._collect_timers()
            if not self._ready and not self._stop_order:
                delay = self._next_timer_delay()
                if delay is None or (timeout is not None and timeout < delay):
                    delay = timeout
                self._condition.wait(delay)
                self._collect_timers()
            batch = list(self._ready)
            self._ready.clear()

        for index, (callback, args) in enumerate(batch):
            try:
                callback(*args)
            except Exception as error:
                if self._exception_handler is None:
                    self._requeue(batch[index + 1:])
                    raise
                self._exception_handler(self, error)
            except BaseException:
                self._requeue(batch[index + 1:])
                raise
        return len(batch)

    def run(self):
        """Run the loop until there is nothing left to do, or `stop()`."""
        with self._condition:
            self._stop_order = False
        _logger.debug('Start event loop %s', self)

        while True:
            with self._condition:
                if self._stop_order:
                    break
                self._drop_cancelled_timers()
                if not self._ready and not self._timers:
                    break
            self.run_once()

        _logger.debug('Event loop %s stopped', self)

    def run_until_complete(self, value, timeout=None):
        """Run the loop until a thenable is settled, and returns its result.

        A call to `stop()` made meanwhile is ignored: the loop keeps running
        (and waiting) until the thenable is settled or `timeout` expires.

        Args:
            value: thenable, or direct value (returned as is).
            timeout (float, optional): maximum time to run, in seconds.
        Returns:
            the resolved value.
        Raises:
            TimeoutError: if the thenable is still pending after `timeout`.
            *: the rejection reason, if the thenable is rejected.
        """
        if not is_thenable(value):
            return value

        outcome = {}

        def on_resolved(result):
            outcome['result'] = result

        def on_rejected(reason):
            outcome['error'] = reason

        value.then(on_resolved, on_rejected)

        deadline = None
        if timeout is not None:
            deadline = time.monotonic() + timeout

        while not outcome:
            # stop() only concerns `run()`.
            with self._condition:
                self._stop_order = False
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError('Loop timeout while waiting for %r'
                                       % (value,))
            self.run_once(remaining)

        if 'error' in outcome:
            error = outcome['error']
            if isinstance(error, BaseException):
                raise error
            raise UnhandledRejectionError(error)
        return outcome['result']

    def _requeue(self, tasks):
        with self._condition:
            self._ready.extendleft(reversed(tasks))

    def _drop_cancelled_timers(self):
        while self._timers and self._timers[0][2].cancelled:
            heapq.heappop(self._timers)

    def _collect_timers(self):
        now = time.monotonic()
        while self._timers and self._timers[0][0] <= now:
            handle = heapq.heappop(self._timers)[2]
            if not handle.cancelled:
                self._ready.append((handle._run, ()))

    def _next_timer_delay(self):
        self._drop_cancelled_timers()
        if not self._timers:
            return None
        return max(self._timers[0][0] - time.monotonic(), 0)

    def __repr__(self):
        return '<EventLoop ready=%s timers=%s>' % (len(self._ready),
                                                  len(self._timers))


class AsyncioScheduler(Scheduler):
    """Scheduler delegating to an asyncio event loop.

    The callbacks are executed by the asyncio loop, which must be running
    (or be run later) for the promises to progress.
    """

    def __init__(self, loop):
        """
        Args:
            loop (asyncio.AbstractEventLoop): the target loop.
        """
        self._loop = loop

    def call_soon(self, callback, *args):
        self._loop.call_soon_threadsafe(callback, *args)

    def call_later(self, delay, callback, *args):
        handle = TimerHandle(self._loop.time() + max(delay, 0), callback,
                             args)
        self._loop.call_soon_threadsafe(self._loop.call_at, handle.when,
                                        handle._run)
        return handle


_default_scheduler = None
_default_scheduler_lock = Lock()


def get_scheduler():
    """Returns the default scheduler, creating an EventLoop if needed."""
    global _default_scheduler

    with _default_scheduler_lock:
        if _default_scheduler is None:
            _default_scheduler = EventLoop()
        return _default_scheduler


def set_scheduler(scheduler):
    """Replace the default scheduler.

    Deferred objects already created keep the scheduler they have.

    Args:
        scheduler (Scheduler, optional): the new default scheduler. If None,
            a new EventLoop will be created at the next `get_scheduler()`.
    Returns:
        Scheduler: the previous default scheduler (can be None).
    """
    global _default_scheduler

    with _default_scheduler_lock:
        previous = _default_scheduler
        _default_scheduler = scheduler
    return previous
