# -*- coding: utf-8 -*-

from concurrent.futures import ThreadPoolExecutor as Executor
import logging

from ..common import config
from .deferred import Deferred
from .scheduler import get_scheduler

_logger = logging.getLogger(__name__)


class ThreadPoolExecutor(object):
    """Execute callables asynchronously on demand, in another threads.

    The results are transmitted through the scheduler: the promises are
    always settled in the scheduler's thread, never in a worker thread.
    """

    def __init__(self, max_workers=None, scheduler=None):
        """Initialize the thread pool

        Args:
            max_workers (int, optional): The maximum number of threads that
                can be used to execute the given calls. Default to the config
                entry `thread_pool_workers`.
            scheduler (Scheduler, optional): scheduler of the promises. If
                not set, the default scheduler at the time of each
                `submit()` is used.
        """
        if max_workers is None:
            max_workers = config.get('thread_pool_workers')
        self._scheduler = scheduler
        self._executor = Executor(max_workers)

    def submit(self, callback, *args, **kwargs):
        """Schedule the callable to be executed and return a Promise.

        The Promise can be cancelled as long as the task has not started.

        Args:
            callback (callable): callback who will run in another thread.
            *args: argument passed to callback.
            **kwargs: keywords arguments passed to callback.
        Returns:
            Promise: Promise who resolve after the callback has been executed.
                It's fulfilled with the value returned by the callback.
                If the callback raise an exception, the promise is rejected
                with this exception.
        """
        name = getattr(callback, '__name__', '???')
        scheduler = self._scheduler or get_scheduler()
        future_holder = []

        def _cancel_future():
            if future_holder and not future_holder[0].cancel():
                _logger.debug('Task %s already running: it will not be '
                              'interrupted.', name)
            return 'Task %s cancelled' % name

        df = Deferred(_cancel_future, scheduler,
                      _name='THREAD %s' % name)

        def _on_future_done(f):
            if not f.cancelled():
                scheduler.call_soon(self._settle, df, f)

        f = self._executor.submit(callback, *args, **kwargs)
        future_holder.append(f)
        f.add_done_callback(_on_future_done)

        return df.get_promise()

    @staticmethod
    def _settle(df, f):
        if df.finished:
            # cancelled while the task was running.
            return
        error = f.exception()
        if error is None:
            df.resolve(f.result())
        else:
            df.reject(error)

    def shutdown(self, wait=True):
        """Release the resources. No more task can be submitted after."""
        self._executor.shutdown(wait)

    def __enter__(self):
        return self

    def __exit__(self, _type, _value, _tb):
        self.shutdown()
