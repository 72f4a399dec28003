# -*- coding: utf-8 -*-

import threading

import pytest

from altshift.common import config
from altshift.promise import CancelledError, Deferred, ThreadPoolExecutor


class MyException(Exception):
    pass


class TestThreadPoolExecutor(object):

    def test_small_task(self, loop):
        with ThreadPoolExecutor(1) as executor:
            def task(arg):
                return 'OK %s' % arg

            p = executor.submit(task, 'ARG')
            assert loop.run_until_complete(p, 5) == 'OK ARG'

    def test_task_failure(self, loop):
        with ThreadPoolExecutor(1) as executor:
            def task(arg):
                raise MyException

            p = executor.submit(task, 'ARG')
            with pytest.raises(MyException):
                loop.run_until_complete(p, 5)

    def test_settlement_in_loop_thread(self, loop):
        """The callbacks are executed by the loop, not by the worker."""
        threads = []
        with ThreadPoolExecutor(1) as executor:
            def task():
                threads.append(threading.current_thread())

            p = executor.submit(task)
            p = p.then(lambda _: threads.append(threading.current_thread()))
            loop.run_until_complete(p, 5)

        assert threads[0] is not threading.current_thread()
        assert threads[1] is threading.current_thread()

    def test_cancel_pending_task(self, loop):
        started = threading.Event()
        release = threading.Event()
        calls = []

        with ThreadPoolExecutor(1) as executor:
            def blocking_task():
                started.set()
                release.wait(5)

            executor.submit(blocking_task)
            started.wait(5)

            p = executor.submit(calls.append, 'never')
            assert p.cancellable
            errors = []
            p.then(None, errors.append)
            p.cancel()
            release.set()

            loop.run()
            assert isinstance(errors[0], CancelledError)
        assert calls == []

    def test_cancel_running_task(self, loop):
        """A running task is not interrupted, but its result is ignored."""
        started = threading.Event()
        release = threading.Event()

        with ThreadPoolExecutor(1) as executor:
            def blocking_task():
                started.set()
                release.wait(5)
                return 'ignored'

            p = executor.submit(blocking_task)
            started.wait(5)
            errors = []
            p.then(None, errors.append)
            p.cancel()
            release.set()

        loop.run()
        assert isinstance(errors[0], CancelledError)
        assert p.state == Deferred.REJECTED

    def test_default_number_of_workers(self, loop):
        config.set('thread_pool_workers', 2)
        with ThreadPoolExecutor() as executor:
            assert executor._executor._max_workers == 2

    def test_explicit_scheduler(self, loop):
        other_loop = type(loop)()
        with ThreadPoolExecutor(1, scheduler=other_loop) as executor:
            p = executor.submit(lambda: 'OK')
            assert other_loop.run_until_complete(p, 5) == 'OK'
