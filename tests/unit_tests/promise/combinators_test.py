# -*- coding: utf-8 -*-

from types import SimpleNamespace

import pytest

from altshift.promise import CancelledError, Deferred, GroupRejectedError, \
    combinators


class Err(Exception):
    pass


class FakeThenable(object):
    """Minimal thenable, not related to the Deferred class."""

    def __init__(self, value):
        self.value = value

    def then(self, on_resolved=None, on_rejected=None):
        return combinators.resolved(on_resolved(self.value))


class BrokenThenable(object):

    def then(self, on_resolved=None, on_rejected=None):
        raise Err()


class TestResolvedRejected(object):

    def test_resolved(self, loop):
        assert loop.run_until_complete(combinators.resolved(3)) == 3

    def test_resolved_with_thenable(self):
        p = Deferred().get_promise()
        assert combinators.resolved(p) is p

    def test_rejected(self, loop):
        error = Err()
        errors = []
        combinators.rejected(error).then(None, errors.append)

        loop.run()
        assert errors == [error]

    def test_defer(self):
        df = combinators.defer()
        assert isinstance(df, Deferred)
        assert df.state == Deferred.PENDING


class TestWhen(object):

    def test_when_direct_value(self, loop):
        p = combinators.when(3, lambda v: v * 2)
        assert loop.run_until_complete(p) == 6

    def test_when_direct_value_without_callback(self, loop):
        assert loop.run_until_complete(combinators.when('value')) == 'value'

    def test_when_promise(self, loop):
        df = Deferred()
        p = combinators.when(df.get_promise(), lambda v: v + 1)
        df.resolve(1)
        assert loop.run_until_complete(p) == 2

    def test_when_callback_raising_error(self, loop):
        def callback(value):
            raise Err()

        with pytest.raises(Err):
            loop.run_until_complete(combinators.when(3, callback))

    def test_when_foreign_thenable(self, loop):
        p = combinators.when(FakeThenable(2), lambda v: v + 1)
        assert loop.run_until_complete(p) == 3

    def test_when_promise_broken_thenable(self, loop):
        p = combinators.when_promise(BrokenThenable(), lambda v: v)
        with pytest.raises(Err):
            loop.run_until_complete(p)


class TestProperties(object):

    def test_get_on_value(self, loop):
        p = combinators.get({'key': 'value'}, 'key')
        assert loop.run_until_complete(p) == 'value'

    def test_get_on_promise(self, loop):
        p = combinators.get(combinators.resolved(SimpleNamespace(a=1)), 'a')
        assert loop.run_until_complete(p) == 1

    def test_set(self, loop):
        obj = SimpleNamespace()
        p = combinators.set(combinators.resolved(obj), 'a', 4)
        assert loop.run_until_complete(p) == 4
        assert obj.a == 4

    def test_apply(self, loop):
        p = combinators.apply('abc', 'upper')
        assert loop.run_until_complete(p) == 'ABC'

    def test_apply_with_args(self, loop):
        p = combinators.apply(combinators.resolved([3, 1, 2]), 'index', (2,))
        assert loop.run_until_complete(p) == 2


class TestAll(object):

    def test_all_keeps_the_order(self, loop):
        df1, df3 = Deferred(), Deferred()
        p = combinators.all([df1.get_promise(), 2, df3.get_promise()])

        df3.resolve(3)
        df1.resolve(1)
        assert loop.run_until_complete(p) == [1, 2, 3]

    def test_all_empty_list(self, loop):
        assert loop.run_until_complete(combinators.all([])) == []

    def test_all_varargs(self, loop):
        p = combinators.all(combinators.resolved(1), 2)
        assert loop.run_until_complete(p) == [1, 2]

    def test_all_not_iterable(self):
        with pytest.raises(TypeError):
            combinators.all(5)

    def test_all_waits_all_promises_on_failure(self, loop):
        df1, df2 = Deferred(), Deferred()
        errors = []
        combinators.all([df1.get_promise(), df2.get_promise()]) \
            .then(None, errors.append)

        error = Err()
        df1.reject(error)
        loop.run()
        assert errors == []

        df2.resolve(2)
        loop.run()
        assert isinstance(errors[0], GroupRejectedError)
        assert errors[0].errors == {0: error}
        assert errors[0].results == [error, 2]
        assert str(errors[0]) == '1 of 2 promises have been rejected'

    def test_all_fail_fast(self, loop):
        df1, df2 = Deferred(), Deferred()
        errors = []
        combinators.all_fail_fast([df1.get_promise(), df2.get_promise()]) \
            .then(None, errors.append)

        error = Err()
        df1.reject(error)
        loop.run()
        assert errors == [error]

        df2.reject(Err())
        loop.run()
        assert errors == [error]

    def test_all_fail_fast_success(self, loop):
        p = combinators.all_fail_fast([combinators.resolved('a'), 'b'])
        assert loop.run_until_complete(p) == ['a', 'b']


class TestFirst(object):

    def test_first_settled_wins(self, loop):
        df1, df2 = Deferred(), Deferred()
        result = []
        combinators.first([df1.get_promise(), df2.get_promise()]) \
            .then(result.append)

        df2.resolve('second')
        loop.run()
        df1.resolve('first')
        loop.run()
        assert result == ['second']

    def test_first_direct_value(self, loop):
        df = Deferred()
        p = combinators.first([df.get_promise(), 'direct'])
        assert loop.run_until_complete(p) == 'direct'

    def test_first_rejected(self, loop):
        df1, df2 = Deferred(), Deferred()
        p = combinators.first([df1.get_promise(), df2.get_promise()])

        df1.reject(Err())
        with pytest.raises(Err):
            loop.run_until_complete(p)

    def test_first_empty_list(self):
        with pytest.raises(ValueError):
            combinators.first([])

    def test_first_not_iterable(self):
        with pytest.raises(TypeError):
            combinators.first(None)


def _append_step(n):
    def _step(path):
        return combinators.resolved('%s%s/' % (path, n))
    return _step


class TestReduce(object):

    def test_reduce(self, loop):
        steps = [_append_step(1), _append_step(2), _append_step(3)]
        p = combinators.reduce(steps, '/')
        assert loop.run_until_complete(p) == '/1/2/3/'

    def test_reduce_with_delays(self, loop):
        """Each step waits the previous one, whatever its duration."""
        def delayed_step(n, seconds):
            def _step(path):
                return combinators.delay(seconds) \
                    .then(lambda _: '%s%s/' % (path, n))
            return _step

        steps = [delayed_step(1, 0.03), delayed_step(2, 0.01),
                 delayed_step(3, 0.02)]
        p = combinators.reduce(steps, '/')
        assert loop.run_until_complete(p, 5) == '/1/2/3/'

    def test_reduce_direct_values(self, loop):
        p = combinators.reduce([lambda v: v + 1, lambda v: v * 10], 1)
        assert loop.run_until_complete(p) == 20

    def test_reduce_many_direct_values(self, loop):
        errors = []
        loop.set_exception_handler(lambda _loop, err: errors.append(err))
        p = combinators.reduce([lambda v: v + 1] * 5000, 0)

        assert loop.run_until_complete(p) == 5000
        assert errors == []

    def test_reduce_step_returning_broken_thenable(self, loop):
        p = combinators.reduce([lambda v: BrokenThenable()], 0)
        with pytest.raises(Err):
            loop.run_until_complete(p)

    def test_reduce_waits_each_step(self, loop):
        df = Deferred()
        calls = []

        def first_step(value):
            calls.append('first')
            return df.get_promise()

        def second_step(value):
            calls.append(value)
            return value

        p = combinators.reduce([first_step, second_step])
        loop.run()
        assert calls == ['first']

        df.resolve('second')
        assert loop.run_until_complete(p) == 'second'
        assert calls == ['first', 'second']

    def test_reduce_failure_stops_the_sequence(self, loop):
        calls = []

        def failing_step(value):
            raise Err()

        p = combinators.reduce([failing_step, calls.append])
        with pytest.raises(Err):
            loop.run_until_complete(p)
        assert calls == []

    def test_reduce_no_function(self, loop):
        assert loop.run_until_complete(combinators.reduce([], 'init')) == \
            'init'

    def test_reduce_not_iterable(self):
        with pytest.raises(TypeError):
            combinators.reduce(5)

    def test_serial_is_reduce(self):
        assert combinators.serial is combinators.reduce


class TestDelay(object):

    def test_delay(self, loop):
        p = combinators.delay(0.01)
        assert p.state == Deferred.PENDING
        assert loop.run_until_complete(p, 5) is None

    def test_cancel_delay(self, loop):
        p = combinators.delay(10)
        errors = []
        p.then(None, errors.append)

        p.cancel()
        loop.run()
        assert isinstance(errors[0], CancelledError)
        assert not loop.has_pending_tasks()


class TestCallbackFunctions(object):

    def test_execute(self, loop):
        def add(a, b, callback):
            callback(None, a + b)

        assert loop.run_until_complete(combinators.execute(add, 1, 2)) == 3

    def test_execute_with_error(self, loop):
        def fail(callback):
            callback(Err())

        with pytest.raises(Err):
            loop.run_until_complete(combinators.execute(fail))

    def test_execute_several_results(self, loop):
        def several(callback):
            callback(None, 1, 2)

        p = combinators.execute(several)
        assert loop.run_until_complete(p) == [1, 2]

    def test_execute_function_raising_error(self, loop):
        def fail(callback):
            raise Err()

        with pytest.raises(Err):
            loop.run_until_complete(combinators.execute(fail))

    def test_execute_asynchronous_callback(self, loop):
        def later(value, callback):
            loop.call_later(0.01, callback, None, value)

        p = combinators.execute(later, 'OK')
        assert loop.run_until_complete(p, 5) == 'OK'

    def test_convert_callback_function(self, loop):
        def add(a, b, callback):
            callback(None, a + b)

        promise_add = combinators.convert_callback_function(add)
        assert promise_add.__name__ == 'add'
        assert loop.run_until_complete(promise_add(1, 2)) == 3

    def test_converted_function_with_callback(self, loop):
        def add(a, b, callback):
            callback(None, a + b)

        results = []
        promise_add = combinators.convert_callback_function(add)
        promise_add(1, 2, callback=lambda err, res: results.append((err, res)))

        loop.run()
        assert results == [(None, 3)]
