# -*- coding: utf-8 -*-

import functools

from .deferred import Deferred
from .util import is_thenable


def reduce_coroutine(safeguard=False):
    """Decorator who converts a coroutine of promises into a single promise.

    The greatest interest is the ability to write a function in an
    synchronous-like style, using many asynchronous Promises.
    Whatever is the number of Promises or async calls used, the result will
    always be an unique Promise wrapping the whole process.

    Each thenable yielded by the generator is waited: its value is sent back
    into the generator, and its rejection reason is raised at the `yield`.
    The first non-thenable value yielded (or the value returned by the
    generator) is the result of the Promise.

    Args:
        safeguard (boolean): if true, use `Promise.safeguard()` on the
            resulting promise.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            """
            Args:
                *args
                **kwargs
            Returns:
                Promise<*>
            """
            df = Deferred(_name='COROUTINE %s' % func.__name__)
            promise = df.get_promise()
            if safeguard:
                promise.safeguard()

            try:
                # Create generator; Initialization phase
                gen = func(*args, **kwargs)
            except Exception as error:
                df.reject(error)
                return promise

            def _call_next_or_set_result(value):
                if is_thenable(value):
                    value.then(iter_next, iter_error)
                else:
                    gen.close()
                    df.resolve(value)

            def iter_next(resolved_value):
                try:
                    next_value = gen.send(resolved_value)
                except StopIteration as stop:
                    if stop.value is not None:
                        resolved_value = stop.value
                    return df.resolve(resolved_value)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            def iter_error(raised_error):
                try:
                    if isinstance(raised_error, BaseException):
                        next_value = gen.throw(raised_error)
                    else:
                        next_value = gen.throw(ValueError(raised_error))
                except StopIteration as stop:
                    if stop.value is not None:
                        return df.resolve(stop.value)
                    return df.reject(raised_error)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            # Start and resolve loop.
            try:
                first_value = next(gen)
            except StopIteration as stop:
                df.resolve(stop.value)
                return promise
            except Exception as error:
                df.reject(error)
                return promise
            _call_next_or_set_result(first_value)

            return promise

        return wrapper
    return decorator
