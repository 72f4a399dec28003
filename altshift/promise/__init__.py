# -*- coding: utf-8 -*-

from . import combinators
from .combinators import all_fail_fast, convert_callback_function, defer, \
    delay, execute, first, reduce, rejected, resolved, serial, when, \
    when_promise
from .decorators import wrap_promise
from .deferred import Deferred
from .errors import AlreadyResolvedError, CancelledError, \
    GroupRejectedError, PromiseError, TimeoutError, UnhandledRejectionError
from .promise import Promise, Thenable
from .reduce_coroutine import reduce_coroutine
from .scheduler import AsyncioScheduler, EventLoop, Scheduler, \
    get_scheduler, set_scheduler
from .thread_pool import ThreadPoolExecutor
from .util import is_cancellable, is_thenable

# `all`, `get`, `set` and `apply` would shadow builtins: they're only
# available through the `combinators` module.
__all__ = ['combinators', 'all_fail_fast', 'convert_callback_function',
           'defer', 'delay', 'execute', 'first', 'reduce', 'rejected',
           'resolved', 'serial', 'when', 'when_promise', 'wrap_promise',
           'Deferred', 'AlreadyResolvedError', 'CancelledError',
           'GroupRejectedError', 'PromiseError', 'TimeoutError',
           'UnhandledRejectionError', 'Promise', 'Thenable',
           'reduce_coroutine', 'AsyncioScheduler', 'EventLoop', 'Scheduler',
           'get_scheduler', 'set_scheduler', 'ThreadPoolExecutor',
           'is_cancellable', 'is_thenable']
