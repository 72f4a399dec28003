# -*- coding: utf-8 -*-
"""Errors produced by the promise engine itself."""

from ..errors import Error


class PromiseError(Error):
    code = 'promise'
    default_message = 'Promise error'


class AlreadyResolvedError(PromiseError):
    """A Deferred has been resolved (or rejected) twice.

    It's always a programming error: a Deferred has a single owner, who
    settles it exactly once.
    """
    code = 'already-resolved'
    default_message = 'This deferred has already been resolved'


class CancelledError(PromiseError):
    """Rejection reason of a Deferred cancelled by `cancel()`.

    The message is the value returned by the canceller, if any.
    """
    code = 'cancelled'
    default_message = 'Promise has been cancelled'


class TimeoutError(CancelledError):
    """Rejection reason of a Deferred whose timeout has expired.

    Attributes:
        cancel_reason: value returned by the canceller when the Deferred was
            cancelled by the timeout. None if there is no canceller.
    """
    code = 'timeout'
    default_message = 'Promise has timeout'

    def __init__(self, message=None, cancel_reason=None, **data):
        CancelledError.__init__(self, message, **data)
        self.cancel_reason = cancel_reason


class GroupRejectedError(PromiseError):
    """At least one promise of a group has been rejected.

    Attributes:
        results (list): values and rejection reasons, in the order of the
            input promises.
        errors (dict): index of each rejected promise, mapped to its reason.
    """
    code = 'group-rejected'
    default_message = '%(count)s of %(total)s promises have been rejected'

    def __init__(self, results, errors):
        PromiseError.__init__(self, count=len(errors), total=len(results))
        self.results = results
        self.errors = errors


class UnhandledRejectionError(PromiseError):
    """A Deferred has been rejected with a non-exception value, and nobody
    has handled it.

    Attributes:
        reason: the original rejection value.
    """
    code = 'unhandled-rejection'
    default_message = 'Unhandled rejection: %(reason)r'

    def __init__(self, reason):
        PromiseError.__init__(self, reason=reason)
        self.reason = reason
