# -*- coding: utf-8 -*-
"""Promise-based reading and writing of streams.

A stream is any file-like object: a file opened with ``open()``, a socket
file, a pipe, ``io.BytesIO``... The blocking calls are executed in a
worker thread dedicated to the stream, so the calls of a same Reader (or
Writer) are always executed in order.

    >>> reader = altshift.io.read(process.stdout, encoding='utf-8')
    >>> reader.read().then(print)

    >>> writer = altshift.io.write(sock_file)
    >>> writer.write(b'start').then(lambda _: writer.write(b'the end!')) \\
    ...     .then(lambda _: writer.close())
"""

import codecs
from io import TextIOBase
import logging

from .errors import Error
from .promise import Deferred, ThreadPoolExecutor, get_scheduler, rejected

_logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


class StreamError(Error):
    code = 'stream-error'
    default_message = 'Stream is not writable'


def _is_closed(stream):
    return getattr(stream, 'closed', False)


class Reader(object):
    """Read a stream in background, chunk by chunk.

    The reading starts as soon as the Reader is created. Chunks are
    buffered until they are consumed by `read()`, or given to the callback
    of `for_each()`.

    Attributes:
        promise (Promise<None>): resolved at the end of the stream, or
            rejected if an error occurs. Each chunk is notified as a
            progress update to the callbacks registered on it.
    """

    def __init__(self, stream, encoding=None, chunk_size=DEFAULT_CHUNK_SIZE,
                 scheduler=None):
        """
        Args:
            stream (file-like): source of the data, with a ``read(size)``
                method.
            encoding (str, optional): if set, the bytes read are decoded.
                Has no effect on text streams.
            chunk_size (int, optional): maximum size of each read.
            scheduler (Scheduler, optional): scheduler of the promises.
        """
        self._stream = stream
        self._chunk_size = chunk_size
        self._decoder = None
        if encoding:
            self._decoder = codecs.getincrementaldecoder(encoding)()
        self._chunks = []
        self._receiver = None
        self._stop_order = False

        self._scheduler = scheduler or get_scheduler()
        self._finished = Deferred(self._cancel, self._scheduler,
                                  _name='READER')
        self.promise = self._finished.get_promise()

        self._executor = ThreadPoolExecutor(1, self._scheduler)
        self._executor.submit(self._pump).then(self._on_end, self._on_error)

    def is_valid(self):
        """Returns True if the stream can still be read."""
        stream = self._stream
        if self._finished.finished or _is_closed(stream):
            return False
        return not hasattr(stream, 'readable') or stream.readable()

    def read(self):
        """Read all the remaining data of the stream.

        Returns:
            Promise<str|bytes>: all the data not yet consumed, available at
                the end of the stream.
        """
        self._receiver = None
        return self._finished.then(self._consume_all)

    def for_each(self, callback):
        """Give each chunk of data to a callback, as soon as it's read.

        The data already buffered is given at once, in a single chunk.
        If the callback raises an exception, the reading is stopped and the
        returned promise is rejected.

        Args:
            callback (callable): receives each chunk.
        Returns:
            Promise<None>: resolved at the end of the stream.
        """
        if self._chunks:
            callback(self._consume())
        self._receiver = callback
        return self._finished.then(self._release_receiver)

    def _cancel(self):
        self._stop_order = True
        return 'Reading of the stream cancelled'

    def _pump(self):
        """Read the stream until the end. Executed in the worker thread."""
        while not self._stop_order:
            chunk = self._stream.read(self._chunk_size)
            if not chunk:
                break
            if self._decoder is not None and isinstance(chunk, bytes):
                chunk = self._decoder.decode(chunk)
                if not chunk:
                    continue
            self._scheduler.call_soon(self._on_chunk, chunk)

        if self._decoder is not None and not self._stop_order:
            tail = self._decoder.decode(b'', final=True)
            if tail:
                self._scheduler.call_soon(self._on_chunk, tail)

    def _on_chunk(self, chunk):
        if self._finished.finished:
            return
        self._finished.progress(chunk)
        if self._receiver is None:
            self._chunks.append(chunk)
            return
        try:
            self._receiver(chunk)
        except Exception as error:
            self._stop_order = True
            self._finished.reject(error)

    def _on_end(self, _result):
        self._executor.shutdown(wait=False)
        if not self._finished.finished:
            _logger.log(5, 'End of stream %r', self._stream)
            self._finished.resolve(None)

    def _on_error(self, error):
        self._executor.shutdown(wait=False)
        if not self._finished.finished:
            _logger.debug('Error while reading stream %r: %s', self._stream,
                          error)
            self._finished.reject(error)

    def _consume(self):
        if self._chunks:
            data = self._chunks[0][:0].join(self._chunks)
        elif self._decoder is not None or \
                isinstance(self._stream, TextIOBase):
            data = ''
        else:
            data = b''
        self._chunks = []
        return data

    def _consume_all(self, _result):
        return self._consume()

    def _release_receiver(self, _result):
        self._receiver = None


class Writer(object):
    """Write into a stream, in background.

    The writes are executed in order, one after the other.
    """

    def __init__(self, stream, encoding=None, scheduler=None):
        """
        Args:
            stream (file-like): destination, with a ``write(data)`` method.
            encoding (str, optional): if set, str data is encoded before
                being written. Useful for binary streams.
            scheduler (Scheduler, optional): scheduler of the promises.
        """
        self._stream = stream
        self._encoding = encoding
        self._executor = ThreadPoolExecutor(1, scheduler)
        self._closing = None

    def is_valid(self):
        """Returns True if the stream can still be written."""
        stream = self._stream
        if self._closing is not None or _is_closed(stream):
            return False
        return not hasattr(stream, 'writable') or stream.writable()

    def write(self, data):
        """Write data into the stream.

        Returns:
            Promise: resolved (with the value returned by the stream's
                ``write()``) when the data has been given to the stream.
                Rejected with a StreamError if the stream is not writable.
        """
        if not self.is_valid():
            return rejected(StreamError())
        if self._encoding and isinstance(data, str):
            data = data.encode(self._encoding)
        return self._executor.submit(self._stream.write, data)

    def flush(self):
        """Wait for all data to be written and flushed.

        Returns:
            Promise<None>: resolved when the previous writes are done.
        """
        if self._closing is not None:
            return self._closing
        return self._executor.submit(self._stream.flush)

    def close(self):
        """Close the stream after the pending writes.

        Returns:
            Promise<None>: resolved once the stream is flushed and closed.
        """
        if self._closing is None:
            self._closing = self._executor.submit(self._stream.close)
            self._executor.shutdown(wait=False)
        return self._closing


def read(stream, encoding=None, chunk_size=DEFAULT_CHUNK_SIZE,
         scheduler=None):
    """Create a Reader on a stream."""
    return Reader(stream, encoding, chunk_size, scheduler)


def write(stream, encoding=None, scheduler=None):
    """Create a Writer on a stream."""
    return Writer(stream, encoding, scheduler)
