# -*- coding: utf-8 -*-
"""Asynchronous filesystem operations.

Each function executes the blocking call in a shared thread pool and
returns a Promise of the result. Errors (``OSError`` and subclasses) are
transmitted as rejection reasons.

    >>> from altshift import fs
    >>> fs.read_file('notes.txt', encoding='utf-8').then(print)
"""

import io
import logging
import os
from threading import Lock

from .promise import Deferred, ThreadPoolExecutor, get_scheduler

_logger = logging.getLogger(__name__)

_executor = None
_executor_lock = Lock()


def _get_executor():
    global _executor

    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor()
        return _executor


def shutdown(wait=True):
    """Release the thread pool.

    A new pool is created if another operation is requested after.
    """
    global _executor

    with _executor_lock:
        executor, _executor = _executor, None
    if executor is not None:
        _logger.debug('Shutdown of the filesystem thread pool')
        executor.shutdown(wait)


def _submit(callback, *args, **kwargs):
    return _get_executor().submit(callback, *args, **kwargs)


def _read_all(path, encoding):
    mode = 'r' if encoding else 'rb'
    with io.open(path, mode, encoding=encoding) as f:
        return f.read()


def _read_chunks(path, encoding, chunk_size, on_chunk):
    mode = 'r' if encoding else 'rb'
    chunks = []
    with io.open(path, mode, encoding=encoding) as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            chunks.append(chunk)
            on_chunk(chunk)
    return ('' if encoding else b'').join(chunks)


def read_file(path, encoding=None, chunk_size=None):
    """Read the whole content of a file.

    Args:
        path (str): file to read.
        encoding (str, optional): if set, the file is read in text mode and
            decoded; else the content is returned as bytes.
        chunk_size (int, optional): if set, the file is read by blocks of
            this size (in characters in text mode), and each block is
            notified as a progress update.
    Returns:
        Promise<str|bytes>: the file content.
    """
    if not chunk_size:
        return _submit(_read_all, path, encoding)

    scheduler = get_scheduler()
    task = []

    def _cancel():
        if task:
            task[0].cancel()
        return 'Reading of %s cancelled' % path

    df = Deferred(_cancel, scheduler, _name='READ %s' % path)

    def _on_chunk(chunk):
        scheduler.call_soon(df.progress, chunk)

    def _on_resolved(content):
        if not df.finished:
            df.resolve(content)

    def _on_rejected(error):
        if not df.finished:
            df.reject(error)

    task.append(_submit(_read_chunks, path, encoding, chunk_size, _on_chunk))
    task[0].then(_on_resolved, _on_rejected)
    return df.get_promise()


def _write(path, data, mode, encoding):
    if isinstance(data, bytes):
        mode += 'b'
        encoding = None
    with io.open(path, mode, encoding=encoding) as f:
        f.write(data)


def write_file(path, data, encoding='utf-8'):
    """Write data in a file, replacing its previous content.

    Args:
        path (str): target file. It's created if needed.
        data (str|bytes): content to write. `encoding` is used only for str.
    Returns:
        Promise<None>
    """
    return _submit(_write, path, data, 'w', encoding)


def append_file(path, data, encoding='utf-8'):
    """Append data at the end of a file (created if needed)."""
    return _submit(_write, path, data, 'a', encoding)


def stat(path):
    """Returns: Promise<os.stat_result>"""
    return _submit(os.stat, path)


def listdir(path):
    """Returns: Promise<list of str>: names of the directory's entries."""
    return _submit(os.listdir, path)


def exists(path):
    return _submit(os.path.exists, path)


def is_dir(path):
    return _submit(os.path.isdir, path)


def makedirs(path, exist_ok=True):
    """Create a directory and all its missing parents."""
    return _submit(os.makedirs, path, exist_ok=exist_ok)


def remove(path):
    """Delete a file."""
    return _submit(os.remove, path)


def rename(src, dst):
    """Move a file or a directory, replacing the destination if any."""
    return _submit(os.replace, src, dst)


def rmdir(path):
    """Delete an empty directory."""
    return _submit(os.rmdir, path)
