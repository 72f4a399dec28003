# -*- coding: utf-8 -*-
"""Locations of the files written by altshift.

The config file and the log files live in the per-user folders given by
``appdirs``. The folders are created on demand.
"""

import errno
import logging
import os
import appdirs

_logger = logging.getLogger(__name__)


CONFIG_FILENAME = 'altshift.ini'
LOG_FILENAME = 'altshift.log'

_appdirs = appdirs.AppDirs(appname='altshift', appauthor=False, roaming=True)


def _ensure_dir_exists(dir_path):
    """Try to create the folder if it not exists.

    If an error occurs, a warning log is sent and the error is ignored.
    """
    try:
        os.makedirs(dir_path)
        _logger.debug('Created missing folder "%s"', dir_path)
    except OSError as e:
        if e.errno == errno.EEXIST and os.path.isdir(dir_path):
            pass
        else:
            _logger.warning('Unable to create the missing folder "%s"',
                            dir_path, exc_info=True)


def get_log_dir():
    """Returns the directory path containing altshift log files."""
    log_dir = _appdirs.user_log_dir
    _ensure_dir_exists(log_dir)
    return log_dir


def get_config_dir():
    """Returns the directory path containing altshift config files."""
    config_dir = _appdirs.user_config_dir
    _ensure_dir_exists(config_dir)
    return config_dir


def get_config_file():
    """Returns the path of the settings file read by `config.load()`."""
    return os.path.join(get_config_dir(), CONFIG_FILENAME)


def get_log_file(filename=None):
    """Returns the path of a log file in the log directory.

    Args:
        filename (str, optional): base name of the file. Only the last
            component of the name is kept, so the file can't be written
            outside of the log directory. Default to ``altshift.log``.
    """
    filename = os.path.basename(filename or LOG_FILENAME) or LOG_FILENAME
    return os.path.join(get_log_dir(), filename)
