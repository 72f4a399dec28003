#!/usr/bin/env python
# -*- coding: utf-8 -*-

import logging
import os
import sys

import pytest

from altshift.common import path
from altshift.common.path import _ensure_dir_exists

"""### TEST CASES ###
    _ensure_dir_exists, dir exists
    _ensure_dir_exists, dir does not exist, allow to create
    _ensure_dir_exists, dir does not exist, not allow to create

    get_*_dir, returns an existing folder
    get_config_file, get_log_file: file names inside the folders
"""


class TestEnsure_dir_exists(object):

    def test_dir_already_exists(self, tmpdir, caplog):
        _ensure_dir_exists(str(tmpdir))
        assert caplog.records == []

    def test_dir_does_not_exist_and_allowed_to_create(self, tmpdir):
        new_path = str(tmpdir.join('a', 'b'))
        assert not os.path.exists(new_path)
        _ensure_dir_exists(new_path)
        assert os.path.isdir(new_path)

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason='do not '
                        'know how to forbid a directory creation on windows')
    def test_dir_does_not_exist_and_not_allowed_to_create(self, tmpdir,
                                                          caplog):
        # A regular file can't contain a folder.
        file_path = tmpdir.join('file')
        file_path.write('content')

        with caplog.at_level(logging.WARNING):
            _ensure_dir_exists(str(file_path.join('folder')))
        assert 'Unable to create the missing folder' in caplog.text


class TestAppDirs(object):

    @pytest.fixture(autouse=True)
    def user_dirs(self, tmpdir, monkeypatch):
        for attr in ('user_log_dir', 'user_config_dir'):
            monkeypatch.setattr(type(path._appdirs), attr,
                                str(tmpdir.join(attr)))

    @pytest.mark.parametrize('get_dir', [path.get_log_dir,
                                         path.get_config_dir])
    def test_get_dir(self, get_dir):
        dir_path = get_dir()
        assert os.path.isdir(dir_path)

    def test_get_config_file(self, tmpdir):
        assert path.get_config_file() == \
            str(tmpdir.join('user_config_dir', 'altshift.ini'))

    def test_get_log_file_default_name(self, tmpdir):
        assert path.get_log_file() == \
            str(tmpdir.join('user_log_dir', 'altshift.log'))

    def test_get_log_file_stays_in_log_dir(self, tmpdir):
        assert path.get_log_file('../../other.log') == \
            str(tmpdir.join('user_log_dir', 'other.log'))
