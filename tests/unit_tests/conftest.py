# -*- coding: utf-8 -*-

import pytest

from altshift.common import config
from altshift.promise import EventLoop, set_scheduler


@pytest.fixture(autouse=True)
def loop():
    """Install a new EventLoop as default scheduler, for the test only.

    Returns:
        EventLoop: the loop executing the promise callbacks. Tests must run
            it explicitly (``loop.run()``, ``loop.run_until_complete()``).
    """
    event_loop = EventLoop()
    previous = set_scheduler(event_loop)
    yield event_loop
    set_scheduler(previous)


@pytest.fixture(autouse=True)
def config_file(tmpdir, monkeypatch):
    """Redirect the config file in a temporary folder, with no value set."""
    config_path = str(tmpdir.join('altshift.ini'))
    monkeypatch.setattr(config, '_get_config_file_path', lambda: config_path)
    config.reset()
    yield config_path
    config.reset()
