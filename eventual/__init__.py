# -*- coding: utf-8 -*-

from .__version__ import __version__  # noqa

from .common import config
from .common import log
from .promise import (Deferred, ManualScheduler, Promise, ThreadScheduler,
                      reduce_coroutine, wrap_promise)

__all__ = ['Deferred', 'ManualScheduler', 'Promise', 'ThreadScheduler',
           'reduce_coroutine', 'wrap_promise', 'init']


def init(config_path=None):
    """Load the config file and apply its log settings.

    Calling it is optional: without it, default settings are used.

    Args:
        config_path (str, optional): path of the ini file. By default, the
            file 'eventual.ini' in the user config directory is used.
    """
    config.load(config_path)
    log.set_debug_mode(config.get('debug_mode'))
    log.set_logs_level(config.get('log_levels'))
