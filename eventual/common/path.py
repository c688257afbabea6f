# -*- coding: utf-8 -*-
"""Locations of the files used by eventual: config file and log files."""

import logging
import os
import appdirs

_logger = logging.getLogger(__name__)


_appdirs = appdirs.AppDirs(appname='eventual', appauthor=False)

CONFIG_FILENAME = 'eventual.ini'


def _ensure_dir_exists(dir_path):
    """Create the folder, and its parents, if needed.

    Returns:
        boolean: True if the folder exists when the function returns. If it
            can't be created, a warning is logged and False is returned.
    """
    try:
        os.makedirs(dir_path, exist_ok=True)
    except OSError:
        _logger.warning('Unable to create the missing folder "%s"',
                        dir_path, exc_info=True)
        return False
    return True


def get_log_dir():
    """Returns the directory path containing the log files."""
    log_dir = _appdirs.user_log_dir
    _ensure_dir_exists(log_dir)
    return log_dir


def get_config_dir():
    """Returns the directory path containing the config files."""
    config_dir = _appdirs.user_config_dir
    _ensure_dir_exists(config_dir)
    return config_dir


def get_config_file_path():
    """Default path of the config file, read by `eventual.init()`."""
    return os.path.join(get_config_dir(), CONFIG_FILENAME)


def get_log_file_path(filename):
    """Path of a log file named `filename`, in the user log directory."""
    return os.path.join(get_log_dir(), filename)
