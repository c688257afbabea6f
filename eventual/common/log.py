# -*- coding: utf-8 -*-

"""Configuration module of the logs.

This module configure the python ``logging`` module, in order to have useful
and easy to activate logs for programs built on top of eventual.

Log entries are displayed to the output console, and optionally written in a
file of the user log directory.
"""

import logging

from . import path as eventual_path


def _get_file_handler(filename):
    """Open a new file for using as a log output.

    Args:
        filename (str): name of the log file. Ex: 'eventual.log'
    Returns:
        FileHandler: a valid fileHandler using the log file, or None if the
            file creation has failed.
    """
    try:
        log_path = eventual_path.get_log_file_path(filename)
        return logging.FileHandler(log_path, mode='a', encoding='utf-8')
    except (OSError, IOError):
        logging.getLogger(__name__).warning('Unable to create the log file',
                                            exc_info=True)
        return None


class Context(object):
    """Context class used to open and close log handlers.

    Example:

        >>> with Context():
        ...     logging.getLogger('eventual').info('Logs are displayed.')
    """

    date_format = '%Y-%m-%d %H:%M:%S'
    string_format = '%(asctime)s %(levelname)-7s %(name)s - %(message)s'

    def __init__(self, filename=None):
        """Prepare a new log context.

        Args:
            filename (str, optional): name of the log file, created in the
                user log directory. If not set, logs are only displayed on
                the console.
        """
        self._filename = filename
        self._handlers = []
        self._previous_level = None

    def __enter__(self):
        """Open the log file and prepare the logging module."""
        root_logger = logging.getLogger()
        self._previous_level = root_logger.level

        formatter = logging.Formatter(fmt=self.string_format,
                                      datefmt=self.date_format)

        stdout_handler = logging.StreamHandler()
        stdout_handler.setFormatter(formatter)
        self._handlers.append(stdout_handler)

        if self._filename:
            file_handler = _get_file_handler(self._filename)
            if file_handler:
                file_handler.setFormatter(formatter)
                self._handlers.append(file_handler)

        for handler in self._handlers:
            root_logger.addHandler(handler)

        # Before any configuration, all messages should be displayed.
        set_debug_mode(True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Release resources (log files, ...)"""
        logging.getLogger(__name__).debug('Stop logger ...')
        root_logger = logging.getLogger()
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        del self._handlers[:]
        root_logger.setLevel(self._previous_level)


def set_logs_level(levels):
    """Configure a fine-grained log levels for the different modules.

    Args:
        levels (dict): A dict associating a module name and a log
            level. A log level can be a number or a str representing one of the
            logging levels (DEBUG, WARNING, ...). The level name will be
            converted to uppercase.
            Invalids values will be ignored.

    Example:

        >>> # Accept DEBUG logs only for the scheduler module
        >>> set_logs_level({'eventual': 'info',
        ...                 'eventual.promise.scheduler': 'debug'})
    """
    for (module, level) in levels.items():
        try:
            if isinstance(level, str):
                level = level.upper()
            logging.getLogger(module).setLevel(level)
        except (TypeError, ValueError):
            logger = logging.getLogger(__name__)
            logger.warning('Invalid log level "%s" for logger "%s". '
                           'Will be ignored.',
                           level, module)


def set_debug_mode(debug):
    """Set, or unset the debug log level.

    Note: modules others than eventual.* are not set to DEBUG, even in DEBUG
    mode. If needed, their level can be set by ``set_logs_level()``.

    Args:
        debug (boolean): if True, the eventual log level will be set to DEBUG.
            If False, it will be set to INFO.
    """
    if debug:
        logging.getLogger().setLevel(logging.INFO)
        logging.getLogger('eventual').setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger('eventual').setLevel(logging.INFO)


def reset():
    """Reset the root logger (remove handlers and filters)."""
    logger = logging.getLogger()

    for h in logger.handlers[:]:
        logger.removeHandler(h)
    for f in logger.filters[:]:
        logger.removeFilter(f)
