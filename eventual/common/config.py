# -*- coding: utf-8 -*-

"""Manages settings and config file.

Manages the settings of the library.
Settings are loaded from a configuration file. If they don't exists, default
values are provided.
When an option is set, the config file is updated.

The module can be used without calling ``load()``: in this case, only the
default values (and the values set at runtime) are used.
"""

import configparser
import logging
from . import path as eventual_path

_logger = logging.getLogger(__name__)


# Default config dict. Values not present in this dict are not valid.
# Each entry contains the type expected, and the default value.
_default_config = {
    'debug_mode': {'type': bool, 'default': False},
    'log_levels': {'type': dict, 'default': {}},
    'default_scheduler': {'type': str, 'default': 'thread'},
    'resettle_log_level': {'type': str, 'default': 'WARNING'}
}

# Actual config parser
_config_parser = configparser.ConfigParser()
_config_parser.add_section('config')

# Path of the file loaded by ``load()``. None means the default location.
_config_file_path = None


def _get_config_file_path():
    if _config_file_path:
        return _config_file_path
    return eventual_path.get_config_file_path()


def load(path=None):
    """Find and load the config file.

    Args:
        path (str, optional): path of the ini file. By default, the file
            'eventual.ini' in the user config directory is used.
    """
    global _config_file_path

    _config_file_path = path
    config_file_path = _get_config_file_path()

    if not _config_parser.read(config_file_path):
        _logger.warning('Unable to load config file: %s', config_file_path)


def reset():
    """Forget all values loaded or set. Only defaults remain."""
    global _config_file_path

    _config_file_path = None
    _config_parser.remove_section('config')
    _config_parser.add_section('config')


def get(key):
    """Find and return a configuration entry

    If the entry is not specified in the config file, a default value is
    returned.

    Args:
        key (string): the entry key.
    Returns:
        The corresponding value found.
    Raises:
        KeyError: if the config entry doesn't exists.
    """
    if key not in _default_config:
        raise KeyError(key)
    try:
        if _default_config[key]['type'] is bool:
            return _config_parser.getboolean('config', key)
        elif _default_config[key]['type'] is dict:
            # Dict entries are in the form 'key=value;key2=value2'
            dict_str = _config_parser.get('config', key)
            result = {}
            for pair in filter(None, dict_str.split(';')):
                try:
                    (k, v) = pair.split('=')
                    result[k.strip()] = v.strip()
                except ValueError:
                    _logger.warning('Unable to parse pair key=value: "%s"',
                                    pair)
            return result
        else:
            return _config_parser.get('config', key)
    except configparser.NoOptionError:
        return _default_config[key]['default']
    except ValueError:
        _logger.warning('Invalid value for config entry "%s". The default '
                        'value will be used.', key)
        return _default_config[key]['default']


def set(key, value):
    """Set a configuration entry.

    Args:
        key (string): the entry key.
        value: the new value to set. It will be converted to string. A dict
            is written in the form 'key=value;key2=value2'. None removes the
            entry, restoring the default value.
    Raises:
        KeyError: if the config entry is not valid.
    """
    if key not in _default_config:
        raise KeyError(key)
    if value is None:
        _config_parser.remove_option('config', key)
    elif isinstance(value, dict):
        _config_parser.set('config', key, ';'.join(
            '%s=%s' % (k, v) for (k, v) in value.items()))
    else:
        _config_parser.set('config', key, str(value))

    config_file_path = _get_config_file_path()
    try:
        with open(config_file_path, 'w') as config_file:
            _config_parser.write(config_file)
        _logger.debug('Config file modified.')
    except IOError:
        _logger.warning('Unable to write in the config file', exc_info=True)
