"""
Settings loader for margin projections.

Settings are read from a YAML file over built-in defaults:

    projection:
      alpha: 0.05
      ref_index: 0
      cur_index: -1
      method: goodman
      reference_candidate: null
    candidates:
      a: Smith
      b: Jones

Usage:
    from marginci.config import Config

    config = Config('marginci.yaml')
    alpha = config.alpha
"""
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
import yaml  # type: ignore
from loguru import logger
from mypy_extensions import TypedDict
from marginci.common import check_alpha
from marginci.errors import ConfigError
from marginci.intervals import METHODS

CONFIG_ENV_VAR = 'MARGINCI_CONFIG_PATH'
CONFIG_FILENAME = 'marginci.yaml'

ProjectionSettings = TypedDict('ProjectionSettings', {
    'alpha': float,
    'ref_index': int,
    'cur_index': int,
    'method': str,
    'reference_candidate': Optional[str]
})  # pylint:disable=invalid-name


class Config:
    """ Settings for a margin projection run. """

    DEFAULTS: Dict[str, Any] = {
        'projection': {
            'alpha': 0.05,
            'ref_index': 0,
            'cur_index': -1,
            'method': 'goodman',
            'reference_candidate': None
        },
        'candidates': {
            'a': None,
            'b': None
        }
    }

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        :param config_file: Path to a YAML settings file. If ``None``, looks
            for:
                1. the file named by ``MARGINCI_CONFIG_PATH``
                2. ``marginci.yaml`` in the current directory
            and falls back to the defaults if neither exists.
        """
        if config_file is None:
            env_config = os.environ.get(CONFIG_ENV_VAR)
            if env_config and Path(env_config).exists():
                config_file = env_config
                logger.debug(f"Using config from environment: {config_file}")
            elif Path(CONFIG_FILENAME).exists():
                config_file = CONFIG_FILENAME

        self.data = deepcopy(self.DEFAULTS)
        self.config_path = None  # type: Optional[Path]
        if config_file is not None:
            self.config_path = Path(config_file).resolve()
            logger.debug(f"Loading config from: {self.config_path}")
            with open(self.config_path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ConfigError('Settings file {} must contain a mapping'
                                  .format(self.config_path))
            _merge(self.data, loaded)
        else:
            logger.debug('No settings file found; using defaults')
        self._validate()

    def _validate(self) -> None:
        """ Checks every setting and normalizes types where needed. """
        for section in ('projection', 'candidates'):
            if not isinstance(self.data.get(section), dict):
                raise ConfigError(
                    'Section {!r} must be a mapping'.format(section))
        projection = self.data['projection']
        projection['alpha'] = check_alpha(projection['alpha'])
        for key in ('ref_index', 'cur_index'):
            value = projection[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError('{} must be an integer, got {!r}'.format(
                    key, value))
        if projection['method'] not in METHODS:
            raise ConfigError('method must be one of {}, got {!r}'.format(
                METHODS, projection['method']))
        for key, value in [('reference_candidate',
                            projection['reference_candidate']),
                           ('candidates.a', self.data['candidates']['a']),
                           ('candidates.b', self.data['candidates']['b'])]:
            if value is not None and not isinstance(value, str):
                raise ConfigError('{} must be a string, got {!r}'.format(
                    key, value))

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """ Returns ``key`` from ``section``, or ``default`` if unset. """
        return self.data.get(section, {}).get(key, default)

    @property
    def projection(self) -> ProjectionSettings:
        return {
            'alpha': self.alpha,
            'ref_index': self.ref_index,
            'cur_index': self.cur_index,
            'method': self.method,
            'reference_candidate': self.reference_candidate
        }

    @property
    def alpha(self) -> float:
        return self.data['projection']['alpha']

    @property
    def ref_index(self) -> int:
        return self.data['projection']['ref_index']

    @property
    def cur_index(self) -> int:
        return self.data['projection']['cur_index']

    @property
    def method(self) -> str:
        return self.data['projection']['method']

    @property
    def reference_candidate(self) -> Optional[str]:
        return self.data['projection']['reference_candidate']

    @property
    def candidates(self) -> Tuple[Optional[str], Optional[str]]:
        """ The two candidates whose margin is projected, as ``(a, b)``. """
        return self.data['candidates']['a'], self.data['candidates']['b']


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """ Recursively merges ``override`` into ``base`` in place. """
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
