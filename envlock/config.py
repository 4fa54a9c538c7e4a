"""
Project configuration.

The configuration file only records where the three artifacts live, so
commands run from the same directory agree on them without repeating
options.
"""

import json
import logging
import pathlib
import typing

import attr

from .utils import FormatError, read_text, write_atomic

log = logging.getLogger(__name__)

DEFAULT_ENV_FILE = '.env'
DEFAULT_ENC_FILE = '.env.enc'
DEFAULT_META_FILE = '.env.meta.json'
DEFAULT_CONFIG_PATH = pathlib.Path('.envlock/config.json')

FIELDS = ('env_file', 'encrypted_file', 'meta_file')

Override = typing.Optional[typing.Union[str, pathlib.Path]]


@attr.s(frozen=True, kw_only=True)
class Config:
    env_file: pathlib.Path = attr.ib(
        default=pathlib.Path(DEFAULT_ENV_FILE), converter=pathlib.Path)
    encrypted_file: pathlib.Path = attr.ib(
        default=pathlib.Path(DEFAULT_ENC_FILE), converter=pathlib.Path)
    meta_file: pathlib.Path = attr.ib(
        default=pathlib.Path(DEFAULT_META_FILE), converter=pathlib.Path)

    def override(
            self,
            env_file: Override = None,
            encrypted_file: Override = None,
            meta_file: Override = None) -> 'Config':
        """Return a copy with any paths given on the command line replaced."""
        changes = {
            name: value for name, value in (
                ('env_file', env_file),
                ('encrypted_file', encrypted_file),
                ('meta_file', meta_file),
            ) if value is not None
        }
        return attr.evolve(self, **changes)

    def to_dict(self) -> typing.Dict[str, str]:
        return {name: getattr(self, name).as_posix() for name in FIELDS}

    @classmethod
    def from_dict(cls, data: typing.Any) -> 'Config':
        if not isinstance(data, dict):
            raise FormatError("Invalid configuration: expected a JSON object")
        values = {}
        for name in FIELDS:
            if name not in data:
                continue
            if not isinstance(data[name], str) or not data[name]:
                raise FormatError(f"Invalid configuration: '{name}' must be a path")
            values[name] = data[name]
        return cls(**values)

    @classmethod
    def load(cls, path: pathlib.Path = DEFAULT_CONFIG_PATH) -> 'Config':
        if not path.exists():
            log.debug(f"No configuration at {path}, using defaults")
            return cls()
        log.debug(f"Loading configuration from {path}")
        try:
            data = json.loads(read_text(path))
        except json.JSONDecodeError as error:
            raise FormatError(f"Invalid configuration in {path}: {error}") from error
        return cls.from_dict(data)

    def save(self, path: pathlib.Path = DEFAULT_CONFIG_PATH) -> None:
        log.debug(f"Writing configuration to {path}")
        text = json.dumps(self.to_dict(), indent=2) + '\n'
        write_atomic({path: text.encode('utf-8')})
