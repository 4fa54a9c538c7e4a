"""
Metadata stored next to an encrypted envelope.

The metadata holds everything needed to re-derive the key and re-open the
envelope except the password: the format version, the salt, the nonce and
the Argon2id cost parameters. It is meaningless without the ciphertext it
was produced with.
"""

import base64
import binascii
import json
import logging
import pathlib
import typing

import attr

from .utils import FormatError, read_text, write_atomic

log = logging.getLogger(__name__)

VERSION = 1
SALT_LENGTH = 16
NONCE_LENGTH = 12

MAX_M_COST = 4 * 1024 * 1024  # KiB, 4 GiB
MAX_T_COST = 64
MAX_P_COST = 64


def _integer(data: typing.Mapping[str, typing.Any], name: str) -> int:
    if name not in data:
        raise FormatError(f"Invalid metadata: missing field '{name}'")
    value = data[name]
    # bool is a subclass of int, and is never a meaningful cost or version.
    if not isinstance(value, int) or isinstance(value, bool):
        raise FormatError(f"Invalid metadata: '{name}' must be an integer")
    return value


def _decode(data: typing.Mapping[str, typing.Any], name: str, length: int) -> bytes:
    if name not in data:
        raise FormatError(f"Invalid metadata: missing field '{name}'")
    value = data[name]
    if not isinstance(value, str):
        raise FormatError(f"Invalid metadata: '{name}' must be a base64 string")
    try:
        raw = base64.b64decode(value, validate=True)
    except binascii.Error as error:
        raise FormatError(f"Invalid metadata: '{name}' is not valid base64") from error
    if len(raw) != length:
        raise FormatError(
            f"Invalid metadata: '{name}' must be {length} bytes, not {len(raw)}")
    return raw


def _encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode('ascii')


@attr.s(frozen=True, kw_only=True)
class KdfParams:
    m_cost: int = attr.ib()
    t_cost: int = attr.ib()
    p_cost: int = attr.ib()

    def validate(self) -> None:
        """Reject costs that are unusable or large enough to exhaust resources."""
        if not 1 <= self.p_cost <= MAX_P_COST:
            raise FormatError(f"Invalid metadata: p_cost {self.p_cost} out of range")
        if not 8 * self.p_cost <= self.m_cost <= MAX_M_COST:
            raise FormatError(f"Invalid metadata: m_cost {self.m_cost} out of range")
        if not 1 <= self.t_cost <= MAX_T_COST:
            raise FormatError(f"Invalid metadata: t_cost {self.t_cost} out of range")

    def to_dict(self) -> typing.Dict[str, int]:
        return {'m_cost': self.m_cost, 't_cost': self.t_cost, 'p_cost': self.p_cost}

    @classmethod
    def from_dict(cls, data: typing.Any) -> 'KdfParams':
        if not isinstance(data, dict):
            raise FormatError("Invalid metadata: 'argon2' must be an object")
        params = cls(
            m_cost=_integer(data, 'm_cost'),
            t_cost=_integer(data, 't_cost'),
            p_cost=_integer(data, 'p_cost'))
        params.validate()
        return params


@attr.s(frozen=True, kw_only=True)
class Metadata:
    salt: bytes = attr.ib(repr=False)
    nonce: bytes = attr.ib(repr=False)
    kdf: KdfParams = attr.ib()
    version: int = attr.ib(default=VERSION)

    def to_dict(self) -> typing.Dict[str, typing.Any]:
        return {
            'version': self.version,
            'salt': _encode(self.salt),
            'nonce': _encode(self.nonce),
            'argon2': self.kdf.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + '\n'

    @classmethod
    def from_dict(cls, data: typing.Any) -> 'Metadata':
        """
        Build metadata from decoded JSON.

        Unknown fields are ignored so newer writers can add fields, but every
        field needed for decryption must be present and well formed. The
        version is checked first.
        """
        if not isinstance(data, dict):
            raise FormatError("Invalid metadata: expected a JSON object")

        version = _integer(data, 'version')
        if version != VERSION:
            raise FormatError(f"Unsupported metadata version {version}")

        if 'argon2' not in data:
            raise FormatError("Invalid metadata: missing field 'argon2'")

        return cls(
            version=version,
            salt=_decode(data, 'salt', SALT_LENGTH),
            nonce=_decode(data, 'nonce', NONCE_LENGTH),
            kdf=KdfParams.from_dict(data['argon2']))

    @classmethod
    def from_json(cls, text: str) -> 'Metadata':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as error:
            raise FormatError(f"Invalid metadata JSON: {error}") from error
        return cls.from_dict(data)

    @classmethod
    def read(cls, path: pathlib.Path) -> 'Metadata':
        log.debug(f"Reading metadata from {path}")
        return cls.from_json(read_text(path))

    def write(self, path: pathlib.Path) -> None:
        log.debug(f"Writing metadata to {path}")
        write_atomic({path: self.to_json().encode('utf-8')})
