import logging
import os
import pathlib
import tempfile
import typing

import click

log = logging.getLogger(__name__)


class EnvLockError(click.ClickException):
    pass


class MissingInputError(EnvLockError):
    pass


class PasswordMismatchError(EnvLockError):
    pass


class DecryptionError(EnvLockError):
    """Raised for both a wrong password and a corrupted envelope."""

    def __init__(self, message: str = "Failed to decrypt: wrong password or corrupted file"):
        super().__init__(message)


class FormatError(EnvLockError):
    pass


class CollaboratorError(EnvLockError):
    pass


def require(path: pathlib.Path, description: str) -> None:
    """Raise a MissingInputError if a required file does not exist."""
    if not path.exists():
        raise MissingInputError(f"{description} '{path}' not found")


def ensure_parent(path: pathlib.Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise CollaboratorError(
            f"Failed to create directory {path.parent}: {error}") from error


def _write_temporary(path: pathlib.Path, data: bytes) -> pathlib.Path:
    with tempfile.NamedTemporaryFile(
            dir=path.parent,
            prefix=f'.{path.name}.',
            suffix='.tmp',
            delete=False) as handle:
        tmp_path = pathlib.Path(handle.name)
        try:
            handle.write(data)
        except BaseException:
            handle.close()
            tmp_path.unlink()
            raise
    return tmp_path


def write_atomic(files: typing.Mapping[pathlib.Path, bytes]) -> None:
    """
    Write each file to a temporary file next to it, then move them all into place.

    Nothing is replaced until every temporary file has been written, so a
    failed or interrupted write leaves the previous contents untouched.
    """
    for path in files:
        ensure_parent(path)
        if path.is_dir():
            raise CollaboratorError(f"Failed to write {path}: Is a directory")

    written: typing.Dict[pathlib.Path, pathlib.Path] = {}
    try:
        for path, data in files.items():
            log.debug(f"Writing {len(data)} bytes to {path}")
            written[path] = _write_temporary(path, data)
    except OSError as error:
        for tmp_path in written.values():
            tmp_path.unlink()
        raise CollaboratorError(f"Failed to write {path}: {error.strerror}") from error

    pending = dict(written)
    try:
        for path, tmp_path in written.items():
            os.replace(tmp_path, path)
            del pending[path]
    except OSError as error:
        for tmp_path in pending.values():
            tmp_path.unlink()
        raise CollaboratorError(f"Failed to write {path}: {error.strerror}") from error


def read_bytes(path: pathlib.Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as error:
        raise MissingInputError(f"'{path}' not found") from error
    except OSError as error:
        raise MissingInputError(f"Failed to read '{path}': {error.strerror}") from error


def read_text(path: pathlib.Path) -> str:
    try:
        return read_bytes(path).decode('utf-8')
    except UnicodeDecodeError as error:
        raise FormatError(f"{path} is not valid UTF-8 text") from error
