import logging
import pathlib
import typing

import attr

from . import envelope
from .config import Config
from .diff import Changes, reconcile
from .envfile import parse
from .metadata import Metadata
from .prompt import Prompt
from .utils import PasswordMismatchError, read_bytes, read_text, require, write_atomic
from .vcs import Git

log = logging.getLogger(__name__)


@attr.s(frozen=True, kw_only=True)
class EnvLock:
    config: Config = attr.ib(factory=Config)
    prompt: Prompt = attr.ib(factory=Prompt)
    vcs: Git = attr.ib(factory=Git)

    @property
    def env(self) -> pathlib.Path:
        return self.config.env_file

    @property
    def encrypted(self) -> pathlib.Path:
        return self.config.encrypted_file

    @property
    def meta(self) -> pathlib.Path:
        return self.config.meta_file

    def overwrite(self, path: pathlib.Path, force: bool) -> bool:
        """Check if path can be written, asking when it already exists."""
        if force or not path.exists():
            return True
        return self.prompt.confirm(f"File '{path}' already exists. Overwrite?")

    def read_envelope(self) -> typing.Tuple[bytes, Metadata]:
        require(self.encrypted, "Encrypted file")
        require(self.meta, "Metadata file")
        ciphertext = read_bytes(self.encrypted)
        return ciphertext, Metadata.read(self.meta)

    def open_envelope(self) -> bytes:
        ciphertext, metadata = self.read_envelope()
        password = self.prompt.read_password("Enter password")
        return envelope.unseal(ciphertext, password, metadata)

    def lock(self, force: bool = False) -> bool:
        """
        Encrypt the plaintext file into the encrypted and metadata files.

        Returns False if the user declined to overwrite the encrypted file.
        """
        log.info(f"Encrypting {self.env}")
        require(self.env, "Env file")

        if not self.overwrite(self.encrypted, force):
            log.info(f"Not overwriting {self.encrypted}")
            return False

        plaintext = read_text(self.env).encode('utf-8')

        password = self.prompt.read_password("Enter password")
        confirm = self.prompt.read_password("Confirm password")
        if password != confirm:
            raise PasswordMismatchError("Passwords do not match")

        ciphertext, metadata = envelope.seal(plaintext, password)
        # The two files only decrypt as a pair.
        write_atomic({
            self.encrypted: ciphertext,
            self.meta: metadata.to_json().encode('utf-8'),
        })
        log.info(f"Encrypted {self.env} to {self.encrypted} and {self.meta}")
        return True

    def unlock(self, force: bool = False) -> bool:
        """
        Decrypt the encrypted file into the plaintext file.

        Returns False if the user declined to overwrite the plaintext file.
        """
        log.info(f"Decrypting {self.encrypted}")
        ciphertext, metadata = self.read_envelope()

        if not self.overwrite(self.env, force):
            log.info(f"Not overwriting {self.env}")
            return False

        password = self.prompt.read_password("Enter password")
        plaintext = envelope.unseal(ciphertext, password, metadata)
        write_atomic({self.env: plaintext})
        log.info(f"Decrypted {self.encrypted} to {self.env}")
        return True

    def diff(self) -> Changes:
        """Compare the plaintext file with the decrypted contents of the envelope."""
        log.info(f"Comparing {self.env} with {self.encrypted}")
        require(self.env, "Env file")
        current = read_text(self.env)
        reference = self.open_envelope().decode('utf-8')
        return reconcile(current=parse(current), reference=parse(reference))

    def sync(self, message: str) -> None:
        """Lock, then add, commit and push the encrypted and metadata files."""
        if self.env.exists() and not self.vcs.is_ignored(self.env):
            log.warning(f"{self.env} is not ignored by git")

        self.lock(force=True)
        self.vcs.run(['add', '--', str(self.encrypted), str(self.meta)])
        self.vcs.run(['commit', '-m', message])
        self.vcs.run(['push'])
        log.info("Sync completed")
