import os
import pathlib
import typing

# Allow importing GitPython on machines without a git executable; tests that
# need git are skipped below.
os.environ.setdefault('GIT_PYTHON_REFRESH', 'quiet')

import attr
import click.testing
import pytest

import envlock.cli
import envlock.envelope
from envlock.metadata import KdfParams
from envlock.utils import CollaboratorError

FAST_PARAMS = KdfParams(m_cost=1024, t_cost=1, p_cost=1)

PASSWORD = 'correct horse battery staple'


@pytest.fixture(autouse=True)
def fast_kdf(monkeypatch):
    """Use cheap Argon2id costs so tests do not spend 64 MiB per derivation."""
    monkeypatch.setattr(envlock.envelope, 'DEFAULT_PARAMS', FAST_PARAMS)


@pytest.fixture()
def workdir(tmp_path, monkeypatch) -> pathlib.Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def invoke(workdir):
    def invoke_func(
            arguments: typing.Sequence[str],
            input: typing.Optional[str] = None,
            exit_code: int = 0):
        assert all(isinstance(arg, str) for arg in arguments)
        runner = click.testing.CliRunner()
        result = runner.invoke(envlock.cli.main, arguments, input=input)
        if result.exit_code != exit_code:
            message = f"Command envlock {' '.join(arguments)} exited with {result.exit_code}"
            raise Exception(f"{message}:\n{result.output}") from result.exception
        return result.output.splitlines()

    return invoke_func


@attr.s
class FakePrompt:
    passwords: typing.List[str] = attr.ib(factory=list)
    answers: typing.List[bool] = attr.ib(factory=list)
    asked: typing.List[str] = attr.ib(factory=list)

    def read_password(self, text: str = "Enter password") -> str:
        self.asked.append(text)
        return self.passwords.pop(0)

    def confirm(self, text: str) -> bool:
        self.asked.append(text)
        return self.answers.pop(0)


@attr.s
class FakeGit:
    fail_on: typing.Optional[str] = attr.ib(default=None)
    ignored: bool = attr.ib(default=True)
    calls: typing.List[typing.List[str]] = attr.ib(factory=list)

    def run(self, arguments: typing.Sequence[str]) -> str:
        self.calls.append(list(arguments))
        if arguments[0] == self.fail_on:
            raise CollaboratorError(f"git {arguments[0]} failed: boom")
        return ''

    def is_ignored(self, path: pathlib.Path) -> bool:
        return self.ignored


@pytest.fixture()
def prompt() -> FakePrompt:
    return FakePrompt()


@pytest.fixture()
def vcs() -> FakeGit:
    return FakeGit()


@pytest.fixture()
def env_file(workdir) -> pathlib.Path:
    path = workdir / '.env'
    path.write_text("# database\nDB_HOST=localhost\nDB_PASSWORD=hunter2\n\nAPI_KEY=abc123\n")
    return path
