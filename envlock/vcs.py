import logging
import pathlib
import typing

import attr
import git

from .utils import CollaboratorError

log = logging.getLogger(__name__)


@attr.s(frozen=True)
class Git:
    """Run the git executable from a directory, by default the current one."""

    directory: pathlib.Path = attr.ib(factory=pathlib.Path.cwd)

    @property
    def repo(self) -> git.Repo:
        try:
            return git.Repo(self.directory, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as error:
            raise CollaboratorError(
                f"{self.directory} is not inside a git repository") from error

    def run(self, arguments: typing.Sequence[str]) -> str:
        """Run 'git <arguments>' and return its stdout."""
        command = ['git', *arguments]
        log.debug(f"Running {' '.join(command)}")
        try:
            return git.Git(self.directory).execute(command)
        except git.exc.CommandError as error:
            for line in str(error).splitlines():
                log.error(line)
            raise CollaboratorError(
                f"git {' '.join(arguments)} failed: {error}") from error

    def is_ignored(self, path: pathlib.Path) -> bool:
        """Check if git ignores path. Paths outside the repository are never ignored."""
        repo = self.repo
        try:
            return bool(repo.ignored(str(path.resolve())))
        except git.exc.GitCommandError as error:
            log.debug(f"git check-ignore failed for {path}: {error}")
            return False
