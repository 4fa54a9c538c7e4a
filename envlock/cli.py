import functools
import logging
import os.path
import pathlib
import typing

import click

from . import __doc__, __version__
from .config import DEFAULT_CONFIG_PATH, Config
from .diff import Changes
from .locker import EnvLock

log = logging.getLogger(__name__)

DEFAULT_MESSAGE = 'chore(env): update env with envlock'


@functools.lru_cache()
def rel(path: pathlib.Path) -> str:
    """
    Convert a path to a relative Path.

    Returns a string as these should only be used for presentation.
    """
    return os.path.relpath(path.as_posix(), pathlib.Path.cwd().as_posix())


def ok(message: str) -> None:
    click.secho(f"✓ {message}", fg='green')


def report(changes: Changes, env: pathlib.Path, encrypted: pathlib.Path) -> typing.List[str]:
    """Format a reconciliation as styled lines for the terminal."""
    if not changes:
        return [f"No differences between {rel(env)} and {rel(encrypted)}."]

    lines = ["Differences:"]
    for key in changes.additions:
        lines.append(click.style(f"+ {key} added", fg='green'))
    for key in changes.removals:
        lines.append(click.style(f"- {key} removed", fg='red'))
    for change in changes.changes:
        lines.append(click.style(
            f"~ changed: {change.key} {change.reference} -> {change.current}",
            fg='cyan'))
    return lines


class PathType(click.Path):
    def convert(self, value, param, ctx):
        return pathlib.Path(super().convert(value, param, ctx))


env_option = click.option(
    '-e', '--env', 'env_file',
    type=PathType(dir_okay=False),
    default=None,
    help="Plaintext env file (default: .env).")

enc_option = click.option(
    '--enc', 'encrypted_file',
    type=PathType(dir_okay=False),
    default=None,
    help="Encrypted file (default: .env.enc).")

meta_option = click.option(
    '--meta', 'meta_file',
    type=PathType(dir_okay=False),
    default=None,
    help="Metadata file (default: .env.meta.json).")

force_option = click.option(
    '--force',
    default=False,
    is_flag=True,
    help="Overwrite the output file without asking.")


def paths(command):
    return env_option(enc_option(meta_option(command)))


def locker(
        config: Config,
        env_file: typing.Optional[pathlib.Path],
        encrypted_file: typing.Optional[pathlib.Path],
        meta_file: typing.Optional[pathlib.Path]) -> EnvLock:
    return EnvLock(config=config.override(
        env_file=env_file,
        encrypted_file=encrypted_file,
        meta_file=meta_file))


@click.group(help=__doc__)
@click.option(
    '-c', '--config', 'config_path',
    type=PathType(dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Configuration file written by 'envlock init'.")
@click.option(
    '-d', '--debug', 'debug',
    default=False,
    is_flag=True,
    help="Enable debug logging.")
@click.pass_context
def main(ctx, config_path: pathlib.Path, debug: bool):
    logging.basicConfig(level=(logging.DEBUG if debug else logging.WARNING))
    ctx.obj = config_path


@main.command()
def version():
    """Show the application version."""
    click.echo(f"envlock {__version__}")


@main.command()
@paths
@click.pass_obj
def init(
        config_path: pathlib.Path,
        env_file: typing.Optional[pathlib.Path],
        encrypted_file: typing.Optional[pathlib.Path],
        meta_file: typing.Optional[pathlib.Path]):
    """Write a configuration file recording the artifact paths."""
    if config_path.exists():
        click.secho(f"envlock already initialized ({rel(config_path)})", fg='yellow')
        return

    Config().override(
        env_file=env_file,
        encrypted_file=encrypted_file,
        meta_file=meta_file).save(config_path)
    ok(f"envlock initialized: {rel(config_path)}")


@main.command()
@paths
@force_option
@click.pass_obj
def lock(
        config_path: pathlib.Path,
        env_file: typing.Optional[pathlib.Path],
        encrypted_file: typing.Optional[pathlib.Path],
        meta_file: typing.Optional[pathlib.Path],
        force: bool):
    """Encrypt the env file into the encrypted and metadata files."""
    el = locker(Config.load(config_path), env_file, encrypted_file, meta_file)
    click.echo(f"Encrypting {rel(el.env)}")

    if not el.lock(force=force):
        click.echo("Aborted.")
        return

    ok(f"Encrypted file saved: {rel(el.encrypted)}")
    ok(f"Metadata saved: {rel(el.meta)}")


@main.command()
@paths
@force_option
@click.pass_obj
def unlock(
        config_path: pathlib.Path,
        env_file: typing.Optional[pathlib.Path],
        encrypted_file: typing.Optional[pathlib.Path],
        meta_file: typing.Optional[pathlib.Path],
        force: bool):
    """Decrypt the encrypted file into the env file."""
    el = locker(Config.load(config_path), env_file, encrypted_file, meta_file)
    click.echo(f"Decrypting {rel(el.encrypted)}")

    if not el.unlock(force=force):
        click.echo("Aborted.")
        return

    ok(f"Decrypted env written to {rel(el.env)}")


@main.command()
@paths
@click.pass_obj
def diff(
        config_path: pathlib.Path,
        env_file: typing.Optional[pathlib.Path],
        encrypted_file: typing.Optional[pathlib.Path],
        meta_file: typing.Optional[pathlib.Path]):
    """Show keys added, removed or changed since the env file was encrypted."""
    el = locker(Config.load(config_path), env_file, encrypted_file, meta_file)
    click.echo(f"Comparing {rel(el.env)} and {rel(el.encrypted)}")

    for line in report(el.diff(), el.env, el.encrypted):
        click.echo(line)


@main.command()
@click.option(
    '-m', '--message',
    default=DEFAULT_MESSAGE,
    show_default=True,
    help="Commit message.")
@paths
@click.pass_obj
def sync(
        config_path: pathlib.Path,
        message: str,
        env_file: typing.Optional[pathlib.Path],
        encrypted_file: typing.Optional[pathlib.Path],
        meta_file: typing.Optional[pathlib.Path]):
    """Encrypt the env file, then git add, commit and push the results."""
    el = locker(Config.load(config_path), env_file, encrypted_file, meta_file)
    click.echo(f"Syncing {rel(el.encrypted)} and {rel(el.meta)} with git")

    el.sync(message)
    ok("Sync completed.")
