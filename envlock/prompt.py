import attr
import click


@attr.s(frozen=True)
class Prompt:
    """Read passwords and confirmations from the terminal."""

    def read_password(self, text: str = "Enter password") -> str:
        return click.prompt(text, hide_input=True)

    def confirm(self, text: str) -> bool:
        return click.confirm(text, default=False)
