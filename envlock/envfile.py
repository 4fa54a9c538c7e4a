import typing


def parse(text: str) -> typing.Dict[str, str]:
    """
    Parse 'key=value' lines into a mapping.

    Blank lines, '#' comments and lines without '=' are skipped. Only the
    first '=' separates the key from the value, both are stripped of
    surrounding whitespace, and a repeated key keeps its last value. Values
    are never unquoted.
    """
    values: typing.Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        key, sep, value = line.partition('=')
        if sep:
            values[key.strip()] = value.strip()
    return values
