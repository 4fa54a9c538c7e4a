import typing

import attr


@attr.s(frozen=True)
class Change:
    key: str = attr.ib()
    reference: str = attr.ib()
    current: str = attr.ib()


@attr.s(frozen=True, kw_only=True)
class Changes:
    additions: typing.Tuple[str, ...] = attr.ib(default=())
    removals: typing.Tuple[str, ...] = attr.ib(default=())
    changes: typing.Tuple[Change, ...] = attr.ib(default=())

    def __bool__(self) -> bool:
        return bool(self.additions or self.removals or self.changes)


def reconcile(
        current: typing.Mapping[str, str],
        reference: typing.Mapping[str, str]) -> Changes:
    """
    Compare the live mapping against the reference (decrypted) mapping.

    Results are sorted by key.
    """
    return Changes(
        additions=tuple(sorted(current.keys() - reference.keys())),
        removals=tuple(sorted(reference.keys() - current.keys())),
        changes=tuple(
            Change(key, reference[key], current[key])
            for key in sorted(current.keys() & reference.keys())
            if current[key] != reference[key]))
