"""Channel exclusion rules."""

from pydantic import BaseModel


def _split_csv(raw: str) -> frozenset[str]:
    """Split a comma-separated list, stripping whitespace and a leading '#'."""
    entries = (item.strip().removeprefix("#") for item in raw.split(","))
    return frozenset(entry for entry in entries if entry)


class ExclusionSet(BaseModel):
    """Channels protected from warning and archiving.

    Matching is case-sensitive: a channel is excluded when its name equals
    one of ``names`` or starts with one of ``prefixes``.
    """

    model_config = {"frozen": True}

    names: frozenset[str] = frozenset()
    prefixes: frozenset[str] = frozenset()

    @classmethod
    def parse(cls, names: str = "", prefixes: str = "") -> "ExclusionSet":
        """Parse comma-separated names and prefixes as given on the command line."""
        return cls(names=_split_csv(names), prefixes=_split_csv(prefixes))

    def is_excluded(self, channel_name: str) -> bool:
        name = channel_name.removeprefix("#")
        if name in self.names:
            return True
        return any(name.startswith(prefix) for prefix in self.prefixes)
