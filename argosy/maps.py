"""
Argosy ordered alias maps: lazy registries of namespaces and commands.

Overview
- AliasMap: immutable, insertion-ordered mapping from keys to entries, where an entry is
  either a zero-argument factory (returning an entity or an awaitable of one) or a string
  naming another key of the same map (an alias).
- CommandMap: the registry a namespace uses for its commands; may carry a Default entry.
- NamespaceMap: the registry a namespace uses for its child namespaces; never defaulted.
- Default: distinguished key selecting the command used when no token matches.

Resolution rules
- get(key) returns the raw entry (factory or alias string), or None.
- resolve_aliases(key) returns the factory reachable from key in at most one alias hop,
  or None when the key is absent or its alias target has no factory. “Not found” is a
  normal outcome, never an exception.
- get_aliases() indexes canonical key → alias spellings, in declaration order, omitting
  canonicals that nobody aliases. A canonical does not need an entry of its own.

Registration rules (checked once, at construction)
- keys are non-empty strings (or Default, where allowed); entries are callables or strings.
- duplicate keys are rejected.
- alias chains are rejected: an alias must point at a key that is not itself an alias.

Quick example
    >>> commands = CommandMap([
    ...     ("build", lambda: BuildCommand()),
    ...     ("b", "build"),
    ...     (Default, "build"),
    ... ])
    >>> commands.get_aliases()
    {'build': ['b']}
"""
import functools
from collections.abc import Iterable, Mapping
from typing import final

from rich.text import Text

from .utils import *


@final
class DefaultType:
    """
    Sealed singleton type of the Default key.

    Default is a dedicated variant tag rather than a magic string, so it can never be
    confused with a token typed on the command line.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __repr__(self):
        return "Default"

    def __rich__(self):
        return Text("Default", style="italic dim")

    def __reduce__(self):
        # Pickle by reference to the module-level singleton
        return "Default"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'DefaultType' is not an acceptable base type")


Default = DefaultType()


class AliasMap(Mapping):
    """
    Immutable, insertion-ordered registry of entity factories and aliases.

    Construction
    - AliasMap(entries): entries is an iterable of (key, entry) pairs or a mapping.
      • key: non-empty str, or Default when the concrete map allows it.
      • entry: zero-argument callable (factory) or str (alias to another key).

    Mapping protocol
    - Behaves as a read-only collections.abc.Mapping over the raw entries, so len(),
      iteration, membership and equality all work on keys as declared.

    Raises
    - TypeError: malformed pairs, keys or entries.
    - ValueError: empty or duplicate keys, alias chains, or a disallowed Default key.
    """

    __typename__ = "alias-map"
    __defaultable__ = True

    def __init__(self, entries=(), /):
        if isinstance(entries, Mapping):
            entries = entries.items()
        elif not isinstance(entries, Iterable) or isinstance(entries, str):
            raise TypeError(f"{self.__typename__} entries must be an iterable of (key, entry) pairs")

        self._entries = {}
        for pair in entries:
            try:
                key, entry = pair
            except (TypeError, ValueError):
                raise TypeError(f"{self.__typename__} entries must be (key, entry) pairs") from None

            if key is Default:
                if not self.__defaultable__:
                    raise ValueError(f"{self.__typename__} cannot have a default entry")
            elif not isinstance(key, str):
                raise TypeError(f"{self.__typename__} keys must be strings")
            elif not key.strip():
                raise ValueError(f"{self.__typename__} keys cannot be empty")

            if not isinstance(entry, str) and not callable(entry):
                raise TypeError(f"{self.__typename__} entry for {key!r} must be a factory or an alias string")

            if key in self._entries:
                raise ValueError(f"{self.__typename__} key {key!r} is already in use")
            self._entries[key] = entry

        # Aliases resolve in a single hop; anything longer is a declaration error.
        for key, entry in self._entries.items():
            if isinstance(entry, str) and isinstance(self._entries.get(entry), str):
                raise ValueError(
                    f"{self.__typename__} alias {key!r} points to alias {entry!r} (alias chains are not supported)"
                )

    def __getitem__(self, key, /):
        return self._entries[key]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, list(self._entries.items()))

    def __rich_repr__(self):
        for key, entry in self._entries.items():
            yield key, entry

    def entries(self):
        """
        Return a lazy, restartable view of (key, entry) pairs in insertion order.
        """
        return self.items()

    def resolve_aliases(self, key, /):
        """
        Return the factory reachable from key, or None.

        - key maps to a factory → that factory.
        - key maps to an alias → the factory of the alias target, if it has one.
        - otherwise → None.
        """
        entry = self._entries.get(key)
        if isinstance(entry, str):
            entry = self._entries.get(entry)
        return entry if callable(entry) else None

    def get_aliases(self):
        """
        Build the canonical → aliases index in one pass over entries().

        Returns
        - dict[str, list[str]]: for each key targeted by at least one alias entry, the
          alias spellings in declaration order. Default-keyed entries are not spellings
          and are left out.
        """
        aliases = {}
        for key, entry in self.entries():
            if isinstance(entry, str) and key is not Default:
                aliases.setdefault(entry, []).append(key)
        return aliases


class CommandMap(AliasMap):
    """
    Registry of a namespace's commands. A Default entry (factory or alias) marks the
    command selected when no token matches any other key.
    """

    __typename__ = "command-map"

    @property
    def default(self):
        """
        The factory of the default command, or None when the map has no default.
        """
        return self.resolve_aliases(Default)


class NamespaceMap(AliasMap):
    """
    Registry of a namespace's child namespaces. Namespaces are always addressed by
    name, so a Default entry is rejected.
    """

    __typename__ = "namespace-map"
    __defaultable__ = False


__all__ = (
    # Types
    "DefaultType",
    "AliasMap",
    "CommandMap",
    "NamespaceMap",

    # Constants
    "Default",
)
