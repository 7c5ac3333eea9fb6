r"""
Argosy metadata descriptors: the declarative surface of namespaces and commands.

Overview
- Metadata: name, description, positional inputs, named options and usage examples of
  one namespace or command.
- Input: one positional input (name, description, validators, private flag).
- Option: one named option (canonical name, type, default, aliases, groups, intents,
  private flag, hint).

Introspection & representation
- DescriptorType metaclass exposes every field listed in __introspectable__ as a
  read-only property (stored tuples are handed out as fresh lists) and provides stable
  __repr__/__rich_repr__ implementations.

Normalization highlights (done once, on construction)
- Option.type is str (string-valued) or bool (presence-valued).
- Option.default always holds a type-consistent value: when omitted it becomes None for
  string options (“unset”, distinct from "") and False for boolean options.
- Option.groups/intents are None when not declared and a tuple of tags otherwise, so
  “declares no groups” and “declares an empty group list” stay distinguishable.
- Metadata rejects two options sharing a spelling (name or alias).

Quick example
    >>> metadata = Metadata(
    ...     "build",
    ...     "Build web assets and prepare your app for any platform",
    ...     inputs=[Input("platform", validators=[required])],
    ...     options=[
    ...         Option("prod", type=bool, groups=["app-scripts"]),
    ...         Option("target", aliases=["t"]),
    ...     ],
    ... )
    >>> metadata.options[1].aliases
    ['t']
"""
import functools
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from .utils import *


_TYPE_DEFAULTS = {
    str: None,
    bool: False,
}


class DescriptorType(type):
    """
    Metaclass for immutable, introspectable descriptors.

    Responsibilities
    - Derive __typename__ from the class name for consistent messages.
    - Publish read-only properties (via mirror) for every name in __introspectable__.
    - Provide compact __repr__ and structured __rich_repr__ for diagnostics.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": typename(name),
            } | {
                field: mirror(field) for field in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for field in type(self).__introspectable__:
                yield field, getattr(self, field)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_text(cls, metadata, field, /):
    """
    Internal: validate an optional free-text field (description, hint).

    Unset becomes None; strings are trimmed and must stay non-empty.
    """
    if not isinstance(value := metadata[field], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    metadata[field] = coalesce(value)


def _sanitize_name(cls, metadata, /):
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name


def _sanitize_tags(cls, metadata, field, /):
    """
    Internal: normalize group/intent tags.

    Unset stays “not declared” (None); otherwise an iterable of non-empty strings
    becomes a duplicate-free tuple in declaration order.
    """
    if (tags := metadata[field]) is Unset:
        metadata[field] = None
        return
    if isinstance(tags, str) or not isinstance(tags, Iterable):
        raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")

    sanitized = []
    for tag in tags:
        if not isinstance(tag, str):
            raise TypeError(f"{cls.__typename__} {field!r} must contain strings only")
        elif not (tag := tag.strip()):
            raise ValueError(f"{cls.__typename__} {field!r} cannot contain empty strings")
        if tag not in sanitized:
            sanitized.append(tag)
    metadata[field] = tuple(sanitized)


def _sanitize_option_metadata(cls, metadata, /):
    r"""
    Internal: validate and normalize Option metadata.

    Responsibilities
    - name: must look like a flag name without dashes, r"[^\W\d_][\w-]*"
      (e.g., "prod", "buildConfig", "no-open", "f").
    - type: str or bool.
    - default: Unset → type default; otherwise must agree with the type.
    - aliases: ordered spellings, same shape as names, no duplicates, never the name itself.
    - groups/intents: see _sanitize_tags.
    """
    if not re.fullmatch(r"[^\W\d_][\w-]*", name := metadata["name"]):
        raise ValueError(f"{cls.__typename__} name {name!r} must be a flag name without dashes")

    if (type := metadata["type"]) not in _TYPE_DEFAULTS:
        raise TypeError(f"{cls.__typename__} 'type' must be str or bool")

    default = coalesce(metadata["default"], _TYPE_DEFAULTS[type])
    if type is bool and not isinstance(default, bool):
        raise TypeError(f"{cls.__typename__} {name!r} is boolean, its 'default' must be a bool")
    if type is str and not isinstance(default, str | None):
        raise TypeError(f"{cls.__typename__} {name!r} is a string, its 'default' must be a string")
    metadata["default"] = default

    if isinstance(aliases := metadata["aliases"], str) or not isinstance(aliases, Iterable):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")

    sanitized = []
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        elif not re.fullmatch(r"[^\W\d_][\w-]*", alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} alias {alias!r} must be a flag name without dashes")
        elif alias == name or alias in sanitized:
            raise ValueError(f"{cls.__typename__} {name!r} aliases cannot contain duplicates")
        sanitized.append(alias)
    metadata["aliases"] = tuple(sanitized)

    _sanitize_tags(cls, metadata, "groups")
    _sanitize_tags(cls, metadata, "intents")


class Input(metaclass=DescriptorType):
    """
    Positional input descriptor.

    Validators are callables validator(value, name) that raise ValueError with a
    user-facing message when the value is unacceptable (see argosy.validators).
    Private inputs are never reported in usage projections.
    """

    __introspectable__ = (
        "name",
        "descr",
        "validators",
        "private",
    )

    def __init__(self, name, /, descr=Unset, *, validators=(), private=False):
        metadata = {
            "name": name,
            "descr": descr,
            "validators": validators,
            "private": bool(private),
        }
        _sanitize_name(type(self), metadata)
        _sanitize_text(type(self), metadata, "descr")

        if isinstance(validators, str) or not isinstance(validators, Iterable):
            raise TypeError(f"{type(self).__typename__} 'validators' must be an iterable of callables")
        if not all(map(callable, validators := tuple(validators))):
            raise TypeError(f"{type(self).__typename__} validators must be callable")
        metadata["validators"] = validators

        for field, object in metadata.items():
            setattr(self, "_" + field, object)


class Option(metaclass=DescriptorType):
    """
    Named option descriptor.

    Properties
    - name: canonical key in parsed-options records.
    - type: str or bool.
    - default: normalized, type-consistent default (None marks an unset string).
    - aliases: alternate spellings, in declaration order.
    - groups: classification tags (None when undeclared), used by build runners to pick
      the flags they forward to external tools.
    - intents: usage-intent tags (None when undeclared).
    - private: excluded from user-facing listings and usage projections.
    - hint: short free-text label for help output.

    Sequence fields (aliases, groups, intents) are stored as tuples and handed out as
    fresh lists, so option.aliases == ["t"] and mutating it never reaches the descriptor.
    """

    __introspectable__ = (
        "name",
        "descr",
        "type",
        "default",
        "aliases",
        "groups",
        "intents",
        "private",
        "hint",
    )

    def __init__(
            self,
            name,
            /,
            descr=Unset,
            *,
            type=str,
            default=Unset,
            aliases=(),
            groups=Unset,
            intents=Unset,
            private=False,
            hint=Unset,
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "type": type,
            "default": default,
            "aliases": aliases,
            "groups": groups,
            "intents": intents,
            "private": bool(private),
            "hint": hint,
        }
        cls = builtins_type(self)
        _sanitize_name(cls, metadata)
        _sanitize_text(cls, metadata, "descr")
        _sanitize_text(cls, metadata, "hint")
        _sanitize_option_metadata(cls, metadata)

        for field, object in metadata.items():
            setattr(self, "_" + field, object)

    @property
    def spellings(self):
        """
        Canonical name followed by every alias.
        """
        return [self._name, *self._aliases]


class Metadata(metaclass=DescriptorType):
    """
    Declarative description of one namespace or command.

    Rules
    - name is unique within the parent collection (enforced by the maps, not here).
    - inputs are Input descriptors, options are Option descriptors.
    - no two options may share a spelling (name or alias); this is a declaration
      defect and raises ValueError immediately.
    - inputs/options/examples accept any iterable (generators included) and are read
      back as lists.
    """

    __introspectable__ = (
        "name",
        "descr",
        "inputs",
        "options",
        "examples",
    )

    def __init__(self, name, /, descr=Unset, *, inputs=(), options=(), examples=()):
        metadata = {
            "name": name,
            "descr": descr,
            "inputs": inputs,
            "options": options,
            "examples": examples,
        }
        cls = type(self)
        _sanitize_name(cls, metadata)
        _sanitize_text(cls, metadata, "descr")

        for field, kind in (("inputs", Input), ("options", Option)):
            if isinstance(objects := metadata[field], str) or not isinstance(objects, Iterable):
                raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of {kind.__typename__}s")
            objects = tuple(objects)
            if not all(isinstance(object, kind) for object in objects):
                raise TypeError(f"{cls.__typename__} {field!r} must contain {kind.__typename__}s only")
            metadata[field] = objects

        spellings = set()
        for option in metadata["options"]:
            for spelling in option.spellings:
                if spelling in spellings:
                    raise ValueError(f"{cls.__typename__} {metadata['name']!r} declares option {spelling!r} twice")
                spellings.add(spelling)

        if isinstance(examples, str) or not isinstance(examples, Iterable):
            raise TypeError(f"{cls.__typename__} 'examples' must be an iterable of strings")
        examples = tuple(examples)
        if not all(isinstance(example, str) for example in examples):
            raise TypeError(f"{cls.__typename__} examples must be strings")
        metadata["examples"] = examples

        for field, object in metadata.items():
            setattr(self, "_" + field, object)


# Option shadows the builtin 'type' with a keyword parameter of the same name.
builtins_type = type


__all__ = (
    # Classes (descriptors)
    "Metadata",
    "Input",
    "Option",
)

# Keep the metaclass out of star-imports; it is not part of the public API.
del DescriptorType
