r"""
Argosy options: schema normalization, argv tokenizing/serializing and option filtering.

Overview
- normalize(options) → ParseSchema: flattens Option descriptors into the four tables a
  generic tokenizer consumes (string names, boolean names, aliases, defaults).
- parse_args(argv, schema) → parsed-options record (plain dict).
- to_argv(parsed, ...) → token list, the inverse used to forward options to other tools.
- filter_options / filter_by_group / filter_by_intent: project a parsed record onto the
  options a metadata object declares, canonicalizing alias spellings.
- clean_inputs(metadata, inputs, options): the usage projection reported upstream
  (private inputs/options and untouched defaults left out).

Parsed-options record
- "_" (POSITIONALS): list of bare tokens, in order.
- "--" (PASSTHROUGH): list of tokens found after a bare "--", kept verbatim.
- every other key: option spelling → str | bool | list[str] | None (None marks an unset
  string option, distinct from "").

Tokenizer rules
- "--name value" and "--name=value" set a string option; typing the same spelling again
  accumulates a list (an alias of an already-set option overwrites it instead).
- "--flag" sets a boolean option to True, "--no-flag" (or "--flag=false") to False.
- "-f value" and grouped short flags "-abc" are accepted. Inside a group, the first
  string option takes the rest of the token as its value ("-tdevice", "-vtdevice").
- a bare "-" after a valueless option is taken as its value (the stdin convention).
- unknown "--x value" keeps x = "value" verbatim; unknown "--x" alone becomes True.
- every spelling of an alias group receives the same value.
- defaults are applied last, to every spelling the command line did not set.

Serializer rules
- insertion order, "_" dropped, None dropped.
- True → "--name"; False → omitted (ignore_false) or "--no-name".
- other values → "--name=value" (use_equals) or "--name", "value"; lists repeat the flag.
- use_double_quotes forces use_equals and quotes values with embedded whitespace.
- a "--" entry is re-emitted last, as "--" followed by its tokens.

Example
    >>> schema = normalize([Option("target", aliases=["t"]), Option("prod", type=bool)])
    >>> parsed = parse_args(["android", "-t", "device", "--prod"], schema)
    >>> parsed["_"], parsed["target"], parsed["t"], parsed["prod"]
    (['android'], 'device', 'device', True)
    >>> to_argv({"_": ["android"], "target": "device", "prod": True})
    ['--target=device', '--prod']
"""
import re
from collections import namedtuple
from collections.abc import Iterable

from .logs import get_logger

logger = get_logger(__name__)

POSITIONALS = "_"
PASSTHROUGH = "--"

_RESERVED = (POSITIONALS, PASSTHROUGH)

ParseSchema = namedtuple("ParseSchema", (
    "strings",
    "booleans",
    "aliases",
    "defaults",
))


def normalize(options, /):
    """
    Flatten Option descriptors into a ParseSchema.

    - strings: names of string options, always led by the positional bucket "_".
    - booleans: names of boolean options.
    - aliases: name → alias list (empty when none declared).
    - defaults: name → normalized default (None for unset strings, False for booleans).

    Raises
    - ValueError: two options share a canonical name.
    """
    schema = ParseSchema([POSITIONALS], [], {}, {})

    for option in options:
        if option.name in schema.defaults:
            raise ValueError(f"option {option.name!r} is declared twice")
        (schema.booleans if option.type is bool else schema.strings).append(option.name)
        schema.aliases[option.name] = option.aliases
        schema.defaults[option.name] = option.default

    return schema


def _spellings(schema):
    """Internal: spelling → every spelling of its alias group (canonical first)."""
    groups = {}
    for name, aliases in schema.aliases.items():
        group = (name, *aliases)
        for spelling in group:
            groups[spelling] = group
    return groups


def parse_args(argv, schema=None, /):
    """
    Tokenize argv against a schema into a parsed-options record.

    argv never includes the program name. Without a schema every option is unknown and
    handled by the pass-through rules.
    """
    if schema is None:
        schema = ParseSchema([POSITIONALS], [], {}, {})

    groups = _spellings(schema)
    strings = {spelling for name in schema.strings for spelling in groups.get(name, (name,))}
    booleans = {spelling for name in schema.booleans for spelling in groups.get(name, (name,))}
    strings.discard(POSITIONALS)

    parsed = {POSITIONALS: []}
    typed = set()

    def assign(key, value):
        # Repeats accumulate per typed spelling, not per alias group.
        if key in typed and not isinstance(value, bool) and not isinstance(parsed[key], bool):
            previous = parsed[key]
            value = [*previous, value] if isinstance(previous, list) else [previous, value]
        typed.add(key)
        for spelling in groups.get(key, (key,)):
            parsed[spelling] = value

    def flag(key, following):
        """Assign a valueless --key/-k; returns True when the following token was consumed."""
        if key in booleans:
            if following in ("true", "false"):
                assign(key, following == "true")
                return True
            assign(key, True)
            return False
        if following is not None and (following == "-" or not following.startswith("-")):
            assign(key, following)
            return True
        assign(key, "" if key in strings else True)
        return False

    tokens = list(argv)
    index = 0
    while index < len(tokens):
        token = tokens[index]
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        index += 1

        if token == PASSTHROUGH:
            parsed[PASSTHROUGH] = tokens[index:]
            break

        if match := re.fullmatch(r"--([^=]+)=(.*)", token, re.DOTALL):
            key, value = match.groups()
            assign(key, value != "false" if key in booleans else value)
        elif token.startswith("--no-") and token[2:] not in strings | booleans:
            assign(token[5:], False)
        elif token.startswith("--") and len(token) > 2:
            index += flag(token[2:], following)
        elif match := re.fullmatch(r"-([^\W\d_])=(.*)", token, re.DOTALL):
            key, value = match.groups()
            assign(key, value != "false" if key in booleans else value)
        elif re.fullmatch(r"-[^\W\d_]+", token):
            letters = token[1:]
            for position, letter in enumerate(letters[:-1]):
                if letter in strings:
                    assign(letter, letters[position + 1:])
                    break
                assign(letter, True)
            else:
                index += flag(letters[-1], following)
        else:
            parsed[POSITIONALS].append(token)

    for name, default in schema.defaults.items():
        for spelling in groups.get(name, (name,)):
            parsed.setdefault(spelling, default)

    logger.debug("argv_parsed", tokens=len(tokens), keys=len(parsed) - 1)
    return parsed


def to_argv(parsed, /, *, use_equals=True, use_double_quotes=False, ignore_false=True):
    """
    Serialize a parsed-options record back into tokens.

    Positional entries are never serialized; the caller owns them. Without
    use_double_quotes, whitespace-containing values are emitted unquoted.
    """
    if use_double_quotes:
        use_equals = True

    def emit(name, value):
        if value is None:
            return []
        if value is True:
            return [f"--{name}"]
        if value is False:
            return [] if ignore_false else [f"--no-{name}"]
        if isinstance(value, list | tuple):
            return [token for item in value for token in emit(name, item)]
        if not use_equals:
            return [f"--{name}", str(value)]
        token = f"--{name}={value}"
        if use_double_quotes:
            token = re.sub(r"^(--[A-Za-z0-9-]+)=(.+\s+.+)$", r'\1="\2"', token, flags=re.DOTALL)
        return [token]

    tokens = []
    for name, value in parsed.items():
        if name not in _RESERVED:
            tokens.extend(emit(name, value))

    if parsed.get(PASSTHROUGH):
        tokens.extend([PASSTHROUGH, *map(str, parsed[PASSTHROUGH])])

    return tokens


def _tags(groups):
    if isinstance(groups, str):
        return {groups}
    if not isinstance(groups, Iterable):
        raise TypeError("groups must be a string or an iterable of strings")
    return set(groups)


def includes_groups(groups, /):
    """
    Predicate: the option declares groups and at least one of them is in groups.
    """
    tags = _tags(groups)

    def predicate(option, value=None):
        return option.groups is not None and not tags.isdisjoint(option.groups)

    return predicate


def excludes_groups(groups, /):
    """
    Predicate: the option declares no groups, or declares one outside groups.
    """
    tags = _tags(groups)

    def predicate(option, value=None):
        return option.groups is None or not set(option.groups) <= tags

    return predicate


def _lookup(metadata):
    """Internal: every canonical name and alias spelling → its Option."""
    return {spelling: option for option in metadata.options for spelling in option.spellings}


def filter_options(metadata, parsed, predicate=None, /):
    """
    Project a parsed-options record onto the options metadata declares.

    - "_" and "--" are retained verbatim when present.
    - unknown keys are always dropped.
    - known keys are kept under their canonical name when predicate(option, value)
      holds (always, without a predicate).
    """
    lookup = _lookup(metadata)
    filtered = {key: parsed[key] for key in _RESERVED if key in parsed}

    for key, value in parsed.items():
        if key in _RESERVED or (option := lookup.get(key)) is None:
            continue
        if predicate is None or predicate(option, value):
            filtered[option.name] = value

    return filtered


def filter_by_group(metadata, parsed, groups, /):
    """
    Keep the parsed options whose descriptor declares at least one of groups.
    """
    return filter_options(metadata, parsed, includes_groups(groups))


def filter_by_intent(metadata, parsed, intent=None, /):
    """
    Keep the parsed options matching a usage intent.

    - no intent: only options declaring no intents.
    - intent: only options whose intents contain it (nothing matches → {}).
    """
    lookup = _lookup(metadata)
    filtered = {}

    for key, value in parsed.items():
        if key in _RESERVED or (option := lookup.get(key)) is None:
            continue
        if option.intents is None if intent is None else intent in (option.intents or ()):
            filtered[option.name] = value

    return filtered


def clean_inputs(metadata, inputs, options, /):
    """
    Project an invocation into the tokens reported for usage tracking.

    - inputs: positional values whose Input descriptor exists and is not private (all of
      them when metadata declares no inputs).
    - options: declared, non-private options whose value differs from the default,
      serialized with double quotes.
    """
    if declared := metadata.inputs:
        tokens = [value for index, value in enumerate(inputs) if index < len(declared) and not declared[index].private]
    else:
        tokens = list(inputs)

    def predicate(option, value):
        return not option.private and value != option.default

    filtered = filter_options(metadata, options, predicate)
    filtered.pop(POSITIONALS, None)
    filtered.pop(PASSTHROUGH, None)
    return tokens + to_argv(filtered, use_double_quotes=True)


__all__ = (
    # Constants
    "POSITIONALS",
    "PASSTHROUGH",

    # Types
    "ParseSchema",

    # Functions
    "normalize",
    "parse_args",
    "to_argv",
    "includes_groups",
    "excludes_groups",
    "filter_options",
    "filter_by_group",
    "filter_by_intent",
    "clean_inputs",
)
