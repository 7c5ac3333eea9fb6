"""
Argosy command layer: the Namespace/Command tree and its resolution engine.

What this module provides
- Namespace: non-leaf node grouping commands and child namespaces. Children are exposed
  lazily through get_commands() / get_namespaces(), which return alias maps of factories.
- Command: leaf node representing one invocable operation with its own metadata.
- Location / CommandListing: result records of locate() and get_command_metadata_list().
- generate_command_path(entity) / format_command_path(entity): root-to-leaf route of an
  entity, following back-references.
- render_commands(namespace): rich table listing every command reachable from a namespace.
- invoke(root, argv): the driver; locate, tokenize, validate and dispatch.

Core ideas
- Lazy trees: nothing below a namespace exists until a factory is called; a resolution
  pass instantiates exactly the entities it walks through.
- Sequential traversal: factories are awaited one at a time, in order; a factory failure
  aborts the pass and propagates unchanged.
- Typed tokens: paths record the token the user typed (an alias stays an alias), while
  listings record canonical keys.
- Defaults: a namespace's Default command answers for tokens nothing else matches, and
  for a namespace entered with nothing left to read.

Quick start
    from argosy import Namespace, Command, CommandMap, Metadata, Option, invoke

    class BuildCommand(Command):
        metadata = Metadata("build", "Build web assets", options=[Option("prod", type=bool)])

        async def run(self, inputs, options):
            print(inputs, options["prod"])

    class Root(Namespace):
        metadata = Metadata("app")

        async def get_commands(self):
            return CommandMap([("build", lambda: BuildCommand(self)), ("b", "build")])

    asyncio.run(invoke(Root(), ["b", "android", "--prod"], shell=True))
"""
import difflib
import inspect
import shlex
import sys
from collections import defaultdict, namedtuple
from collections.abc import Iterable

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .faults import *
from .logs import get_logger
from .maps import *
from .metadata import Metadata
from .options import POSITIONALS, normalize, parse_args
from .utils import *
from .validators import validate_inputs

logger = get_logger(__name__)

Location = namedtuple("Location", (
    "args",
    "obj",
    "path",
))

CommandListing = namedtuple("CommandListing", (
    "command",
    "namespace",
    "path",
    "aliases",
    "metadata",
))


class EntityType(type):
    """
    Metaclass shared by Namespace and Command.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens).
    - Give every class a Metadata: an explicit class attribute must be a Metadata
      instance, otherwise one named after __typename__ is created.
    - Provide a compact __repr__ naming the entity.
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(cls, name, bases, namespace | {"__typename__": typename(name)})

        if "metadata" not in namespace:
            self.metadata = Metadata(self.__typename__)
        elif not isinstance(namespace["metadata"], Metadata):
            raise TypeError(f"{self.__typename__} 'metadata' must be a metadata instance")

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}(name={self.metadata.name!r})"
        self.__repr__ = __repr__

        return self


async def _instantiate(key, factory):
    """
    Internal: call a factory and await its result when it is awaitable.
    """
    logger.debug("factory_invoked", key=str(key))
    entity = factory()
    if inspect.isawaitable(entity):
        entity = await entity
    return entity


def _sanitize_map(owner, registry, kind, /):
    if not isinstance(registry, kind):
        raise TypeError(f"{owner.__typename__} must provide a {kind.__typename__}, got {type(registry).__name__}")
    return registry


class Namespace(metaclass=EntityType):
    """
    Non-leaf node of the command tree.

    Subclasses override the coroutines get_namespaces() and get_commands() to expose
    their children; both default to empty maps. The parent back-reference is set once,
    at construction, and never reassigned.
    """

    parent = mirror("parent")

    def __init__(self, parent=None):
        if parent is not None and not isinstance(parent, Namespace):
            raise TypeError(f"{type(self).__typename__} parent must be a namespace")
        self._parent = parent

    async def get_namespaces(self):
        return NamespaceMap()

    async def get_commands(self):
        return CommandMap()

    async def _namespaces(self):
        return _sanitize_map(type(self), await self.get_namespaces(), NamespaceMap)

    async def _commands(self):
        return _sanitize_map(type(self), await self.get_commands(), CommandMap)

    async def locate(self, argv, /):
        """
        Resolve argv against the tree rooted at this namespace.

        Reads tokens left to right, one pass:
        - a child namespace key (or alias) descends, consuming the token;
        - a command key (or alias) ends resolution, consuming the token;
        - otherwise the namespace's Default command ends resolution, keeping the token;
        - otherwise resolution stops at the deepest namespace reached.
        A namespace entered with no tokens left yields its Default command (which takes
        over the namespace's path slot) or the namespace itself.

        Returns
        - Location(args, obj, path): unconsumed tokens, resolved entity, and the
          (typed token, entity) pairs walked through, relative to this namespace.
        """
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("locate() argument must be an iterable of strings")

        namespace, args, path = self, list(argv), []

        while args:
            token, rest = args[0], args[1:]

            namespaces = await namespace._namespaces()
            if (factory := namespaces.resolve_aliases(token)) is not None:
                namespace = await _instantiate(token, factory)
                path.append((token, namespace))
                args = rest
                logger.debug("namespace_matched", key=token, depth=len(path))
                continue

            commands = await namespace._commands()
            if (factory := commands.resolve_aliases(token)) is not None:
                command = await _instantiate(token, factory)
                path.append((token, command))
                logger.debug("command_matched", key=token, depth=len(path), args=len(rest))
                return Location(rest, command, path)

            if (factory := commands.default) is not None:
                command = await _instantiate(Default, factory)
                path.append((token, command))
                logger.debug("default_selected", key=token, depth=len(path), args=len(args))
                return Location(args, command, path)

            logger.debug("locate_stopped", token=token, depth=len(path), args=len(args))
            return Location(args, namespace, path)

        if path and (factory := (await namespace._commands()).default) is not None:
            command = await _instantiate(Default, factory)
            path[-1] = (path[-1][0], command)
            logger.debug("default_selected", key=path[-1][0], depth=len(path), args=0)
            return Location([], command, path)

        return Location([], namespace, path)

    async def get_command_metadata_list(self):
        """
        List every command reachable from this namespace, depth-first.

        Order: a namespace's own commands (map order) before its child namespaces (map
        order). Alias entries are skipped; each listing carries the aliases that point at
        its key. A Default-keyed command shares its namespace's path.
        """
        async def walk(namespace, prefix):
            listings = []

            commands = await namespace._commands()
            aliases = commands.get_aliases()
            for key, entry in commands.entries():
                if isinstance(entry, str):
                    continue
                command = await _instantiate(key, entry)
                path = list(prefix) if key is Default else [*prefix, (key, command)]
                listings.append(CommandListing(command, namespace, path, aliases.get(key, []), command.metadata))

            for key, entry in (await namespace._namespaces()).entries():
                if isinstance(entry, str):
                    continue
                child = await _instantiate(key, entry)
                listings.extend(await walk(child, [*prefix, (key, child)]))

            return listings

        return await walk(self, [])


class Command(metaclass=EntityType):
    """
    Leaf node of the command tree.

    Subclasses override run(inputs, options) with their business logic. validate(inputs)
    runs the validators declared on metadata.inputs and may be extended.
    """

    namespace = mirror("namespace")

    def __init__(self, namespace=None):
        if namespace is not None and not isinstance(namespace, Namespace):
            raise TypeError(f"{type(self).__typename__} namespace must be a namespace")
        self._namespace = namespace

    async def validate(self, inputs):
        validate_inputs(self.metadata, inputs)

    async def run(self, inputs, options):
        raise NotImplementedError(f"{type(self).__typename__} does not implement run()")


def generate_command_path(entity, /):
    """
    Return the (name, entity) pairs from the root down to entity.

    Names come from each entity's metadata, so the result is stable regardless of the
    spellings used to reach the entity.
    """
    if not isinstance(entity, Namespace | Command):
        raise TypeError("generate_command_path() argument must be a namespace or a command")

    path = []
    while entity is not None:
        path.append((entity.metadata.name, entity))
        entity = entity.parent if isinstance(entity, Namespace) else entity.namespace
    return path[::-1]


def format_command_path(entity, /, separator=" "):
    """
    Join the route of entity into a single string, e.g. "app cordova build".
    """
    return separator.join(name for name, _ in generate_command_path(entity))


async def render_commands(namespace, /, *, colorful=True):
    """
    Build a rich table of every command reachable from namespace.

    Columns: the command route (relative to namespace), its aliases, its description.
    """
    styles = defaultdict(str, {
        "commands-title": "bold #FFFFFF",
        "commands-table": "#4B5563",  # slate border
        "command": "bold #36C5F0",  # sky-blue routes
        "aliases": "#A78BFA",
        "description": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    table = Table(
        "command", "aliases", "description",
        title=Text("commands" if namespace.parent is None else "subcommands", styler("commands-title")),
        box=ROUNDED,
        style=styler("commands-table"),
        header_style=styler("commands-title"),
    )

    for listing in await namespace.get_command_metadata_list():
        route = " ".join(key for key, _ in listing.path) or Text("(default)", "italic")
        table.add_row(
            Text(route, styler("command")) if isinstance(route, str) else route,
            Text(", ".join(listing.aliases), styler("aliases")),
            Text(str(listing.metadata.descr or ""), styler("description")),
        )

    return table


async def invoke(root, argv=None, /, *, shell=False, colorful=True, fancy=False):
    """
    Resolve argv against root and dispatch to the resolved command.

    Parameters
    - argv: None (read sys.argv[1:]), a shell-like string, or an iterable of tokens.
    - shell: surface faults by printing them and exiting with status 1 instead of raising.
    - colorful / fancy: rendering switches for faults and listings.

    Behavior
    - Command: tokenize the leftover args against its option schema, validate the
      positional inputs, then return the result of run(inputs, options).
    - Namespace with leftover args: UnknownCommandError, with close-match suggestions.
    - Namespace with no leftover args: print its command listing, return None.
    """
    if not isinstance(root, Namespace):
        raise TypeError("invoke() first argument must be a namespace")

    if argv is None:
        argv = sys.argv[1:]
    elif isinstance(argv, str):
        argv = shlex.split(argv)

    context = {
        "shell": shell,
        "colorful": colorful,
        "fancy": fancy,
        "prog": root.metadata.name,
    }

    location = await root.locate(argv)

    if isinstance(command := location.obj, Command):
        options = parse_args(location.args, normalize(command.metadata.options))
        inputs = options[POSITIONALS]
        logger.debug("command_dispatched", route=format_command_path(command), inputs=len(inputs))
        try:
            await command.validate(inputs)
        except CommandException as fault:
            trigger(fault, **context)
            return None
        return await command.run(inputs, options)

    namespace = location.obj
    if location.args:
        token = location.args[0]
        keys = [
            key
            for registry in (await namespace._namespaces(), await namespace._commands())
            for key in registry
            if key is not Default
        ]
        nested = bool(location.path)
        kind = "subcommand" if nested else "command"
        route = " ".join([root.metadata.name, *(key for key, _ in location.path)])

        trigger(UnknownCommandError(
            f"unknown {kind} {token!r} under {route!r}",
            code=FaultCode.UNKNOWN_SUBCOMMAND if nested else FaultCode.UNKNOWN_COMMAND,
            title=f"unknown {kind}",
            token=token,
            suggestions=tuple(difflib.get_close_matches(token, keys, 5)),
        ), **context)
        return None

    Console().print(await render_commands(namespace, colorful=colorful))
    return None


__all__ = (
    # Types
    "Namespace",
    "Command",
    "Location",
    "CommandListing",

    # Functions
    "generate_command_path",
    "format_command_path",
    "render_commands",
    "invoke",
)

# Keep the metaclass out of star-imports; it is not part of the public API.
del EntityType
