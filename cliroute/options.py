r"""
cliroute option definitions, groups and the single-pass option parser.

Overview
- OptionDefinition: one recognized option with its aliases (e.g., -h/--help),
  whether it takes a value, the allowed values, and two callbacks:
  • init(config): (re)establish the default before every parse.
  • action(config, value): apply the option; flags receive True.
- OptionGroup: a titled list of definitions, either command-specific or common
  (global, shared by every command).
- parse(argv, groups, config): the parser; returns ParseResult(remainder,
  missing_mandatory).
- Options: a per-session registry of command and common groups that
  remembers the configuration object the callbacks operate on.

Parsing rules (single left-to-right pass)
- definitions are searched command groups first, then common groups; the first
  alias match wins.
- every definition is re-initialized on each call, so repeated parses (one per
  REPL line, for example) never leak state from a previous call.
- a literal '--' stops option scanning: it is dropped and everything after it
  is appended to the remainder verbatim.
- '-x'/'--name' tokens are split on the first '='; unknown names are kept in the
  remainder unchanged.
- valued options take the '=' suffix or the next token; missing values and
  values outside 'values' are syntax faults.
- after the scan, each mandatory definition that was not seen yields
  "Mandatory '<alias1>|<alias2>' not found".

Quick example:
    >>> level = OptionDefinition(
    ...     "--loglevel",
    ...     init=lambda config: setattr(config, "level", "info"),
    ...     action=lambda config, value: setattr(config, "level", value),
    ...     values=("silent", "info", "debug"),
    ... )
    >>> parse(["build", "--loglevel", "debug"], [OptionGroup("Common", level, common=True)], config)
    ParseResult(remainder=['build'], missing_mandatory=[])
"""
import re
from collections.abc import Iterable
from typing import NamedTuple

from .faults import *
from .utils import *


class ParseResult(NamedTuple):
    remainder: list[str]
    missing_mandatory: list[str]


def _noop(config, /):
    pass


def _sanitize_definition_metadata(cls, metadata, /):
    """
    Internal: validate and normalize OptionDefinition metadata in place.

    - aliases: at least one; each a non-empty option-shaped string
      (r"--?[^\W\d_](-?[^\W_]+)*", e.g. "-C", "-dd", "--loglevel"); no duplicates.
    - init/action: callables.
    - values: Unset or a non-string iterable of strings without duplicates;
      values and param imply has_value.
    - message/param: Unset or non-empty strings.
    """
    aliases = []
    if not metadata["aliases"]:
        raise TypeError(f"{cls.__typename__} must specify at least one alias")
    for alias in metadata["aliases"]:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        elif not (alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} aliases cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", alias):
            raise ValueError(f"{cls.__typename__} alias {alias!r} is not a valid option name")
        elif alias in aliases:
            raise ValueError(f"{cls.__typename__} aliases cannot contain duplicates")
        aliases.append(alias)
    metadata["aliases"] = aliases

    if not callable(metadata["init"]):
        raise TypeError(f"{cls.__typename__} 'init' must be callable")
    if not callable(metadata["action"]):
        raise TypeError(f"{cls.__typename__} 'action' must be callable")

    if (values := metadata["values"]) is not Unset:
        if isinstance(values, str) or not isinstance(values, Iterable):
            raise TypeError(f"{cls.__typename__} 'values' must be an iterable of strings")
        sanitized = []
        for value in values:
            if not isinstance(value, str):
                raise TypeError(f"{cls.__typename__} 'values' must be an iterable of strings")
            if value in sanitized:
                raise ValueError(f"{cls.__typename__} 'values' cannot contain duplicates")
            sanitized.append(value)
        metadata["values"] = tuple(sanitized)

    for field in ("message", "param"):
        if not isinstance(text := metadata[field], str | Unset):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif isinstance(text, str) and not text.strip():
            raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")

    metadata["has_value"] = bool(
        metadata["has_value"] or metadata["values"] is not Unset or metadata["param"] is not Unset
    )
    for field in ("values", "message", "param"):
        metadata[field] = coalesce(metadata[field])


class OptionDefinition(metaclass=IntrospectableType):
    """
    One recognized option.

    Fields (read-only)
    - aliases: the tokens matching this option, e.g. ("-h", "--help").
    - init / action: configuration callbacks (see module docstring).
    - has_value: the option consumes a value.
    - values: allowed values, or None for any value.
    - mandatory: parsing reports the option when it is missing.
    - multiple: the option may be repeated (help marks it with '*').
    - early: shown first in help; never changes the parsing order.
    - help: the option requests help (rendered on a line of its own).
    - message / param: help description and value placeholder (e.g. 'folder').

    Transient
    - processed: set when the option was seen by the last parse.
    """

    __introspectable__ = (
        "aliases",
        "init",
        "action",
        "has_value",
        "values",
        "mandatory",
        "multiple",
        "early",
        "help",
        "message",
        "param",
    )

    __displayable__ = (
        "aliases",
        "has_value",
        "values",
        "mandatory",
        "multiple",
    )

    def __init__(
            self,
            *aliases,
            init=_noop,
            action,
            has_value=False,
            values=Unset,
            mandatory=False,
            multiple=False,
            early=False,
            help=False,
            message=Unset,
            param=Unset,
    ):
        metadata = {
            "aliases": aliases,
            "init": init,
            "action": action,
            "has_value": has_value,
            "values": values,
            "mandatory": bool(mandatory),
            "multiple": bool(multiple),
            "early": bool(early),
            "help": bool(help),
            "message": message,
            "param": param,
        }
        _sanitize_definition_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self.processed = False

    def reset(self, config, /):
        """
        Call init(config) and forget the processed state of the previous parse.
        """
        self.processed = False
        self._init(config)

    def apply(self, config, value=True, /):
        self._action(config, value)
        self.processed = True


class OptionGroup(metaclass=IntrospectableType):
    """
    A titled collection of option definitions.

    - common: the group applies to every command (global options).
    - front: registries insert the group before the existing ones.
    """

    __introspectable__ = (
        "title",
        "definitions",
        "common",
        "front",
    )

    def __init__(self, title, /, *definitions, common=False, front=False):
        if not isinstance(title, str):
            raise TypeError(f"{type(self).__typename__} 'title' must be a string")
        elif not (title := title.strip()):
            raise ValueError(f"{type(self).__typename__} 'title' cannot be empty")
        self._title = title
        self._definitions = []
        self._common = bool(common)
        self._front = bool(front)
        self.extend(definitions)

    def extend(self, definitions, /, *, front=False):
        """
        Add definitions at the end (or at the front) of this group.

        Raises
        - TypeError: when a definition is not an OptionDefinition.
        - ValueError: when an alias is already claimed within this group; the
          group is left untouched.
        """
        definitions = list(definitions)
        aliases = {alias for definition in self._definitions for alias in definition.aliases}
        for definition in definitions:
            if not isinstance(definition, OptionDefinition):
                raise TypeError(f"{type(self).__typename__} definitions must be option-definition instances")
            if duplicates := aliases.intersection(definition.aliases):
                raise ValueError(
                    f"{type(self).__typename__} {self._title!r} option {sorted(duplicates)[0]!r} is already in use"
                )
            aliases.update(definition.aliases)
        if front:
            self._definitions[:0] = definitions
        else:
            self._definitions.extend(definitions)


def _flatten(groups):
    """
    All definitions of `groups`: command-specific groups first, then common ones.
    """
    groups = list(groups)
    definitions = []
    for group in [*(g for g in groups if not g.common), *(g for g in groups if g.common)]:
        definitions.extend(group.definitions)
    return definitions


def parse(argv, groups, config=None, /):
    """
    Separate recognized options from the remaining arguments.

    parameters
    - argv: sequence of str tokens (already stripped of the command path).
    - groups: iterable of OptionGroup; command groups win over common groups.
    - config: the object handed to init()/action() callbacks.

    returns
    - ParseResult(remainder, missing_mandatory)

    raises
    - OptionValueRequiredError: "'<option>' expects a value"
    - InvalidChoiceError: "Value '<value>' not allowed for '<option>'"
    """
    definitions = _flatten(groups)

    lookup = {}
    for definition in definitions:
        definition.reset(config)
        for alias in definition.aliases:
            lookup.setdefault(alias, definition)

    argv = list(argv)
    remainder = []
    index = 0
    while index < len(argv):
        token = argv[index]
        index += 1

        if token == "--":
            remainder.extend(argv[index:])
            break

        if not token.startswith("-"):
            remainder.append(token)
            continue

        input, separator, value = token.partition("=")
        try:
            definition = lookup[input]
        except KeyError:
            remainder.append(token)
            continue

        if not definition.has_value:
            definition.apply(config, True)
            continue

        if not separator:
            if index >= len(argv):
                raise OptionValueRequiredError(
                    f"'{input}' expects a value",
                    title="option value required",
                    code=FaultCode.OPTION_VALUE_REQUIRED,
                    input=input,
                    hint="pass it after a space (for example: %s <%s>)" % (input, definition.param or "value"),
                )
            value = argv[index]
            index += 1

        if definition.values is not None and value not in definition.values:
            raise InvalidChoiceError(
                f"Value '{value}' not allowed for '{input}'",
                title="invalid choice",
                code=FaultCode.INVALID_CHOICE,
                input=input,
                value=value,
                hint="use one of %s" % ", ".join(map(repr, definition.values)),
            )

        definition.apply(config, value)

    missing = [
        "Mandatory '%s' not found" % "|".join(definition.aliases)
        for definition in definitions
        if definition.mandatory and not definition.processed
    ]
    return ParseResult(remainder, missing)


def filter_own_arguments(argv, /):
    """
    Arguments up to the first '--' (the command's own arguments).
    """
    own = []
    for arg in argv:
        if arg == "--":
            break
        own.append(arg)
    return own


def filter_other_arguments(argv, /):
    """
    Arguments after the first '--' (forwarded to a child tool); later '--' are kept.
    """
    argv = list(argv)
    try:
        return argv[argv.index("--") + 1:]
    except ValueError:
        return []


class Options:
    """
    Per-session registry of option groups.

    Each session (application run, REPL line handler, socket client) owns one
    registry bound to its own configuration object; registries are never
    shared between sessions.
    """

    def __init__(self, config, groups=()):
        self.config = config
        self.groups = []
        self.common_groups = []
        self.add_groups(groups)

    def add_groups(self, groups, /):
        """
        Register groups, common ones separately; `front` groups go first.
        """
        for group in groups:
            if not isinstance(group, OptionGroup):
                raise TypeError("options groups must be option-group instances")
            target = self.common_groups if group.common else self.groups
            if group.front:
                target.insert(0, group)
            else:
                target.append(group)

    def append_to_groups(self, groups, /):
        """
        Merge the definitions of `groups` into registered groups with the same title.
        """
        for group in groups:
            for existing in self.common_groups if group.common else self.groups:
                if existing.title == group.title:
                    existing.extend(group.definitions, front=group.front)

    @property
    def definitions(self):
        return tuple(_flatten([*self.groups, *self.common_groups]))

    def initialize_configuration(self):
        """
        Run every init() callback (and clear processed flags) on the session config.
        """
        for definition in self.definitions:
            definition.reset(self.config)

    def parse(self, argv, groups=(), /):
        """
        Parse `argv` with the registered groups plus the command-specific `groups`.
        """
        return parse(argv, [*groups, *self.groups, *self.common_groups], self.config)


__all__ = (
    "OptionDefinition",
    "OptionGroup",
    "Options",
    "ParseResult",
    "parse",
    "filter_own_arguments",
    "filter_other_arguments",
)
