"""
Per-character lookup over command names and aliases.

Every command node owns one CharacterTrie describing its direct children: each
name or alias of a child inserts one path of CharacterNodes, closed by a
terminator node (keyed by None) that references the child command. The trie
and the command tree are separate structures; trie depth is character depth
and has nothing to do with the command hierarchy.

Promotion
- after each insertion, a command reference is copied upwards onto every node
  whose children all resolve to that same command. Such a node is a prefix that
  uniquely identifies one command, which is what makes abbreviations work:
  with {config, copy, copa}, the node for "con" references config while the node
  for "cop" references nothing (shared by copy and copa).

Resolution outcomes
- MATCH: the token (or an unambiguous prefix of it) identifies one command.
- AMBIGUOUS: the whole token was consumed at a node shared by several commands.
- MISSPELLED: the token diverged after it had already identified one command.
- UNSUPPORTED: the token diverged while still ambiguous, matched nothing, or
  was empty.

Example
    >>> trie.resolve("con")
    Resolution(outcome=<Outcome.MATCH: 1>, command=command-node(name='config', ...))
"""
import difflib
import weakref
from enum import IntEnum
from typing import NamedTuple

from .faults import *
from .utils import normalize

TERMINATOR = None


class Outcome(IntEnum):
    MATCH       = 1
    AMBIGUOUS   = 2
    UNSUPPORTED = 3
    MISSPELLED  = 4


class Resolution(NamedTuple):
    outcome: Outcome
    command: object = None


class CharacterNode:
    """
    One edge-node of the trie, keyed by a single lower-cased character.

    - char: the character (None for terminators, "^" for the root).
    - children: mapping char -> CharacterNode (insertion order).
    - parent: non-owning back reference (None for the root).
    - command: the command node this prefix uniquely identifies, if any.
    """
    __slots__ = ("char", "children", "command", "_parent", "__weakref__")

    def __init__(self, char, parent=None):
        assert char is TERMINATOR or len(char) == 1
        self.char = char
        self.children = {}
        self.command = None
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self):
        return self._parent() if self._parent is not None else None

    @property
    def terminal(self):
        return self.char is TERMINATOR

    def add_child(self, char):
        """
        Return the child for `char`, creating it when missing.
        """
        try:
            return self.children[char]
        except KeyError:
            node = self.children[char] = CharacterNode(char, self)
            return node

    def promote(self):
        """
        Recompute the promoted command references of this subtree, bottom-up.

        Terminators keep their command; any other node gets a command only when
        all of its children resolve to the very same command node.
        """
        if self.terminal:
            return self.command

        commands = {id(child.promote()): child.command for child in self.children.values()}
        if len(commands) == 1 and None not in commands.values():
            self.command = next(iter(commands.values()))
        else:
            self.command = None
        return self.command

    def __repr__(self):
        return f"character-node(char={self.char!r}, command={getattr(self.command, 'name', None)!r})"


class CharacterTrie(CharacterNode):
    """
    Root of a per-scope character trie.

    The scope is the command node whose children are indexed here; it is kept
    as a weak reference and only used to phrase "not supported" messages with
    the canonical command path.
    """
    __slots__ = ("_scope", "_terminators")

    def __init__(self, scope=None):
        super().__init__("^")
        self._scope = weakref.ref(scope) if scope is not None else None
        self._terminators = []

    @property
    def scope(self):
        return self._scope() if self._scope is not None else None

    @property
    def terminators(self):
        return tuple(self._terminators)

    def __contains__(self, name):
        node = self
        for char in [*normalize(name), TERMINATOR]:
            try:
                node = node.children[char]
            except KeyError:
                return False
        return True

    def insert(self, name, command):
        """
        Add a command name (or alias) to the trie.

        rules
        - the name is normalized (trimmed, lower-cased); empty names and names
          with inner whitespace are rejected with ValueError.
        - re-inserting an already terminated path is a duplicate (ValueError).
        - promotion is recomputed so lookups see the new state immediately.

        returns
        - the terminator node referencing `command`.
        """
        if not (key := normalize(name)):
            raise ValueError("command name cannot be empty")
        if any(char.isspace() for char in key):
            raise ValueError(f"command name {name!r} cannot contain whitespace")
        if name in self:
            raise ValueError(f"command name {key!r} is already in use")

        node = self
        for char in key:
            node = node.add_child(char)
        node = node.add_child(TERMINATOR)
        node.command = command
        self._terminators.append(node)

        self.promote()
        return node

    def resolve(self, token):
        """
        Classify a user token against the trie (see module docstring).

        the walk goes over the normalized token followed by the terminator, so an
        exact name always wins over longer names sharing the same prefix.
        """
        if not isinstance(token, str) or not (key := normalize(token)):
            return Resolution(Outcome.UNSUPPORTED)

        node = self
        for char in [*key, TERMINATOR]:
            if char not in node.children:
                break
            node = node.children[char]
        else:
            return Resolution(Outcome.MATCH, node.command)

        if char is TERMINATOR:
            # the whole token was consumed
            if node.command is not None:
                return Resolution(Outcome.MATCH, node.command)
            return Resolution(Outcome.AMBIGUOUS)

        if node.command is not None:
            return Resolution(Outcome.MISSPELLED, node.command)
        return Resolution(Outcome.UNSUPPORTED)

    def candidates(self, token):
        """
        Canonical names of every command reachable below the prefix `token`.
        """
        node = self
        for char in normalize(token):
            try:
                node = node.children[char]
            except KeyError:
                return []

        names = []
        stack = [node]
        while stack:
            current = stack.pop()
            if current.terminal and current.command.name not in names:
                names.append(current.command.name)
            stack.extend(reversed(current.children.values()))
        return names

    def find(self, token):
        """
        Resolve `token` to a command node or raise the matching syntax fault.

        raises
        - AmbiguousCommandError: "Command '<token>' is not unique."
        - MisspelledCommandError: "Command '<token>' not fully identified, probably misspelled."
        - UnknownCommandError: "Command '<path> <token>' is not supported."
        """
        outcome, command = self.resolve(token)
        if outcome is Outcome.MATCH:
            return command

        if outcome is Outcome.AMBIGUOUS:
            candidates = self.candidates(token)
            raise AmbiguousCommandError(
                f"Command '{token}' is not unique.",
                title="ambiguous command",
                code=FaultCode.AMBIGUOUS_COMMAND,
                token=token,
                candidates=candidates,
                hint="type more characters to choose between %s" % ", ".join(map(repr, candidates)),
            )

        if outcome is Outcome.MISSPELLED:
            raise MisspelledCommandError(
                f"Command '{token}' not fully identified, probably misspelled.",
                title="misspelled command",
                code=FaultCode.MISSPELLED_COMMAND,
                token=token,
                suggestions=[command.name],
                hint="did you mean %r?" % command.name,
            )

        scope = self.scope
        path = [*getattr(scope, "canonical_path", ()), token]
        names = [terminator.command.name for terminator in self._terminators]
        suggestions = difflib.get_close_matches(normalize(token), dict.fromkeys(names), 5)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "available commands: %s" % ", ".join(dict.fromkeys(names)) if names else None
        raise UnknownCommandError(
            f"Command '{' '.join(path)}' is not supported.",
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            token=token,
            suggestions=suggestions,
            hint=hint,
        )


__all__ = (
    "TERMINATOR",
    "Outcome",
    "Resolution",
    "CharacterNode",
    "CharacterTrie",
)
