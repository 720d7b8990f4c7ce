"""
cliroute command layer: the tree of command definitions.

What this module provides
- CommandNode: one command or subcommand (name, aliases, implementation locator,
  optional class name, opaque help metadata, nested children).
- CommandTree: the root node; registers command templates and resolves typed
  command paths ("copy bin ...") to nodes and implementation locators.
- FoundCommand: the resolution result handed to the module-loading collaborator.

Core ideas
- Each node owns a CharacterTrie (see cliroute.trie) over its direct children's
  names and aliases, so every token of a command path is resolved within the
  scope of the node matched by the previous token.
- Registration mistakes (duplicate names, whitespace, leaves without a locator)
  are developer errors: ValueError/TypeError, raised immediately.
- User mistakes (unknown, ambiguous or misspelled commands) are syntax faults
  (cliroute.faults), raised by the trie during resolution.

Quick start
    from cliroute import CommandTree

    tree = CommandTree()
    tree.add_commands({
        "copy": {
            "aliases": ["cp"],
            "subcommands": {
                "binary": {"locator": "app.copy_binary"},
                "ascii": {"locator": "app.copy_ascii"},
            },
        },
        "conf": {"locator": "app.conf", "class_name": "Conf"},
    })

    found = tree.find_command_module(["cp", "bin", "a.txt"])
    # FoundCommand(locator='app.copy_binary', class_name=None,
    #              canonical_path=('copy', 'binary'), unused=('a.txt',))

Design notes
- Parent references are weak; the owning edge runs parent → children.
- Trees are built once at setup and are read-only during resolution.
"""
import weakref
from typing import NamedTuple

from .trie import CharacterTrie
from .utils import *


class FoundCommand(NamedTuple):
    locator: str | None
    class_name: str | None
    canonical_path: tuple[str, ...]
    unused: tuple[str, ...]
    node: object = None


_template_keys = frozenset(("aliases", "locator", "class_name", "subcommands", "help"))


def _sanitize_name(cls, name, /, *, kind="name"):
    """
    Validate a command name or alias and return its canonical form (see
    normalize(): trimmed and lower-cased).

    Raises
    - TypeError: when the name is not a string.
    - ValueError: when the name is empty or contains whitespace.
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {kind} must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} {kind} cannot be empty")
    elif any(char.isspace() for char in name):
        raise ValueError(f"{cls.__typename__} {kind} {name!r} cannot contain whitespace")
    return normalize(name)


class CommandNode(metaclass=IntrospectableType):
    """
    One command or subcommand of the tree.

    Fields (read-only)
    - name: canonical name (trimmed, lower-cased).
    - aliases: alternative names, usually shorter or commonly misspelled
      (canonical form, like the name).
    - locator: opaque implementation locator forwarded to the loader, or None.
    - class_name: optional class implementing the command inside the locator.
    - help: opaque metadata for the help renderer, passed through untouched.
    - children: mapping name -> CommandNode, in insertion order.
    - parent: the enclosing node (None for the root).

    The node also owns `trie`, the lookup structure over its children.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "locator",
        "class_name",
        "help",
        "children",
    )

    __displayable__ = (
        "name",
        "aliases",
        "locator",
        "class_name",
        "depth",
    )

    def __init__(self, name, /, aliases=(), locator=Unset, class_name=Unset, help=Unset, parent=Unset):
        cls = type(self)

        self._name = _sanitize_name(cls, name)

        if isinstance(aliases, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be a sequence of strings")
        self._aliases = []
        for alias in aliases:
            alias = _sanitize_name(cls, alias, kind="alias")
            if alias in (self._name, *self._aliases):
                raise ValueError(f"{cls.__typename__} alias {alias!r} duplicates a name of {self._name!r}")
            self._aliases.append(alias)

        if not isinstance(locator, str | Unset):
            raise TypeError(f"{cls.__typename__} 'locator' must be a string")
        self._locator = coalesce(locator)

        if not isinstance(class_name, str | Unset):
            raise TypeError(f"{cls.__typename__} 'class_name' must be a string")
        self._class_name = coalesce(class_name)

        self._help = coalesce(help)
        self._children = {}
        self._parent = weakref.ref(parent) if parent is not Unset else None
        self.trie = CharacterTrie(self)

    @property
    def parent(self):
        return self._parent() if self._parent is not None else None

    @property
    def depth(self):
        """
        Position in the hierarchy: 1 for the root, +1 per descent.
        """
        depth, parent = 1, self.parent
        while parent is not None:
            depth, parent = depth + 1, parent.parent
        return depth

    @property
    def path(self):
        """
        Full ancestry from root to this node, as a tuple of nodes.
        """
        path = [node := self]
        while (node := node.parent) is not None:
            path.append(node)
        return tuple(reversed(path))

    @property
    def canonical_path(self):
        """
        Unaliased command names from the first level down to this node.
        """
        return tuple(node.name for node in self.path[1:])

    @property
    def names(self):
        return (self._name, *self._aliases)

    def has_children_commands(self):
        return bool(self._children)

    def get_children_command_names(self):
        """
        Names of the direct subcommands, in insertion order.
        """
        return list(self._children)

    def resolve_locator(self):
        """
        The implementation locator of this node, else of its nearest ancestor.

        Grouping namespaces (nodes with subcommands only) inherit the locator of
        the enclosing command; None when no ancestor defines one.
        """
        node = self
        while node is not None:
            if node.locator is not None:
                return node.locator
            node = node.parent
        return None

    def add_command(self, name, /, **template):
        """
        Create a child command from a template and register it in this scope.

        Template keys
        - aliases, locator, class_name, help: see CommandNode.
        - subcommands: mapping of nested templates, registered recursively.

        Rules
        - a leaf (no subcommands) must define a locator (TypeError).
        - the name and every alias must be free in this scope (ValueError).

        Returns
        - the new CommandNode.
        """
        if unknown := template.keys() - _template_keys:
            raise TypeError(f"{type(self).__typename__} template for {name!r} has unknown keys: {sorted(unknown)}")

        subcommands = template.pop("subcommands", None) or {}
        if not subcommands and template.get("locator", Unset) is Unset:
            raise TypeError(f"{type(self).__typename__} {name!r} must define a 'locator' or subcommands")

        node = CommandNode(name, parent=self, **template)

        # claim every name before touching the trie, so a collision leaves this scope untouched
        for alias in node.names:
            if alias in self.trie:
                typeof = "subcommand" if self.parent is not None else "command"
                raise ValueError(f"{type(self).__typename__} {typeof} name {normalize(alias)!r} is already in use")

        for alias in node.names:
            self.trie.insert(alias, node)
        self._children[node.name] = node

        node.add_commands(subcommands)
        return node

    def add_commands(self, commands, /):
        """
        Register every {name: template} entry of `commands` under this node.
        """
        for name, template in commands.items():
            self.add_command(name, **template)

    def find_command_node(self, parts, /):
        """
        Resolve a typed command path, one token per level.

        Behavior
        - parts[0] is resolved in this node's trie.
        - while tokens remain and the matched node has subcommands, the next
          token is resolved in that node's own trie.
        - tokens left over at a node without subcommands are not interpreted;
          callers compute them from the node depth.

        Raises
        - TypeError: when parts is a plain string.
        - ValueError: when parts is empty.
        - UnknownCommandError / AmbiguousCommandError / MisspelledCommandError.
        """
        if isinstance(parts, str):
            raise TypeError(f"{type(self).__typename__} path must be a sequence of strings")
        if not (parts := list(parts)):
            raise ValueError(f"{type(self).__typename__} path must contain at least one command")

        node = self
        for part in parts:
            if not node.has_children_commands():
                break
            node = node.trie.find(part)
        return node


class CommandTree(CommandNode):
    """
    Root of the commands tree (depth 1, no name of its own in paths).
    """

    def __init__(self, help=Unset):
        super().__init__("(tree)", help=help)

    def find_command_module(self, parts, /):
        """
        Resolve `parts` and describe the implementation to load.

        Returns
        - FoundCommand with the (possibly inherited) locator, the class name, the
          canonical (unaliased) command path and the tokens not used to select
          the command.
        """
        if not self.has_children_commands():
            raise RuntimeError("no commands defined yet")

        parts = tuple(parts)
        node = self.find_command_node(parts)
        return FoundCommand(
            locator=node.resolve_locator(),
            class_name=node.class_name,
            canonical_path=node.canonical_path,
            unused=parts[node.depth - 1:],
            node=node,
        )


__all__ = (
    "CommandNode",
    "CommandTree",
    "FoundCommand",
)
