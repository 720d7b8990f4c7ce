"""
The resolution context: everything one session needs, injected explicitly.

A Context bundles the program name, the rich console, the session logger, the
configuration, the options registry and the commands tree. Nothing in cliroute
keeps process-wide registries: concurrent sessions (a terminal and several
socket REPL clients, for example) each build their own Context and may share
only the commands tree, which is read-only after setup.
"""
import time

from rich.console import Console

from .commands import CommandTree
from .config import Configuration, common_options
from .logger import make_logger
from .options import Options
from .utils import *


class Context:
    """
    Per-session state.

    Construction
    - program_name: invocation name, used in messages and logger names.
    - console: rich Console (stderr by default); tests pass a Console writing
      into a StringIO.
    - log: a logger; a rich-backed session logger is created when omitted.
    - config: a Configuration; a fresh one when omitted.
    - tree: the CommandTree; a fresh, empty tree when omitted.
    - colorful: render faults with colors.

    Per-dispatch fields (reset after every dispatch)
    - matched_commands, unparsed_argv, own_argv, forwardable_argv, command_node.
    """

    def __init__(self, program_name, /, *, console=Unset, log=Unset, config=Unset, tree=Unset, colorful=True):
        if not isinstance(program_name, str) or not program_name.strip():
            raise TypeError("context 'program_name' must be a non-empty string")
        self.program_name = program_name.strip()
        self.console = Console(stderr=True) if console is Unset else console
        self.log = make_logger(self.program_name, self.console) if log is Unset else log
        self.config = Configuration() if config is Unset else config
        self.tree = CommandTree() if tree is Unset else tree
        self.colorful = bool(colorful)
        self.options = Options(self.config, [common_options(self.config.cwd)])
        self.start_time = time.monotonic()
        self.reset()

    def reset(self):
        """
        Forget the per-dispatch state, so one command never spills into the next.
        """
        self.matched_commands = ()
        self.unparsed_argv = []
        self.own_argv = []
        self.forwardable_argv = []
        self.command_node = self.tree

    def __repr__(self):
        return f"context(program_name={self.program_name!r}, config={self.config!r})"


__all__ = (
    "Context",
)
