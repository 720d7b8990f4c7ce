"""
Session configuration and the common (global) options.

GNU recommended options
- https://www.gnu.org/prep/standards/html_node/Option-Table.html

Log level options
- -s, --silent:   --loglevel silent (not even errors)
- -q, --quiet:    --loglevel warn (errors and warnings)
- --informative:  --loglevel info (default)
- -v, --verbose:  --loglevel verbose
- -d, --debug:    --loglevel debug (twice: trace)
- -dd, --trace:   --loglevel trace
"""
import os

from .logger import DEFAULT_LEVEL, LEVELS
from .options import OptionDefinition, OptionGroup


class Configuration:
    """
    Values set by the common options; one instance per session.

    - log_level: level name set via --loglevel and the shortcuts.
    - cwd: current folder, set via -C.
    - help_requested: --help was given.
    - version_requested: --version was given.
    """

    def __init__(self, cwd=None):
        self.log_level = DEFAULT_LEVEL
        self.cwd = cwd if cwd is not None else os.getcwd()
        self.help_requested = False
        self.version_requested = False

    def __repr__(self):
        return "configuration(%s)" % ", ".join("%s=%r" % item for item in vars(self).items())


def _set_level(level):
    def action(config, value):
        config.log_level = level
    return action


def _debug(config, value):
    # `-d -d` increases the level to trace
    config.log_level = "trace" if config.log_level == "debug" else "debug"


def _change_folder(cwd):
    def init(config):
        config.cwd = cwd

    def action(config, value):
        # a relative -C is interpreted relative to the preceding -C
        config.cwd = os.path.abspath(os.path.join(config.cwd, value))

    return init, action


def common_options(cwd=None):
    """
    The group of options shared by every command.

    `cwd` is the folder -C starts from (the process folder when omitted).
    """
    init, action = _change_folder(cwd if cwd is not None else os.getcwd())
    return OptionGroup(
        "Common options",
        OptionDefinition(
            "-h", "--help",
            init=lambda config: setattr(config, "help_requested", False),
            action=lambda config, value: setattr(config, "help_requested", True),
            help=True,
            message="Quick help",
        ),
        OptionDefinition(
            "--version",
            init=lambda config: setattr(config, "version_requested", False),
            action=lambda config, value: setattr(config, "version_requested", True),
            early=True,
            message="Show version",
        ),
        OptionDefinition(
            "--loglevel",
            init=lambda config: setattr(config, "log_level", DEFAULT_LEVEL),
            action=lambda config, value: setattr(config, "log_level", value),
            values=tuple(LEVELS),
            message="Set log level",
            param="level",
        ),
        OptionDefinition("-s", "--silent", action=_set_level("silent"),
                         message="Disable all messages (--loglevel silent)"),
        OptionDefinition("-q", "--quiet", action=_set_level("warn"),
                         message="Mostly quiet, warnings and errors (--loglevel warn)"),
        OptionDefinition("--informative", action=_set_level("info"),
                         message="Informative (--loglevel info)"),
        OptionDefinition("-v", "--verbose", action=_set_level("verbose"),
                         message="Verbose (--loglevel verbose)"),
        OptionDefinition("-d", "--debug", action=_debug,
                         message="Debug messages (--loglevel debug)"),
        OptionDefinition("-dd", "--trace", action=_set_level("trace"),
                         message="Trace messages (--loglevel trace, -d -d)"),
        OptionDefinition("-C", init=init, action=action, has_value=True,
                         message="Set current folder", param="folder"),
        common=True,
    )


__all__ = (
    "Configuration",
    "common_options",
)
