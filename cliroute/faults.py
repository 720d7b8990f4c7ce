"""
cliroute faults (user-facing errors) and rendering.

Scope
- ExitCode: process exit statuses returned by the application runner.
- FaultCode: canonical, stable numeric identifiers for user-facing issues.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- CommandException and subclasses: carry a message + read-only options and
  know how to render themselves through rich.
- CommandExit: a group of faults reported together (e.g., several missing
  mandatory options).

Two taxonomies
- Configuration faults are developer mistakes (duplicate command names, a leaf
  command without a locator, names with whitespace). They are raised as plain
  ValueError/TypeError during registration and are never caught here.
- Syntax faults are user-input mistakes (unknown, ambiguous or misspelled
  commands, option values). They derive from CommandSyntaxError, carry a stable
  message, and are caught by the application to print and exit with SYNTAX.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset


class ExitCode(IntEnum):
    """
    process exit statuses.

    - NONE/SUCCESS (0): ok
    - SYNTAX (1): the command line could not be understood
    - APPLICATION (2): any functional error
    - INPUT (3): no file, no folder, wrong format, etc.
    - OUTPUT (4): cannot create file, cannot write, etc.
    - CHILD (5): a child process returned an error
    - PREREQUISITES (6): prerequisites not met
    - TYPE (7): mismatched type, unimplemented or unsupported
    """
    NONE          = 0
    SUCCESS       = 0
    SYNTAX        = 1
    APPLICATION   = 2
    INPUT         = 3
    OUTPUT        = 4
    CHILD         = 5
    PREREQUISITES = 6
    TYPE          = 7


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, AMBIGUOUS_COMMAND, MISSPELLED_COMMAND, MISSING_SUBCOMMAND
    - options (1111x/1112x)
      • OPTION_VALUE_REQUIRED, INVALID_CHOICE, MISSING_MANDATORY, UNSUPPORTED_ARGUMENT
    - delegated (1113x)
      • DELEGATED_ERROR, raised by command implementations themselves
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101
    AMBIGUOUS_COMMAND           = 11102
    MISSPELLED_COMMAND          = 11103
    MISSING_SUBCOMMAND          = 11104

    # --- option errors (11xxx) ---
    OPTION_VALUE_REQUIRED       = 11117
    INVALID_CHOICE              = 11124
    MISSING_MANDATORY           = 11125
    UNSUPPORTED_ARGUMENT        = 11126

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR             = 11131


_styles = {
    # header parts
    "prog-name": "bold #E6E6F0",  # near-white program name
    "code": "bold #00E5FF",  # neon cyan fault code
    "error-title": "bold #FF4DA6",  # friendly pinky title

    # body
    "error-message": "#C8C8D0",  # soft light gray message
    "hint-arrow": "#9CE19C dim",  # gentle green arrow
    "hint": "italic #9CE19C",  # gentle green hint text
}


class CommandException(Exception):
    """
    base type of every user-facing fault.

    contract
    - message: str, the stable human-readable text (tests and callers match on it).
    - options: read-only mapping with rendering/context data; the usual keys are
      title, code, hint and prog, plus any payload the raiser wants to attach
      (token, candidates, suggestions, ...).
    - exit_code: the status the application returns when this fault is caught.
    """
    exit_code = ExitCode.APPLICATION

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message or "")

    def __rich__(self):
        styles = defaultdict(str, _styles | self.options.get("styles", {}))
        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        code = self.options.get("code", FaultCode.DELEGATED_ERROR)
        title = self.options.get("title", type(self).__name__)

        header = Text.assemble(
            "[ ",
            text(self.options.get("prog", "cli"), styler("prog-name")),
            " — ",
            text(str(int(code)), styler("code")),
            " | ",
            text(title.title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        if not (hint := self.options.get("hint")):
            return Group(header, message)
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint")))
        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandSyntaxError(CommandException):
    exit_code = ExitCode.SYNTAX


class UnknownCommandError(CommandSyntaxError): ...
class AmbiguousCommandError(CommandSyntaxError): ...
class MisspelledCommandError(CommandSyntaxError): ...
class MissingSubcommandError(CommandSyntaxError): ...
class OptionValueRequiredError(CommandSyntaxError): ...
class InvalidChoiceError(CommandSyntaxError): ...
class MissingMandatoryError(CommandSyntaxError): ...
class UnsupportedArgumentError(CommandSyntaxError): ...


class CommandInputError(CommandException):
    exit_code = ExitCode.INPUT


class CommandOutputError(CommandException):
    exit_code = ExitCode.OUTPUT


class CommandTypeError(CommandException):
    exit_code = ExitCode.TYPE


class CommandExit(ExceptionGroup[CommandException]):
    """
    several faults surfaced at once; the application reports all of them and
    exits with the SYNTAX status.
    """
    exit_code = ExitCode.SYNTAX

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        colorful = self.options.get("colorful", True)
        title = Text.assemble(
            "[ ",
            Text(str(self.options.get("prog", "cli")), _styles["prog-name"] if colorful else ""),
            " — ",
            Text(self.message.title(), _styles["error-title"] if colorful else ""),
            " ]"
        )
        return Group(title, *(exception.__replace__(**self.options) for exception in self.exceptions))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


__all__ = (
    "ExitCode",
    "FaultCode",
    "CommandException",
    "CommandSyntaxError",
    "UnknownCommandError",
    "AmbiguousCommandError",
    "MisspelledCommandError",
    "MissingSubcommandError",
    "OptionValueRequiredError",
    "InvalidChoiceError",
    "MissingMandatoryError",
    "UnsupportedArgumentError",
    "CommandInputError",
    "CommandOutputError",
    "CommandTypeError",
    "CommandExit",
)
