"""
cliroute application layer: dispatch argv to command implementations.

What this module provides
- Command: base class of command implementations. Subclasses implement
  main(argv, forwardable) and may declare their own option groups.
- Application: ties a Context to a loader; start()/dispatch() turn an argv into
  an exit code, printing syntax faults on the session console.
- load_command(found): the default loader, importing `found.locator` as a
  module and picking the command class from it.
- identify_commands(argv): the leading word tokens forming the command path.

Dispatch flow
- the common options are parsed first (log level, --version, --help);
- leading word tokens are resolved through the commands tree, possibly
  abbreviated or aliased ("cp bin" → "copy binary");
- the tokens used to select the command are stripped and the rest is parsed by
  the command with its own groups plus the common groups;
- missing mandatory options and rejected arguments are reported together.

Quick start
    from cliroute import Application, Command, Context

    class Copy(Command):
        def main(self, argv, forwardable):
            self.context.log.info("copying %s", argv)
            return 0

    app = Application(Context("tool"), commands={"copy": {"locator": __name__, "class_name": "Copy"}})
    raise SystemExit(app.start())
"""
import copy
import importlib
import os.path
import re
import sys

from .faults import *
from .logger import TRACE, set_level
from .options import filter_own_arguments, filter_other_arguments
from .utils import *


def identify_commands(argv, /):
    """
    Leading tokens that look like command words (a letter, then letters,
    digits or dashes), lower-cased. The first other token (an option, a
    path) ends the list.
    """
    commands = []
    for arg in argv:
        if not re.fullmatch(r"[a-z][a-z0-9-]*", arg := arg.lower()):
            break
        commands.append(arg)
    return commands


class Command:
    """
    Base class of command implementations.

    Class attributes
    - forwardable: arguments after '--' are passed apart, in `forwardable`.
    - accepts_options: when False, unrecognized '-x' arguments are rejected.
    - accepts_args: when False, positional arguments are rejected.

    Hooks
    - option_groups(): command-specific OptionGroups; called once per run so
      each session gets its own definitions.
    - main(argv, forwardable): the command body; returns an exit code (None
      means success).
    """
    forwardable = False
    accepts_options = True
    accepts_args = True

    def __init__(self, context):
        self.context = context
        context.log.log(TRACE, "%s.__init__()", type(self).__name__)

    def option_groups(self):
        return ()

    def main(self, argv, forwardable):
        raise NotImplementedError(f"{type(self).__name__}.main() is not implemented")

    def validate_argv(self, argv):
        """
        Faults for the arguments this command does not accept.
        """
        faults = []
        for arg in argv:
            if arg.startswith("-") and not self.accepts_options:
                faults.append(UnsupportedArgumentError(
                    f"Option '{arg}' not supported",
                    title="unsupported option",
                    code=FaultCode.UNSUPPORTED_ARGUMENT,
                    input=arg,
                ))
            elif not arg.startswith("-") and not self.accepts_args:
                faults.append(UnsupportedArgumentError(
                    f"Argument '{arg}' not supported",
                    title="unsupported argument",
                    code=FaultCode.UNSUPPORTED_ARGUMENT,
                    input=arg,
                ))
        return faults

    def prepare_and_run(self, argv):
        """
        Parse `argv` (command path already stripped) and run main().

        raises
        - CommandExit: missing mandatory options and/or rejected arguments.
        - any CommandSyntaxError raised by the option parser.
        """
        context = self.context
        log = context.log

        context.unparsed_argv = list(argv)
        if self.forwardable:
            argv, forwardable = filter_own_arguments(argv), filter_other_arguments(argv)
        else:
            forwardable = []

        remainder, missing = context.options.parse(argv, self.option_groups())
        set_level(log, context.config.log_level)
        log.log(TRACE, "%r", context.config)

        if context.config.help_requested:
            self.output_help()
            return ExitCode.SUCCESS

        faults = [
            MissingMandatoryError(
                message,
                title="missing mandatory option",
                code=FaultCode.MISSING_MANDATORY,
                hint="run '%s --help' to see the expected usage" % self.route,
            )
            for message in missing
        ]
        faults.extend(self.validate_argv(remainder))
        if faults:
            raise CommandExit(faults)

        context.own_argv = remainder
        context.forwardable_argv = forwardable

        log.debug("'%s' started", self.route)
        exit_code = self.main(remainder, forwardable)
        exit_code = ExitCode.SUCCESS if exit_code is None else exit_code
        log.debug("'%s' returned %d", self.route, exit_code)
        return exit_code

    @property
    def route(self):
        return " ".join((self.context.program_name, *self.context.matched_commands))

    def output_help(self):
        """
        Print a one-line usage summary for the current command.
        """
        context = self.context
        node = context.command_node
        if node is not None and node.has_children_commands():
            context.console.print(f"Usage: {self.route} <command> [<options>...]")
            context.console.print("Commands: %s" % ", ".join(node.get_children_command_names()))
        else:
            context.console.print(f"Usage: {self.route} [<options>...] [<args>...]")

    def make_path_absolute(self, path):
        """
        Resolve `path` against the session folder (set via -C).
        """
        return os.path.abspath(os.path.join(self.context.config.cwd, path))


def load_command(found, /):
    """
    Default loader: import `found.locator` and return its command class.

    The class named `found.class_name` is used when given; otherwise the first
    Command subclass defined in the module.

    Raises
    - CommandTypeError: the module cannot be imported or defines no command.
    """
    if found.locator is None:
        raise CommandTypeError("command %r has no implementation locator" % " ".join(found.canonical_path))
    try:
        module = importlib.import_module(found.locator)
    except ImportError:
        raise CommandTypeError(f"unable to import module {found.locator!r}") from None

    if found.class_name is not None:
        object = getattr(module, found.class_name, None)
        if isinstance(object, type) and issubclass(object, Command):
            return object
        raise CommandTypeError(f"{found.locator!r} does not define command class {found.class_name!r}")

    for object in vars(module).values():
        if (
            isinstance(object, type) and
            issubclass(object, Command) and
            object is not Command and
            object.__module__ == module.__name__
        ):
            return object
    raise CommandTypeError(f"{found.locator!r} does not define a command class")


class Application:
    """
    Command dispatcher for one session.

    Construction
    - context: the session Context (console, logger, configuration, tree).
    - commands: optional registration mapping added to context.tree.
    - groups: extra OptionGroups (common groups apply to every command).
    - loader: callable(FoundCommand) -> Command subclass; load_command by default.
    - command: Command subclass used when the tree has no commands (single
      command tools).
    - version: printed for --version.

    Faults
    - CommandException/CommandExit are printed on the console and turned into
      their exit code; anything else (assertions, bugs in commands) propagates.
    """

    def __init__(self, context, /, *, commands=Unset, groups=(), loader=load_command, command=Unset, version="0.0.0"):
        if not callable(loader):
            raise TypeError("application 'loader' must be callable")
        if command is not Unset and not (isinstance(command, type) and issubclass(command, Command)):
            raise TypeError("application 'command' must be a command subclass")
        self.context = context
        self.loader = loader
        self.command = command
        self.version = version
        if commands is not Unset:
            context.tree.add_commands(commands)
        context.options.add_groups(groups)

    def start(self, argv=Unset):
        """
        Run once with `argv` (sys.argv[1:] by default) and return the exit code.
        """
        argv = sys.argv[1:] if argv is Unset else list(argv)
        self.context.log.log(TRACE, "%s %s", self.context.program_name, self.version)
        return self.dispatch(argv)

    def dispatch(self, argv):
        """
        Identify the command, load its implementation and run it.

        Safe to call repeatedly on the same session (e.g., once per REPL line):
        option state is re-initialized and per-dispatch context fields are reset.
        """
        context = self.context
        log = context.log
        tree = context.tree

        argv = list(argv)
        for index, arg in enumerate(argv):
            log.log(TRACE, "dispatch argv%d: %r", index, arg)

        try:
            context.options.parse(argv)
            set_level(log, context.config.log_level)

            if context.config.version_requested:
                context.console.print(self.version)
                return ExitCode.SUCCESS

            if tree.has_children_commands():
                commands = identify_commands(argv)
                if not commands:
                    if context.config.help_requested:
                        self.output_help()
                        return ExitCode.SUCCESS
                    raise MissingSubcommandError(
                        "Missing mandatory <command>.",
                        title="missing command",
                        code=FaultCode.MISSING_SUBCOMMAND,
                        hint="available commands: %s" % ", ".join(tree.get_children_command_names()),
                    )

                found = tree.find_command_module(commands)
                context.matched_commands = found.canonical_path
                context.command_node = found.node

                if found.locator is None:
                    if context.config.help_requested:
                        self.output_help(found.node)
                        return ExitCode.SUCCESS
                    route = " ".join(found.canonical_path)
                    raise MissingSubcommandError(
                        f"Command '{route}' expects a sub-command.",
                        title="missing subcommand",
                        code=FaultCode.MISSING_SUBCOMMAND,
                        hint="available subcommands: %s" % ", ".join(found.node.get_children_command_names()),
                    )

                log.debug("command '%s' found in %r", " ".join(found.canonical_path), found.locator)
                cls = self.loader(found)
                command_argv = argv[found.node.depth - 1:]
            elif self.command is not Unset:
                cls = self.command
                command_argv = argv
            else:
                raise RuntimeError("no commands defined yet")

            exit_code = cls(context).prepare_and_run(command_argv)
        except (CommandException, CommandExit) as error:
            exit_code = self.process_error(error)
        finally:
            context.reset()

        log.debug("exit code: %d", exit_code)
        return exit_code

    def process_error(self, error):
        """
        Print a caught fault on the session console and return its exit code.
        """
        context = self.context
        context.console.print(copy.replace(error, prog=context.program_name, colorful=context.colorful))
        return error.exit_code

    def output_help(self, node=Unset):
        """
        Print the usage of a command namespace (the whole tree by default) and
        the names of its subcommands.
        """
        context = self.context
        node = context.tree if node is Unset else node
        route = " ".join((context.program_name, *node.canonical_path))
        context.console.print(f"Usage: {route} <command> [<options>...]")
        context.console.print("Commands: %s" % ", ".join(node.get_children_command_names()))


__all__ = (
    "Application",
    "Command",
    "identify_commands",
    "load_command",
)
