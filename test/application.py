"""
Application behavioral tests (dispatch, exit codes, console output).

Scope
- Validate dispatch through abbreviations, aliases and nested commands, and
  the argv handed to the command.
- Validate printed faults and exit codes for unknown, ambiguous, misspelled
  and missing commands, missing mandatory options and rejected arguments.
- Validate --help/--version handling, log level switching and per-dispatch
  context resets.
- Validate the default module loader.

Conventions
- Test method names follow CamelCase per project convention.
- The session console writes into io.StringIO; commands record their calls.
- This module doubles as a command module for the default loader
  (locator=__name__).
"""

from __future__ import annotations

import io
import os.path
import unittest
from unittest import TestCase

from rich.console import Console

from cliroute import (
    Application,
    Command,
    Context,
    ExitCode,
    FoundCommand,
    OptionDefinition,
    OptionGroup,
    identify_commands,
    load_command,
)
from cliroute.faults import CommandInputError, CommandTypeError, FaultCode

calls = []


class FirstCommand(Command):
    """First command class of this module (picked when no class name is given)."""

    def main(self, argv, forwardable):
        calls.append(("first", tuple(argv)))


class Echo(Command):

    def main(self, argv, forwardable):
        calls.append((self.context.matched_commands, tuple(argv), tuple(forwardable)))
        return ExitCode.SUCCESS


class Build(Echo):

    def option_groups(self):
        return [OptionGroup(
            "Build options",
            OptionDefinition(
                "-o", "--output",
                init=lambda config: setattr(config, "output", None),
                action=lambda config, value: setattr(config, "output", value),
                mandatory=True,
                param="file",
            ),
        )]

    def main(self, argv, forwardable):
        calls.append(("build", self.context.config.output, tuple(argv)))
        self.context.log.debug("building %s", self.context.config.output)
        return 0


class Run(Echo):
    forwardable = True


class Strict(Echo):
    accepts_options = False
    accepts_args = False


class Missing(Echo):

    def main(self, argv, forwardable):
        raise CommandInputError(f"File '{argv[0]}' not found", code=FaultCode.DELEGATED_ERROR, title="input error")


class Broken(Echo):

    def main(self, argv, forwardable):
        raise RuntimeError("bug in the command")


class Where(Echo):

    def main(self, argv, forwardable):
        calls.append(self.make_path_absolute(argv[0]))


COMMANDS = {
    "build": {"aliases": ["b", "bild"], "class_name": "Build"},
    "config": {"aliases": ["conf", "cong", "co"], "class_name": "Echo"},
    "copy": {
        "aliases": ["cp"],
        "subcommands": {
            "binary": {"class_name": "Echo"},
            "ascii": {"class_name": "Echo"},
        },
    },
    "copa": {"class_name": "Echo"},
    "run": {"class_name": "Run"},
    "strict": {"class_name": "Strict"},
    "missing": {"class_name": "Missing"},
    "broken": {"class_name": "Broken"},
    "where": {"class_name": "Where"},
    "ipv6": {"aliases": ["v6"], "class_name": "Echo"},
}


def with_locator(commands):
    """Point every template (recursively) at this module."""
    result = {}
    for name, template in commands.items():
        template = dict(template)
        if "subcommands" in template:
            template["subcommands"] = with_locator(template["subcommands"])
        else:
            template["locator"] = __name__
        result[name] = template
    return result


class ApplicationTestCase(TestCase):

    def setUp(self):
        calls.clear()
        self.console = Console(file=io.StringIO(), width=160, color_system=None)
        self.context = Context("tool", console=self.console, colorful=False)
        self.app = Application(self.context, commands=with_locator(COMMANDS), version="1.2.3")

    @property
    def output(self):
        return self.console.file.getvalue()


class TestDispatch(ApplicationTestCase):
    """Successful runs."""

    def testAbbreviatedCommand(self):
        self.assertEqual(self.app.dispatch(["con", "a", "b"]), ExitCode.SUCCESS)
        self.assertEqual(calls, [(("config",), ("a", "b"), ())])

    def testAliasedNestedCommandStripsCommandTokens(self):
        self.assertEqual(self.app.dispatch(["cp", "bin", "a.txt", "-x"]), ExitCode.SUCCESS)
        self.assertEqual(calls, [(("copy", "binary"), ("a.txt", "-x"), ())])

    def testTokensPastLeafReachTheCommand(self):
        self.app.dispatch(["config", "show", "all"])
        self.assertEqual(calls, [(("config",), ("show", "all"), ())])

    def testCommandOptionsAreParsed(self):
        self.assertEqual(self.app.dispatch(["b", "--output", "out.bin", "src"]), 0)
        self.assertEqual(calls, [("build", "out.bin", ("src",))])

    def testForwardableArguments(self):
        self.app.dispatch(["run", "a", "--", "-x", "b"])
        self.assertEqual(calls, [(("run",), ("a",), ("-x", "b"))])

    def testSeparatorIsDroppedForOtherCommands(self):
        self.app.dispatch(["config", "a", "--", "-x"])
        self.assertEqual(calls, [(("config",), ("a", "-x"), ())])

    def testCommonOptionsAreNotPassedToCommand(self):
        self.app.dispatch(["config", "-v", "a", "--loglevel", "warn"])
        self.assertEqual(calls, [(("config",), ("a",), ())])

    def testStartUsesGivenArgv(self):
        self.assertEqual(self.app.start(["copa"]), ExitCode.SUCCESS)
        self.assertEqual(calls, [(("copa",), (), ())])

    def testContextIsResetAfterDispatch(self):
        self.app.dispatch(["cp", "ascii", "x"])
        self.assertEqual(self.context.matched_commands, ())
        self.assertEqual(self.context.own_argv, [])
        self.assertIs(self.context.command_node, self.context.tree)

    def testPathsAreMadeAbsoluteFromFolderOption(self):
        self.app.dispatch(["where", "-C", "/base", "file.txt"])
        self.assertEqual(calls, [os.path.join("/base", "file.txt")])

    def testSingleCommandApplication(self):
        context = Context("echo", console=self.console)
        app = Application(context, command=Echo)
        self.assertEqual(app.dispatch(["a", "b"]), ExitCode.SUCCESS)
        self.assertEqual(calls, [((), ("a", "b"), ())])

    def testCommandNameWithDigits(self):
        self.assertEqual(self.app.dispatch(["ipv6", "x"]), ExitCode.SUCCESS)
        self.assertEqual(self.app.dispatch(["V6", "y"]), ExitCode.SUCCESS)
        self.assertEqual(calls, [(("ipv6",), ("x",), ()), (("ipv6",), ("y",), ())])

    def testInjectedLoader(self):
        found = []

        def loader(command):
            found.append(command)
            return Echo

        context = Context("tool", console=self.console)
        app = Application(context, commands={"list": {"locator": "anywhere"}}, loader=loader)
        app.dispatch(["l", "x"])
        self.assertEqual(found[0].locator, "anywhere")
        self.assertEqual(found[0].canonical_path, ("list",))
        self.assertEqual(calls, [(("list",), ("x",), ())])


class TestFaults(ApplicationTestCase):
    """Printed faults and exit codes."""

    def testUnknownCommand(self):
        self.assertEqual(self.app.dispatch(["xyz"]), ExitCode.SYNTAX)
        self.assertIn("Command 'xyz' is not supported.", self.output)
        self.assertIn("[ tool — 11101 | Unknown Command ]", self.output)
        self.assertEqual(calls, [])

    def testAmbiguousCommand(self):
        self.assertEqual(self.app.dispatch(["cop"]), ExitCode.SYNTAX)
        self.assertIn("Command 'cop' is not unique.", self.output)

    def testMisspelledCommand(self):
        self.assertEqual(self.app.dispatch(["copyy"]), ExitCode.SYNTAX)
        self.assertIn("Command 'copyy' not fully identified, probably misspelled.", self.output)

    def testUnknownSubcommand(self):
        self.assertEqual(self.app.dispatch(["copy", "text"]), ExitCode.SYNTAX)
        self.assertIn("Command 'copy text' is not supported.", self.output)

    def testMissingSubcommand(self):
        self.assertEqual(self.app.dispatch(["copy"]), ExitCode.SYNTAX)
        self.assertIn("Command 'copy' expects a sub-command.", self.output)
        self.assertIn("binary, ascii", self.output)

    def testMissingCommand(self):
        self.assertEqual(self.app.dispatch(["--loglevel", "info"]), ExitCode.SYNTAX)
        self.assertIn("Missing mandatory <command>.", self.output)

    def testMissingMandatoryOption(self):
        self.assertEqual(self.app.dispatch(["build", "src"]), ExitCode.SYNTAX)
        self.assertIn("Mandatory '-o|--output' not found", self.output)
        self.assertEqual(calls, [])

    def testRejectedArgumentsAreReportedTogether(self):
        self.assertEqual(self.app.dispatch(["strict", "--bogus", "file"]), ExitCode.SYNTAX)
        self.assertIn("Option '--bogus' not supported", self.output)
        self.assertIn("Argument 'file' not supported", self.output)

    def testOptionValueFaults(self):
        self.assertEqual(self.app.dispatch(["config", "--loglevel", "loud"]), ExitCode.SYNTAX)
        self.assertIn("Value 'loud' not allowed for '--loglevel'", self.output)
        self.assertEqual(self.app.dispatch(["build", "--output"]), ExitCode.SYNTAX)
        self.assertIn("'--output' expects a value", self.output)

    def testDelegatedFaultKeepsItsExitCode(self):
        self.assertEqual(self.app.dispatch(["missing", "a.txt"]), ExitCode.INPUT)
        self.assertIn("File 'a.txt' not found", self.output)
        self.assertIn("11131", self.output)

    def testUnexpectedErrorsPropagate(self):
        with self.assertRaises(RuntimeError):
            self.app.dispatch(["broken"])
        self.assertEqual(self.context.matched_commands, ())

    def testNoCommandsDefined(self):
        app = Application(Context("tool", console=self.console))
        with self.assertRaises(RuntimeError):
            app.dispatch(["x"])

    def testInvalidConstruction(self):
        with self.assertRaises(TypeError):
            Application(self.context, loader="loader")
        with self.assertRaises(TypeError):
            Application(self.context, command=object)


class TestCommonOptions(ApplicationTestCase):
    """--help, --version and log levels."""

    def testVersion(self):
        self.assertEqual(self.app.dispatch(["--version"]), ExitCode.SUCCESS)
        self.assertIn("1.2.3", self.output)
        self.assertEqual(calls, [])

    def testHelpWithoutCommandListsCommands(self):
        self.assertEqual(self.app.dispatch(["--help"]), ExitCode.SUCCESS)
        self.assertIn("Usage: tool <command>", self.output)
        self.assertIn("build, config, copy, copa", self.output)

    def testHelpForNamespaceListsSubcommands(self):
        self.assertEqual(self.app.dispatch(["copy", "--help"]), ExitCode.SUCCESS)
        self.assertIn("Usage: tool copy <command>", self.output)
        self.assertIn("Commands: binary, ascii", self.output)
        self.assertNotIn("expects a sub-command", self.output)

    def testHelpForCommandSkipsMainAndMandatoryChecks(self):
        self.assertEqual(self.app.dispatch(["build", "-h"]), ExitCode.SUCCESS)
        self.assertIn("Usage: tool build", self.output)
        self.assertNotIn("Mandatory", self.output)
        self.assertEqual(calls, [])

    def testDebugLevelShowsCommandLogs(self):
        self.app.dispatch(["build", "-o", "x.bin", "-d"])
        self.assertIn("building x.bin", self.output)
        self.assertIn("'tool build' started", self.output)

    def testLevelIsRestoredOnNextDispatch(self):
        self.app.dispatch(["build", "-o", "x.bin", "-d"])
        self.console.file.truncate(0)
        self.console.file.seek(0)

        self.app.dispatch(["build", "-o", "y.bin"])
        self.assertNotIn("building y.bin", self.output)
        self.assertEqual(calls[-1], ("build", "y.bin", ()))

    def testLastLevelOptionWins(self):
        self.assertEqual(self.app.dispatch(["build", "-o", "x.bin", "-d", "-s"]), 0)
        self.assertEqual(self.output, "")


class TestIdentifyCommands(TestCase):

    def testLeadingWordsOnly(self):
        self.assertEqual(identify_commands(["Copy", "bin", "a.txt", "more"]), ["copy", "bin"])
        self.assertEqual(identify_commands(["run-all", "-x", "y"]), ["run-all"])
        self.assertEqual(identify_commands(["-v", "copy"]), [])
        self.assertEqual(identify_commands(["ipv6", "v2", "a.txt"]), ["ipv6", "v2"])
        self.assertEqual(identify_commands([]), [])


class TestLoader(TestCase):

    def found(self, locator, class_name=None):
        return FoundCommand(locator, class_name, ("test",), ())

    def testNamedClass(self):
        self.assertIs(load_command(self.found(__name__, "Echo")), Echo)

    def testFirstCommandClassOfModule(self):
        self.assertIs(load_command(self.found(__name__)), FirstCommand)

    def testNamedObjectMustBeCommand(self):
        with self.assertRaises(CommandTypeError):
            load_command(self.found(__name__, "TestLoader"))
        with self.assertRaises(CommandTypeError):
            load_command(self.found(__name__, "Nowhere"))

    def testModuleWithoutCommands(self):
        with self.assertRaises(CommandTypeError):
            load_command(self.found("cliroute.trie"))

    def testUnimportableModule(self):
        with self.assertRaises(CommandTypeError):
            load_command(self.found("cliroute_no_such_module"))

    def testMissingLocator(self):
        with self.assertRaises(CommandTypeError):
            load_command(self.found(None))


if __name__ == "__main__":
    unittest.main()
