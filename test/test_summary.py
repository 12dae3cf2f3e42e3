"""
Summary rendering tests (usage, listings, defaults, wrapping, colors).

Scope
- Validate the exact plain-text layout of base and sub-command views.
- Validate synthesized default options and their per-name shadowing.
- Validate automatic help/version handling during parse().
- Validate help wrapping and ANSI styling with resets.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through io.StringIO sinks.
"""
import io
import sys
import unittest
from unittest import TestCase, mock

from clasp import Outcome, Parser, SubCommand, catchall, switch, value
from clasp.summary import WRAP_WIDTH, defaults


class TestSummaryLayout(TestCase):
    """Plain-text layout of the usage summary."""

    def setUp(self):
        self.output = io.StringIO()
        self.base = SubCommand(options=(
            switch("v", "verbose", help="Verbose output."),
            value("f", "file", "PATH", help="Input file."),
            switch("s", "secret"),
            value(long="log", tag="LOG", help="Log file."),
            switch("q", help="Quiet."),
        ))
        self.install = SubCommand("install", (
            switch("U", "upgrade", help="Upgrade packages."),
            catchall("PACKAGE", help="Packages to install."),
        ))

    def testBaseViewWithoutSubcommands(self):
        parser = Parser(
            "prog",
            header="A test program.",
            footer="Bye.",
            base=self.base,
            output=self.output,
            autohelp=True,
        )
        parser.summary()
        self.assertEqual(self.output.getvalue(), (
            "Usage: prog\n"
            "A test program.\n"
            "\n"
            "Default Options:\n"
            "-h, --help\n"
            "  Show help message.\n"
            "\n"
            "Common options:\n"
            "-v, --verbose\n"
            "  Verbose output.\n"
            "-f PATH, --file=PATH\n"
            "  Input file.\n"
            "--log=LOG\n"
            "  Log file.\n"
            "-q\n"
            "  Quiet.\n"
            "\n"
            "Bye.\n"
        ))

    def testBaseViewWithSubcommands(self):
        parser = Parser("pip", base=self.base, subcommands=(self.install,), output=self.output)
        parser.summary()
        rendered = self.output.getvalue()
        self.assertTrue(rendered.startswith("Usage: pip [COMMAND]\n\nSub-commands:\n  install\n\nCommon options:\n"))
        self.assertNotIn("Default Options:", rendered)
        self.assertNotIn("secret", rendered)

    def testNamedView(self):
        parser = Parser("pip", base=self.base, subcommands=(self.install,), output=self.output)
        parser.summary(self.install)
        self.assertEqual(self.output.getvalue(), (
            "Usage: pip install [OPTIONS] PACKAGE...\n"
            "\n"
            "Options:\n"
            "-U, --upgrade\n"
            "  Upgrade packages.\n"
            "PACKAGE...\n"
            "  Packages to install.\n"
        ))

    def testBaseCatchAllInUsage(self):
        base = SubCommand(options=(catchall("FILE", help="Files."),))
        Parser("cat", base=base, output=self.output).summary()
        self.assertTrue(self.output.getvalue().startswith("Usage: cat FILE...\n"))

    def testSummaryRejectsNonSubcommand(self):
        parser = Parser("prog", base=self.base, output=self.output)
        with self.assertRaises(TypeError):
            parser.summary("install")


class TestSummaryDefaults(TestCase):
    """Synthesized default options."""

    def testHelpWordingWithSubcommands(self):
        parser = Parser("pip", subcommands=(SubCommand("install"),), autohelp=True)
        entry, = defaults(parser)
        self.assertIn("sub-command", entry.help)
        self.assertEqual((entry.short, entry.long), ("h", "help"))

    def testVersionNeedsVersionString(self):
        self.assertEqual(defaults(Parser("prog", autoversion=True)), [])
        entry, = defaults(Parser("prog", version="1.0", autoversion=True))
        self.assertEqual((entry.short, entry.long), ("v", "version"))

    def testShadowedNamesAreDropped(self):
        base = SubCommand(options=(switch("v", "verbose", help="Verbose."), switch(long="help", help="Mine.")))
        parser = Parser("prog", version="1.0", base=base, autohelp=True, autoversion=True)
        help, version = defaults(parser)
        self.assertEqual((help.short, help.long), ("h", None))
        self.assertEqual((version.short, version.long), (None, "version"))

    def testFullyShadowedEntryIsOmitted(self):
        base = SubCommand(options=(switch("h", "help", help="Mine."),))
        self.assertEqual(defaults(Parser("prog", base=base, autohelp=True)), [])

    def testDefaultsAreFreshPerCall(self):
        parser = Parser("prog", autohelp=True)
        self.assertIsNot(defaults(parser)[0], defaults(parser)[0])

    def testShadowingIsPerParser(self):
        shadowed = Parser("a", version="1", base=SubCommand(options=(switch("v", help="V."),)), autoversion=True)
        plain = Parser("b", version="1", autoversion=True)
        self.assertIsNone(defaults(shadowed)[0].short)
        self.assertEqual(defaults(plain)[0].short, "v")


class TestAutomaticHelpVersion(TestCase):
    """Help and version requests during parse()."""

    def setUp(self):
        self.output = io.StringIO()
        self.calls = []
        self.verbose = switch("v", "verbose", help="Verbose output.")
        self.install = SubCommand("install", (catchall("PACKAGE", help="Packages."),))

    def callback(self, parser, subcommand, option, value):
        self.calls.append(option)

    def parser(self, **options):
        return Parser(
            "pip",
            version="2.0",
            base=SubCommand(options=(value("f", "file", "PATH", help="Input file."),)),
            subcommands=(self.install,),
            callback=self.callback,
            output=self.output,
            **options,
        )

    def testHelpAnywhereWins(self):
        parser = self.parser(autohelp=True)
        self.assertEqual(parser.parse(["pip", "-f", "x", "stray", "--help"]), Outcome.HELP_EXIT)
        self.assertEqual(self.calls, [])
        self.assertTrue(self.output.getvalue().startswith("Usage: pip [COMMAND]\n"))

    def testHelpUsesActiveSubcommand(self):
        parser = self.parser(autohelp=True)
        self.assertEqual(parser.parse(["pip", "install", "-h"]), Outcome.HELP_EXIT)
        self.assertEqual(self.calls, [None])
        self.assertTrue(self.output.getvalue().startswith("Usage: pip install [OPTIONS] PACKAGE...\n"))

    def testHelpWithoutAutohelpIsAnOption(self):
        parser = self.parser()
        self.assertEqual(parser.parse(["pip", "-h"]), Outcome.INVALID)
        self.assertEqual(self.output.getvalue(), "Invalid option: -h\n")

    def testVersion(self):
        parser = self.parser(autoversion=True)
        self.assertEqual(parser.parse(["pip", "--version"]), Outcome.HELP_EXIT)
        self.assertEqual(self.output.getvalue(), "pip 2.0\n")

    def testVersionNeedsVersionString(self):
        parser = Parser("pip", base=SubCommand(options=(self.verbose,)), output=self.output, autoversion=True)
        self.assertEqual(parser.parse(["pip", "--version"]), Outcome.INVALID)

    def testExplicitShortShadowsOnlyThatName(self):
        parser = Parser(
            "prog",
            version="1.0",
            base=SubCommand(options=(self.verbose,)),
            callback=self.callback,
            output=self.output,
            autoversion=True,
        )
        self.assertEqual(parser.parse(["prog", "-v"]), Outcome.OK)
        self.assertEqual(self.calls, [self.verbose])
        parser.reset()
        self.assertEqual(parser.parse(["prog", "--version"]), Outcome.HELP_EXIT)
        self.assertEqual(self.output.getvalue(), "prog 1.0\n")

    def testSubcommandDoesNotShadow(self):
        mine = switch("h", "help", help="Sub-command help.")
        install = SubCommand("install", (mine,))
        parser = Parser("pip", subcommands=(install,), callback=self.callback, output=self.output, autohelp=True)
        self.assertEqual(parser.parse(["pip", "install", "-h"]), Outcome.HELP_EXIT)
        self.assertEqual(self.calls, [None])


class TestSummaryWrapping(TestCase):
    """Help text wrapping."""

    def render(self, help):
        output = io.StringIO()
        Parser("prog", base=SubCommand(options=(switch("x", help=help),)), output=output).summary()
        lines = output.getvalue().splitlines()
        return lines[lines.index("-x") + 1:]

    def testLongHelpWrapsAtWhitespace(self):
        help = " ".join(f"word{index}" for index in range(60))
        lines = self.render(help)
        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertTrue(line.startswith("  "))
            self.assertLessEqual(len(line), WRAP_WIDTH)
        self.assertEqual(" ".join(line.strip() for line in lines), help)

    def testLongWordIsKeptWhole(self):
        word = "x" * 120
        lines = self.render(f"short {word} tail")
        self.assertIn("  " + word, lines)

    def testAuthoredLineBreaksAreKept(self):
        self.assertEqual(self.render("first line\nsecond line"), ["  first line", "  second line"])


class TestSummaryColors(TestCase):
    """ANSI styling when colorful is set."""

    def setUp(self):
        self.output = io.StringIO()
        self.parser = Parser(
            "pip",
            base=SubCommand(options=(value("f", "file", "PATH", help="Input file."),)),
            subcommands=(SubCommand("install", (catchall("PACKAGE", help="Packages."),)),),
            output=self.output,
            colorful=True,
        )

    def testStyledSpansAreReset(self):
        self.parser.summary()
        rendered = self.output.getvalue()
        self.assertIn("\x1b[1;37mpip\x1b[0m", rendered)
        self.assertIn("\x1b[1;32minstall\x1b[0m", rendered)
        self.assertIn("\x1b[1;34m-f PATH, --file=PATH\x1b[0m", rendered)
        self.assertIn("\x1b[0m\n  Input file.\n", rendered)

    def testCatchAllTag(self):
        self.parser.summary(self.parser.subcommands[0])
        self.assertIn("\x1b[1;33mPACKAGE...\x1b[0m", self.output.getvalue())

    def testDiagnosticIsColored(self):
        self.assertEqual(self.parser.parse(["pip", "--nope"]), Outcome.INVALID)
        self.assertEqual(self.output.getvalue(), "Invalid option: \x1b[31m--nope\x1b[0m\n")

    def testPaletteOverride(self):
        with mock.patch.object(sys.modules["__main__"], "__styles__", {"program-name": "bold red"}, create=True):
            self.parser.summary()
        self.assertIn("\x1b[1;31mpip\x1b[0m", self.output.getvalue())

    def testPlainOutputHasNoEscapes(self):
        Parser("pip", base=self.parser.base, output=self.output).summary()
        self.assertNotIn("\x1b[", self.output.getvalue())


if __name__ == "__main__":
    unittest.main()
