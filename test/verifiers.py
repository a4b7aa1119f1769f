"""
Verifier behavioral tests (token -> typed value conversion).

Scope
- Validate every value type of the closed ValueType enumeration through verify().
- Validate bounds of the integer types, overflow/underflow of doubles, unit handling
  of sizes and durations, filesystem probing and payload-driven types.
- Validate the InvalidValueError messages users get to see.

Conventions
- Test method names follow CamelCase per project convention.
- Filesystem checks run inside temporary directories only.
"""
import math
import os
import tempfile
import unittest
from unittest import TestCase

from clasp import Choices, InvalidValueError, Schema, Subcommands, ValueType, index_of, verify


class TestScalarVerifiers(TestCase):
    """Strings, booleans, integers and doubles."""

    def setUp(self):
        self.schema = Schema()

    def check(self, type, token, payload=None):
        return verify(type, self.schema, "arg", token, payload)

    def fails(self, type, token, payload=None):
        with self.assertRaises(InvalidValueError) as context:
            self.check(type, token, payload)
        return str(context.exception)

    def testStringIsBoundAsIs(self):
        self.assertEqual(self.check(ValueType.STRING, "hello world"), "hello world")
        self.assertEqual(self.check(ValueType.STRING, ""), "")

    def testBoolAcceptsFixedWordsCaseInsensitive(self):
        for token in ("true", "YES", "y", "True"):
            self.assertIs(self.check(ValueType.BOOL, token), True)
        for token in ("false", "No", "N"):
            self.assertIs(self.check(ValueType.BOOL, token), False)

    def testBoolRejectsOtherWords(self):
        message = self.fails(ValueType.BOOL, "maybe")
        self.assertEqual(message, "Invalid boolean value for argument 'arg': 'maybe'!")
        self.fails(ValueType.BOOL, "1")

    def testIntegerBaseDetection(self):
        self.assertEqual(self.check(ValueType.INT32, "42"), 42)
        self.assertEqual(self.check(ValueType.INT32, "0x2A"), 42)
        self.assertEqual(self.check(ValueType.INT32, "0b101010"), 42)
        self.assertEqual(self.check(ValueType.INT32, "052"), 42)
        self.assertEqual(self.check(ValueType.INT32, "0"), 0)
        self.assertEqual(self.check(ValueType.INT32, "+7"), 7)
        self.assertEqual(self.check(ValueType.INT32, "-0x10"), -16)

    def testIntegerRejectsMalformedTokens(self):
        for token in ("", "12abc", "08", "0x", "1.5", " 1", "abc"):
            with self.subTest(token=token):
                self.fails(ValueType.INT64, token)
        self.assertEqual(self.fails(ValueType.INT8, "x1"), "Invalid int8 value for argument 'arg': 'x1'!")

    def testIntegerBoundsAreInclusive(self):
        bounds = {
            ValueType.INT8: (-128, 127),
            ValueType.UINT8: (0, 255),
            ValueType.INT32: (-2 ** 31, 2 ** 31 - 1),
            ValueType.UINT32: (0, 2 ** 32 - 1),
            ValueType.INT64: (-2 ** 63, 2 ** 63 - 1),
            ValueType.UINT64: (0, 2 ** 64 - 1),
        }
        for type, (minimum, maximum) in bounds.items():
            with self.subTest(type=type):
                self.assertEqual(self.check(type, str(minimum)), minimum)
                self.assertEqual(self.check(type, str(maximum)), maximum)
                self.fails(type, str(minimum - 1))
                self.fails(type, str(maximum + 1))

    def testIntegerOutOfRangeMessage(self):
        self.assertEqual(
            self.fails(ValueType.INT8, "300"),
            "int8 value out of range (-128 to 127) for argument 'arg': '300'!",
        )
        self.assertIn("out of range", self.fails(ValueType.UINT8, "-1"))
        self.assertIn("out of range", self.fails(ValueType.UINT64, "-0"))

    def testDoubleLiterals(self):
        self.assertEqual(self.check(ValueType.DOUBLE, "3.25"), 3.25)
        self.assertEqual(self.check(ValueType.DOUBLE, "1e3"), 1000.0)
        self.assertEqual(self.check(ValueType.DOUBLE, ".5"), 0.5)
        self.assertEqual(self.check(ValueType.DOUBLE, "-2."), -2.0)
        self.assertEqual(self.check(ValueType.DOUBLE, "0.0"), 0.0)
        self.assertTrue(math.isnan(self.check(ValueType.DOUBLE, "nan")))

    def testDoubleRejectsTrailingCharacters(self):
        self.assertEqual(self.fails(ValueType.DOUBLE, "1.5x"), "Invalid double value for argument 'arg': '1.5x'!")
        self.fails(ValueType.DOUBLE, "")
        self.fails(ValueType.DOUBLE, "1_000")
        self.fails(ValueType.DOUBLE, "\u0663.5")
        self.fails(ValueType.DOUBLE, "\uff13e2")

    def testDoubleRejectsOverflowAndUnderflow(self):
        self.assertIn("out of range", self.fails(ValueType.DOUBLE, "1e400"))
        self.assertIn("out of range", self.fails(ValueType.DOUBLE, "-1e400"))
        self.assertIn("out of range", self.fails(ValueType.DOUBLE, "1e-400"))
        self.assertIn("out of range", self.fails(ValueType.DOUBLE, "inf"))


class TestUnitVerifiers(TestCase):
    """Sizes and durations."""

    def setUp(self):
        self.schema = Schema()

    def check(self, type, token):
        return verify(type, self.schema, "arg", token)

    def fails(self, type, token):
        with self.assertRaises(InvalidValueError) as context:
            self.check(type, token)
        return str(context.exception)

    def testSizeUnits(self):
        self.assertEqual(self.check(ValueType.SIZE, "10KiB"), 10 * 1024)
        self.assertEqual(self.check(ValueType.SIZE, "2MB"), 2 * 1000 * 1000)
        self.assertEqual(self.check(ValueType.SIZE, "1024"), 1024)
        self.assertEqual(self.check(ValueType.SIZE, "7B"), 7)
        self.assertEqual(self.check(ValueType.SIZE, "3kib"), 3 * 1024)
        self.assertEqual(self.check(ValueType.SIZE, "1GiB"), 1 << 30)
        self.assertEqual(self.check(ValueType.SIZE, "1tb"), 10 ** 12)

    def testSizeBareByteUnitIsCaseSensitive(self):
        self.assertEqual(self.fails(ValueType.SIZE, "5b"), "Invalid size unit for argument 'arg': 'b'!")

    def testSizeRequiresLeadingNumber(self):
        self.assertEqual(self.fails(ValueType.SIZE, "KiB"), "No leading number in size argument 'arg': 'KiB'!")
        self.assertEqual(
            self.fails(ValueType.SIZE, "\u0663KB"),
            "No leading number in size argument 'arg': '\u0663KB'!",
        )

    def testSizeRejectsNegativeAndOverflow(self):
        self.assertIn("out of range", self.fails(ValueType.SIZE, "-1KiB"))
        self.assertIn("out of range", self.fails(ValueType.SIZE, "18446744073709551616"))
        self.assertIn("out of range", self.fails(ValueType.SIZE, "17179869184GiB"))
        self.assertEqual(self.check(ValueType.SIZE, "18446744073709551615"), 2 ** 64 - 1)

    def testSecondsAreTruncated(self):
        self.assertEqual(self.check(ValueType.TIME_S, "90"), 90)
        self.assertEqual(self.check(ValueType.TIME_S, "1.5m"), 90)
        self.assertEqual(self.check(ValueType.TIME_S, "2H"), 7200)
        self.assertEqual(self.check(ValueType.TIME_S, "1d"), 86400)
        self.assertEqual(self.check(ValueType.TIME_S, "1.9"), 1)
        self.assertEqual(self.check(ValueType.TIME_S, "3s"), 3)

    def testNanosecondsAreRounded(self):
        self.assertEqual(self.check(ValueType.TIME_NS, "1.5us"), 1500)
        self.assertEqual(self.check(ValueType.TIME_NS, "1ms"), 1000000)
        self.assertEqual(self.check(ValueType.TIME_NS, "2s"), 2000000000)
        self.assertEqual(self.check(ValueType.TIME_NS, "1m"), 60 * 10 ** 9)
        self.assertEqual(self.check(ValueType.TIME_NS, "0.4"), 0)
        self.assertEqual(self.check(ValueType.TIME_NS, "0.6"), 1)

    def testTimeRejectsBadInput(self):
        self.assertEqual(self.fails(ValueType.TIME_S, "5x"), "Invalid time unit for argument 'arg': 'x'!")
        self.assertEqual(self.fails(ValueType.TIME_NS, "ms"), "No leading number in time argument 'arg': 'ms'!")
        self.assertIn("out of range", self.fails(ValueType.TIME_S, "-1s"))
        self.assertIn("out of range", self.fails(ValueType.TIME_NS, "1e300d"))
        self.assertIn("No leading number", self.fails(ValueType.TIME_S, "\uff13s"))

    def testTimeRejectsValuesAboveUnsigned64(self):
        for type in (ValueType.TIME_S, ValueType.TIME_NS):
            with self.subTest(type=type):
                self.assertIn("out of range", self.fails(type, "18446744073709551615"))
                self.assertIn("out of range", self.fails(type, "18446744073709551616"))
        self.assertIn("out of range", self.fails(ValueType.TIME_NS, "18446744073709551615ns"))
        self.assertEqual(self.check(ValueType.TIME_S, "9007199254740992"), 2 ** 53)


class TestPayloadVerifiers(TestCase):
    """Choices, custom verifiers, subcommands and filesystem paths."""

    def setUp(self):
        self.schema = Schema()

    def testChoiceBindsTheEntryItself(self):
        choices = Choices(("fast", "quick build"), ("slow", "careful build"))
        choice = verify(ValueType.CHOICE, self.schema, "mode", "slow", choices)
        self.assertIs(choice, choices[1])
        self.assertEqual(index_of(choices, choice), 1)

    def testChoiceMatchingHonorsCase(self):
        strict = Choices("Fast")
        with self.assertRaises(InvalidValueError) as context:
            verify(ValueType.CHOICE, self.schema, "mode", "fast", strict)
        self.assertEqual(str(context.exception), "Invalid choice for argument 'mode': 'fast'!")

        relaxed = Choices("Fast", case_insensitive=True)
        self.assertIs(verify(ValueType.CHOICE, self.schema, "mode", "FAST", relaxed), relaxed[0])

    def testCustomVerifierReturnsItsValue(self):
        def port(schema, name, token):
            value = int(token)
            if not 0 < value < 65536:
                raise ValueError(token)
            return value

        self.assertEqual(verify(ValueType.CUSTOM, self.schema, "port", "8080", port), 8080)
        with self.assertRaises(InvalidValueError) as context:
            verify(ValueType.CUSTOM, self.schema, "port", "99999", port)
        self.assertEqual(str(context.exception), "Value for argument 'port' does not match custom criteria: '99999'!")
        self.assertIsInstance(context.exception.options["exception"], ValueError)

    def testCustomPredicateRejectsOnFalse(self):
        def digits(schema, name, token):
            return token.isdigit()

        self.assertIs(verify(ValueType.CUSTOM, self.schema, "code", "123", digits), True)
        with self.assertRaises(InvalidValueError) as context:
            verify(ValueType.CUSTOM, self.schema, "code", "12a", digits)
        self.assertEqual(str(context.exception), "Value for argument 'code' does not match custom criteria: '12a'!")

        zero = verify(ValueType.CUSTOM, self.schema, "code", "0", lambda schema, name, token: int(token))
        self.assertEqual(zero, 0)

    def testSubcommandLinksTheChildSchema(self):
        child = Schema()
        subcommands = Subcommands(("build", "compile", child), ("test", "run tests"))
        subcommand = verify(ValueType.SUBCOMMAND, self.schema, "command", "build", subcommands)
        self.assertIs(subcommand, subcommands[0])
        self.assertIs(child.parent, self.schema)

    def testSubcommandRequiresExactName(self):
        subcommands = Subcommands(("build", "compile"))
        with self.assertRaises(InvalidValueError) as context:
            verify(ValueType.SUBCOMMAND, self.schema, "command", "Build", subcommands)
        self.assertEqual(str(context.exception), "Unknown subcommand 'Build' for argument 'command'!")

    def testPathKinds(self):
        with tempfile.TemporaryDirectory() as directory:
            file = os.path.join(directory, "data.txt")
            with open(file, "w") as stream:
                stream.write("payload")

            self.assertEqual(verify(ValueType.PATH, self.schema, "p", directory), directory)
            self.assertEqual(verify(ValueType.PATH, self.schema, "p", file), file)
            self.assertEqual(verify(ValueType.FILE, self.schema, "p", file), file)
            self.assertEqual(verify(ValueType.DIR, self.schema, "p", directory), directory)

            with self.assertRaises(InvalidValueError) as context:
                verify(ValueType.FILE, self.schema, "p", directory)
            self.assertEqual(str(context.exception), "Path for argument 'p' is not a file: '%s'!" % directory)

            with self.assertRaises(InvalidValueError) as context:
                verify(ValueType.DIR, self.schema, "p", file)
            self.assertEqual(str(context.exception), "Path for argument 'p' is not a dir: '%s'!" % file)

            missing = os.path.join(directory, "missing")
            with self.assertRaises(InvalidValueError) as context:
                verify(ValueType.PATH, self.schema, "p", missing)
            self.assertTrue(str(context.exception).startswith("Invalid path for argument 'p': '%s' : " % missing))

    def testStringDuplicationIsTracked(self):
        schema = Schema(duplicate_strings=True)
        value = verify(ValueType.STRING, schema, "s", "copied")
        self.assertEqual(value, "copied")
        self.assertEqual(schema.allocations, ("copied",))

    def testNonValueTypeIsRejected(self):
        with self.assertRaises(TypeError):
            verify("string", self.schema, "s", "x")


if __name__ == "__main__":
    unittest.main()
