"""
Options module tests: schema normalization, tokenizing, serializing and filtering.

Scope
- normalize(): string/boolean classification, aliases, defaults, reserved bucket.
- parse_args(): positionals, aliases, booleans, pass-through, defaults.
- to_argv(): equals/space forms, quoting, false handling, reserved keys.
- filter_options()/filter_by_group()/filter_by_intent(): canonicalization and predicates.
- clean_inputs(): usage projection without private or default-valued entries.
"""
import unittest
from unittest import TestCase

from argosy.metadata import Input, Metadata, Option
from argosy.options import *


SCHEMA_OPTIONS = [
    Option("foo", aliases=["f"]),
    Option("bar", default="soup"),
    Option("flag1", type=bool),
]


class NormalizeTest(TestCase):
    def testEmpty(self):
        self.assertEqual(normalize([]), ParseSchema(["_"], [], {}, {}))

    def testClassification(self):
        schema = normalize(SCHEMA_OPTIONS)
        self.assertEqual(schema.strings, ["_", "foo", "bar"])
        self.assertEqual(schema.booleans, ["flag1"])
        self.assertEqual(schema.aliases, {"foo": ["f"], "bar": [], "flag1": []})
        self.assertEqual(schema.defaults, {"foo": None, "bar": "soup", "flag1": False})

    def testDuplicateNames(self):
        with self.assertRaises(ValueError):
            normalize([Option("foo"), Option("foo", type=bool)])


class ParseArgsTest(TestCase):
    def setUp(self):
        self.schema = normalize(SCHEMA_OPTIONS)

    def testEmptyArgv(self):
        self.assertEqual(parse_args([], self.schema), {
            "_": [],
            "foo": None,
            "f": None,
            "bar": "soup",
            "flag1": False,
        })

    def testComprehensive(self):
        argv = ["cat", "--foo", "rabbit", "dog", "--bar=salad", "--unknown", "wow", "--flag1", "extra", "--and-again"]
        self.assertEqual(parse_args(argv, self.schema), {
            "_": ["cat", "dog", "extra"],
            "foo": "rabbit",
            "f": "rabbit",
            "bar": "salad",
            "flag1": True,
            "unknown": "wow",
            "and-again": True,
        })

    def testAliasSpelling(self):
        parsed = parse_args(["-f", "rabbit"], self.schema)
        self.assertEqual(parsed["foo"], "rabbit")
        self.assertEqual(parsed["f"], "rabbit")

    def testNegatedBoolean(self):
        self.assertIs(parse_args(["--no-flag1"], self.schema)["flag1"], False)
        self.assertIs(parse_args(["--flag1=false"], self.schema)["flag1"], False)

    def testBooleanDoesNotSwallowPositional(self):
        parsed = parse_args(["--flag1", "android"], self.schema)
        self.assertIs(parsed["flag1"], True)
        self.assertEqual(parsed["_"], ["android"])

    def testPassThrough(self):
        parsed = parse_args(["serve", "--", "--foo", "x", "y"], self.schema)
        self.assertEqual(parsed["_"], ["serve"])
        self.assertEqual(parsed["--"], ["--foo", "x", "y"])
        self.assertIsNone(parsed["foo"])

    def testRepeatedStringAccumulates(self):
        self.assertEqual(parse_args(["--foo=a", "--foo", "b"], self.schema)["foo"], ["a", "b"])

    def testAliasSpellingOverwrites(self):
        parsed = parse_args(["--foo=a", "-f", "b"], self.schema)
        self.assertEqual(parsed["foo"], "b")
        self.assertEqual(parsed["f"], "b")

    def testGroupedShortFlags(self):
        self.assertEqual(parse_args(["-xyz"]), {"_": [], "x": True, "y": True, "z": True})

    def testGroupedShortStringTakesRest(self):
        schema = normalize([Option("target", aliases=["t"])])
        self.assertEqual(parse_args(["-tdevice"], schema), {"_": [], "target": "device", "t": "device"})

    def testGroupedShortBooleanThenString(self):
        schema = normalize([Option("verbose", type=bool, aliases=["v"]), Option("target", aliases=["t"])])
        parsed = parse_args(["-vtdevice", "android"], schema)
        self.assertEqual(parsed, {
            "_": ["android"],
            "verbose": True,
            "v": True,
            "target": "device",
            "t": "device",
        })

    def testDashIsValue(self):
        self.assertEqual(parse_args(["--foo", "-"], self.schema)["foo"], "-")
        self.assertEqual(parse_args(["-f", "-", "cat"], self.schema)["_"], ["cat"])
        self.assertEqual(parse_args(["--input", "-"]), {"_": [], "input": "-"})

    def testDashAfterBooleanIsPositional(self):
        parsed = parse_args(["--flag1", "-"], self.schema)
        self.assertIs(parsed["flag1"], True)
        self.assertEqual(parsed["_"], ["-"])

    def testStringWithoutValue(self):
        self.assertEqual(parse_args(["--foo"], self.schema)["foo"], "")

    def testNoSchema(self):
        self.assertEqual(parse_args(["a", "--b=c", "--d"]), {"_": ["a"], "b": "c", "d": True})

    def testNegativeNumberIsPositional(self):
        self.assertEqual(parse_args(["-5"])["_"], ["-5"])


class ToArgvTest(TestCase):
    def testEmpty(self):
        self.assertEqual(to_argv({"_": []}), [])

    def testPositionalsDropped(self):
        self.assertEqual(to_argv({"_": ["foo", "bar"]}), [])

    def testBooleans(self):
        self.assertEqual(to_argv({"_": [], "wow": True}), ["--wow"])
        self.assertEqual(to_argv({"_": [], "wow": False}), [])
        self.assertEqual(to_argv({"_": [], "wow": False}, ignore_false=False), ["--no-wow"])

    def testEquals(self):
        self.assertEqual(to_argv({"_": [], "cat": "meow"}), ["--cat=meow"])

    def testWithoutEquals(self):
        self.assertEqual(
            to_argv({"_": [], "cat": "meow", "dog": "bark"}, use_equals=False),
            ["--cat", "meow", "--dog", "bark"],
        )

    def testWhitespaceUnquoted(self):
        self.assertEqual(to_argv({"_": [], "cat": "meow meow meow"}), ["--cat=meow meow meow"])

    def testWhitespaceDoubleQuoted(self):
        self.assertEqual(
            to_argv({"_": [], "cat": "meow meow meow"}, use_double_quotes=True),
            ['--cat="meow meow meow"'],
        )

    def testDoubleQuotesForceEquals(self):
        self.assertEqual(to_argv({"cat": "meow"}, use_equals=False, use_double_quotes=True), ["--cat=meow"])

    def testUnsetDropped(self):
        self.assertEqual(to_argv({"_": [], "target": None, "prod": True}), ["--prod"])

    def testListRepeatsFlag(self):
        self.assertEqual(to_argv({"plugin": ["a", "b"]}), ["--plugin=a", "--plugin=b"])

    def testPassThroughTrails(self):
        self.assertEqual(
            to_argv({"--": ["--verbose", "x"], "_": [], "prod": True}),
            ["--prod", "--", "--verbose", "x"],
        )

    def testRoundTrip(self):
        schema = normalize([Option("target"), Option("prod", type=bool), Option("open", type=bool)])
        record = {"target": "device", "prod": True, "open": False}
        parsed = parse_args(to_argv(record), schema)
        del parsed["_"]
        self.assertEqual(parsed, record)

    def testRoundTripWithAliases(self):
        schema = normalize([Option("target", aliases=["t"]), Option("prod", type=bool)])
        record = parse_args(["--target=device", "--prod"], schema)
        self.assertEqual(to_argv(record), ["--target=device", "--t=device", "--prod"])
        self.assertEqual(parse_args(to_argv(record), schema), record)

    def testRoundTripRepeated(self):
        schema = normalize([Option("plugin")])
        record = parse_args(["--plugin=a", "--plugin=b"], schema)
        self.assertEqual(parse_args(to_argv(record), schema), record)


METADATA = Metadata(
    "build",
    inputs=[Input("platform"), Input("token", private=True)],
    options=[
        Option("prod", type=bool, groups=["app-scripts"]),
        Option("target", aliases=["t"], groups=["cordova"]),
        Option("device", type=bool, groups=["cordova", "app-scripts"]),
        Option("verbose", type=bool),
        Option("secret", private=True),
    ],
)


class FilterTest(TestCase):
    def testUnknownDropped(self):
        filtered = filter_options(METADATA, {"_": ["a"], "prod": True, "nope": "x"})
        self.assertEqual(filtered, {"_": ["a"], "prod": True})

    def testAliasCanonicalized(self):
        self.assertEqual(filter_options(METADATA, {"_": [], "t": "device"}), {"_": [], "target": "device"})

    def testReservedKeysRetained(self):
        filtered = filter_options(METADATA, {"_": ["a"], "--": ["b"]}, lambda option, value: False)
        self.assertEqual(filtered, {"_": ["a"], "--": ["b"]})

    def testIncludesGroups(self):
        parsed = {"_": [], "prod": True, "target": "device", "device": True, "verbose": True, "bogus": 1}
        filtered = filter_options(METADATA, parsed, includes_groups(["app-scripts"]))
        self.assertEqual(filtered, {"_": [], "prod": True, "device": True})

    def testIncludesGroupsSingleTag(self):
        parsed = {"prod": True, "target": "device"}
        self.assertEqual(filter_by_group(METADATA, parsed, "cordova"), {"target": "device"})

    def testExcludesGroups(self):
        parsed = {"_": [], "prod": True, "target": "device", "device": True, "verbose": True}
        filtered = filter_options(METADATA, parsed, excludes_groups("app-scripts"))
        self.assertEqual(filtered, {"_": [], "target": "device", "device": True, "verbose": True})

    def testIncludedKeysAreDeclared(self):
        parsed = parse_args(["--prod", "--t=x", "--device", "--other"], normalize(METADATA.options))
        filtered = filter_options(METADATA, parsed, includes_groups(["cordova"]))
        declared = {option.name: option for option in METADATA.options}
        for key in filtered.keys() - {"_"}:
            self.assertIn(key, declared)
            self.assertIn("cordova", declared[key].groups)


class IntentTest(TestCase):
    metadata = Metadata(
        "intent",
        inputs=[Input("input1")],
        options=[
            Option("foo", intents=["foobar"]),
            Option("bar", intents=["foobar"]),
            Option("baz", intents=["not-foobar"]),
            Option("intentless"),
        ],
    )
    given = {"foo": "a", "bar": "b", "baz": "c", "intentless": "nope"}

    def testNoIntent(self):
        self.assertEqual(filter_by_intent(self.metadata, self.given), {"intentless": "nope"})

    def testMatchingIntent(self):
        self.assertEqual(filter_by_intent(self.metadata, self.given, "foobar"), {"foo": "a", "bar": "b"})

    def testBogusIntent(self):
        self.assertEqual(filter_by_intent(self.metadata, self.given, "literally bogus"), {})


class CleanInputsTest(TestCase):
    def testProjection(self):
        options = parse_args(["--prod", "-t", "my device", "--secret=x", "--unknown"], normalize(METADATA.options))
        self.assertEqual(
            clean_inputs(METADATA, ["android", "hunter2", "extra"], options),
            ["android", "--prod", '--target="my device"'],
        )

    def testNothingSupplied(self):
        options = parse_args([], normalize(METADATA.options))
        self.assertEqual(clean_inputs(METADATA, [], options), [])

    def testUndeclaredInputsKept(self):
        self.assertEqual(clean_inputs(Metadata("run"), ["a", "b"], {"_": ["a", "b"]}), ["a", "b"])


if __name__ == "__main__":
    unittest.main()
