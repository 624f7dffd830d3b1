import pytest

from consolex.engine.matcher import CallSiteMatcher, NO_MATCH, match_call
from tests.infrastructure.engine_utils import calls_in, parse_doc


def _first_call(src: str, ext: str = ".js"):
    doc = parse_doc(src, ext=ext)
    return doc, calls_in(doc)[0]


@pytest.mark.parametrize("src, member", [
    ("console.log(1)", "log"),
    ("console.warn()", "warn"),
    ("console['error']('x')", "error"),
    ("console[\"info\"]()", "info"),
    ("console?.debug(1)", "debug"),
    ("console.table?.(rows)", "table"),
    ("(console.trace)()", "trace"),
    ("console[('count')]()", "count"),
])
def test_matches_receiver_member_calls(src, member):
    doc, call = _first_call(src)
    result = CallSiteMatcher({"log", "warn", "error", "info", "debug", "table", "trace", "count"}).match(doc, call)
    assert result.hit
    assert result.member == member


@pytest.mark.parametrize("src", [
    "console.group(1)",
    "console[key](1)",
    "console['l\\x6fg'](1)",
    "console[`log`](1)",
    "console.log`x`",
    "self.console.log(1)",
    "log(1)",
    "Console.log(1)",
])
def test_rejects_non_matching_calls(src):
    doc, call = _first_call(src)
    assert CallSiteMatcher({"log"}).match(doc, call) == NO_MATCH


def test_non_call_nodes_never_match():
    doc = parse_doc("console.log;\n")
    matcher = CallSiteMatcher({"log"})
    assert not any(matcher.match(doc, n).hit for n in doc.walk_tree())


def test_empty_target_set_never_matches():
    doc, call = _first_call("console.log(1)")
    assert CallSiteMatcher(()).match(doc, call) == NO_MATCH


def test_custom_receiver():
    doc, call = _first_call("logger.warn(1)")
    assert CallSiteMatcher({"warn"}, receiver="logger").match(doc, call).member == "warn"
    assert not CallSiteMatcher({"warn"}).match(doc, call).hit


def test_typescript_generic_call():
    doc, call = _first_call("console.log<string>('a')", ext=".ts")
    assert CallSiteMatcher({"log"}).match(doc, call).hit


def test_match_call_shortcut():
    doc, call = _first_call("console.warn(1)")
    assert match_call(doc, call, ["warn"]).member == "warn"
    assert match_call(doc, call, ["log"]) == NO_MATCH
