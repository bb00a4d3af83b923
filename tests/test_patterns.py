from __future__ import annotations

from tsgraph.parser import SourceParser
from tsgraph.patterns import detect_patterns


IIFE_SAMPLE = "(function(){ var x = 1; function inner(){ return x; } })();\n"

UMD_SAMPLE = """
(function (root, factory) {
  if (typeof define === "function" && define.amd) {
    define([], factory);
  } else if (typeof module === "object" && module.exports) {
    module.exports = factory();
  }
})(this, function () {
  return {};
});
"""


def _detect(source: str, path: str = "/project/sample.js"):
    return detect_patterns(SourceParser().parse_text(source, path))


def test_iife_is_both_closure_and_module_pattern():
    catalog = _detect(IIFE_SAMPLE)

    assert len(catalog.module_patterns) == 1
    assert len(catalog.closures) == 1
    module = catalog.module_patterns[0]
    closure = catalog.closures[0]
    assert module.pattern_type == "IIFE"
    assert module.location == closure.location
    assert closure.inner_functions == ("inner",)
    assert closure.outer_variables == ("x",)


def test_iife_function_expression_is_flagged():
    catalog = _detect(IIFE_SAMPLE)

    assert len(catalog.function_expressions) == 1
    expression = catalog.function_expressions[0]
    assert expression.is_iife
    assert not expression.is_arrow


def test_dynamic_property_access_types():
    source = """
obj[key] = 1;
obj[key]();
const value = obj[key];
"""
    catalog = _detect(source)

    assert [item.access_type for item in catalog.dynamic_properties] == ["write", "call", "read"]
    assert all(item.object == "obj" and item.property == "key" for item in catalog.dynamic_properties)
    assert all(item.is_computed for item in catalog.dynamic_properties)


def test_prototype_method_assignment():
    source = """
function Counter() {}
Counter.prototype.increment = function () { return 1; };
Counter.prototype = {};
"""
    catalog = _detect(source)

    assert len(catalog.prototype_methods) == 1
    method = catalog.prototype_methods[0]
    assert method.constructor == "Counter"
    assert method.method_name == "increment"
    assert method.implementation.startswith("function")


def test_commonjs_and_amd_module_patterns():
    source = """
define(["jquery", "lodash"], function ($, _) {});
module.exports = { start, stop: 1 };
exports.extra = 2;
"""
    patterns = _detect(source).module_patterns

    assert [item.pattern_type for item in patterns] == ["AMD", "CommonJS", "CommonJS"]
    assert patterns[0].dependencies == ("jquery", "lodash")
    assert patterns[1].exports == ("start", "stop")
    assert patterns[2].exports == ("extra",)


def test_require_calls_are_amd_module_patterns():
    patterns = _detect('const fs = require("fs");\n').module_patterns

    assert len(patterns) == 1
    assert patterns[0].pattern_type == "AMD"
    assert patterns[0].dependencies == ("fs",)


def test_umd_wrapper_is_recognised():
    patterns = _detect(UMD_SAMPLE).module_patterns

    assert patterns[0].pattern_type == "UMD"
    assert {item.pattern_type for item in patterns} == {"UMD", "AMD", "CommonJS"}


def test_closure_from_function_declaration():
    source = """
function makeCounter() {
  let count = 0;
  const unused = 1;
  return function () {
    count += 1;
    return count;
  };
}
function plain() { return 1; }
"""
    closures = _detect(source).closures

    assert len(closures) == 1
    assert closures[0].outer_variables == ("count",)
    assert closures[0].inner_functions == ()


def test_callbacks_and_async_heuristic():
    source = """
promise.then(() => 1);
setTimeout(function () {}, 10);
items.map((item) => item, function () {});
items.forEach(handler);
"""
    callbacks = _detect(source).callbacks

    assert [item.caller_function for item in callbacks] == ["promise.then", "setTimeout", "items.map"]
    assert [item.is_async for item in callbacks] == [True, True, False]
    assert callbacks[2].callback_arguments == ("callback_0", "callback_1")


def test_object_literal_members():
    source = """
const config = {
  name: "x",
  run() {},
  get size() { return 1; },
  set size(value) {},
  [key]: 2,
  handler: () => {},
  shorthand,
  ...rest,
};
"""
    literals = _detect(source).object_literals

    assert len(literals) == 1
    literal = literals[0]
    kinds = [(item.name, item.kind) for item in literal.properties]
    assert ("name", "pair") in kinds
    assert ("run", "method") in kinds
    assert ("shorthand", "shorthand") in kinds
    assert ("...rest", "spread") in kinds
    assert literal.methods == ("run", "handler")
    assert literal.computed_properties == ("[key]",)
    getters = [item for item in literal.properties if item.is_getter]
    setters = [item for item in literal.properties if item.is_setter]
    assert [item.name for item in getters] == ["size"]
    assert [item.name for item in setters] == ["size"]


def test_function_expression_captures_this():
    source = """
const arrow = () => this.x;
const regular = function (a, b) { return () => this; };
const shielded = function () { function inner() { return this; } };
"""
    expressions = _detect(source).function_expressions

    arrow, regular, nested_arrow, shielded = expressions
    assert arrow.is_arrow and arrow.captures_this
    assert regular.captures_this
    assert regular.parameters == ("a", "b")
    assert nested_arrow.is_arrow
    assert not shielded.captures_this


def test_typescript_files_are_scanned_too():
    catalog = _detect("const lookup: Record<string, number> = {};\nlookup[name] = 1;\n", "/project/a.ts")

    assert len(catalog.dynamic_properties) == 1
    assert len(catalog.object_literals) == 1


def test_pattern_counts_by_kind():
    counts = _detect(IIFE_SAMPLE).counts()

    assert counts["closure"] == 1
    assert counts["module-pattern"] == 1
    assert counts["function-expression"] == 1
    assert counts["dynamic-property"] == 0
