from __future__ import annotations

import pytest

from tsgraph.extract import extract_file
from tsgraph.models import MODULE_CALLER
from tsgraph.parser import ParseError, SourceParser


SAMPLE = """
import { Repo } from "./repo";
import * as utils from "./utils";

export interface Greeter {
  greet(name: string): string;
  prefix: string;
}

export class Service extends Base implements Greeter {
  prefix = "hi";
  private cache: Map<string, string> = new Map();

  constructor(private readonly repo: Repo) {
    super();
  }

  greet(name: string): string {
    this.repo.save(name);
    return utils.format(this.prefix, name);
  }
}

export function doWork(service: Service) {
  service.greet("x");
  helper();
}

function helper() {}

const handler = () => doWork(new Service(new Repo()));
export default handler;
"""


COMMONJS_SAMPLE = """
const { readFile } = require("fs");
const helper = require("./helper");

function Counter() {
  this.count = 0;
}
Counter.prototype.increment = function () {
  this.count++;
};

module.exports = { Counter, run: function () { helper.go(); } };
exports.extra = 1;
"""


def _extract(source: str, path: str = "/project/sample.ts", include_private: bool = True):
    parsed = SourceParser().parse_text(source, path)
    return extract_file(parsed, include_private=include_private)


def _by_qualname(analysis):
    return {symbol.qualname: symbol for symbol in analysis.symbols}


def test_extracts_declarations_with_kinds_and_owners():
    analysis = _extract(SAMPLE)
    symbols = _by_qualname(analysis)

    assert symbols["Greeter"].kind == "interface"
    assert symbols["Greeter.greet"].kind == "method"
    assert symbols["Greeter.prefix"].kind == "property"
    assert symbols["Service"].kind == "class"
    assert symbols["Service.constructor"].kind == "constructor"
    assert symbols["Service.greet"].kind == "method"
    assert symbols["Service.greet"].class_name == "Service"
    assert symbols["Service.prefix"].kind == "property"
    assert symbols["Service.cache"].visibility == "private"
    assert symbols["Service.repo"].kind == "property"
    assert symbols["Service.repo"].visibility == "private"
    assert symbols["doWork"].kind == "function"
    assert symbols["doWork"].class_name is None
    assert symbols["helper"].kind == "function"
    assert symbols["handler"].kind == "function"

    assert analysis.class_bases == {"Service": "Base"}
    assert analysis.is_typescript and not analysis.is_javascript


def test_export_flags_follow_export_statements():
    symbols = _by_qualname(_extract(SAMPLE))

    assert symbols["Service"].is_exported
    assert symbols["Greeter"].is_exported
    assert symbols["doWork"].is_exported
    assert symbols["handler"].is_exported
    assert not symbols["helper"].is_exported
    assert not symbols["Service.greet"].is_exported


def test_private_members_dropped_without_include_private():
    analysis = _extract(SAMPLE, include_private=False)
    qualnames = {symbol.qualname for symbol in analysis.symbols}

    assert "Service.cache" not in qualnames
    assert "Service.repo" not in qualnames
    assert "Service.greet" in qualnames
    # Calls inside the class are still attributed to their callers.
    assert any(call.caller_qualname == "Service.greet" for call in analysis.calls)


def test_symbol_ids_are_stable_and_unique():
    first = _extract(SAMPLE)
    second = _extract(SAMPLE)

    assert [symbol.id for symbol in first.symbols] == [symbol.id for symbol in second.symbols]
    assert [call.id for call in first.calls] == [call.id for call in second.calls]
    assert len({symbol.id for symbol in first.symbols}) == len(first.symbols)
    assert all(symbol.id.startswith("/project/sample.ts#") for symbol in first.symbols)


def test_call_types_follow_syntactic_shape():
    calls = _extract(SAMPLE).calls

    typed = [call for call in calls if call.callee_name == "greet" and call.call_type == "method"]
    assert typed and typed[0].receiver_type == "Service"
    assert typed[0].caller_name == "doWork"

    save = next(call for call in calls if call.callee_name == "save")
    assert save.call_type == "method"
    assert save.receiver_type == "Repo"
    assert save.caller_qualname == "Service.greet"
    assert save.caller_class == "Service"

    fmt = next(call for call in calls if call.callee_name == "format")
    assert fmt.call_type == "property"
    assert fmt.receiver == "utils"

    helper = next(call for call in calls if call.callee_name == "helper")
    assert helper.call_type == "function"
    assert helper.scope == ("doWork",)

    constructed = {call.receiver_type for call in calls if call.call_type == "constructor"}
    assert {"Service", "Repo", "Map", "Base"} <= constructed


def test_callee_heads_are_not_double_counted():
    calls = _extract(SAMPLE).calls

    greet_uses = [call for call in calls if call.callee_name == "greet"]
    assert len(greet_uses) == 1
    # `this.repo` is a genuine property read inside `this.repo.save(...)`.
    repo_reads = [call for call in calls if call.callee_name == "repo"]
    assert len(repo_reads) == 1
    assert repo_reads[0].call_type == "property"


def test_module_level_calls_use_module_caller():
    analysis = _extract("setup();\n", path="/project/boot.ts")

    assert len(analysis.calls) == 1
    call = analysis.calls[0]
    assert call.caller_name == MODULE_CALLER
    assert call.caller_qualname is None
    assert call.call_type == "function"


def test_untyped_receiver_calls_are_property_calls():
    analysis = _extract("function run(obj) { obj.method(); }\n", path="/project/run.js")

    call = next(call for call in analysis.calls if call.callee_name == "method")
    assert call.call_type == "property"
    assert call.receiver_type is None


def test_typed_local_variable_gives_method_call():
    source = """
class Foo { method() {} }
function run() {
  const foo = new Foo();
  foo.method();
  doWork();
}
"""
    calls = _extract(source).calls

    assert next(call for call in calls if call.callee_name == "method").call_type == "method"
    assert next(call for call in calls if call.callee_name == "doWork").call_type == "function"
    assert next(call for call in calls if call.call_type == "constructor").receiver_type == "Foo"


def test_imports_record_bindings_and_kinds():
    imports = _extract(SAMPLE).imports

    assert [item.specifier for item in imports] == ["./repo", "./utils"]
    assert imports[0].kind == "named"
    assert imports[0].imported_names == ("Repo",)
    assert imports[1].kind == "namespace"
    assert imports[1].bindings[0].local == "utils"
    assert imports[1].imported_names == ("*",)


def test_import_forms():
    source = """
import Default, { a as b } from "./mixed";
import "./side-effect";
import fs = require("fs");
async function load() { await import("./lazy"); }
"""
    imports = {item.specifier: item for item in _extract(source).imports}

    assert imports["./mixed"].kind == "mixed"
    assert {(b.local, b.imported) for b in imports["./mixed"].bindings} == {("Default", "default"), ("b", "a")}
    assert imports["./side-effect"].kind == "side-effect"
    assert imports["fs"].kind == "require"
    assert imports["./lazy"].kind == "dynamic"


def test_exports_record_named_default_and_reexports():
    source = """
const a = 1, b = 2;
export { a, b as c };
export * from "./all";
export * as ns from "./ns";
export { x as y } from "./x";
export default class {}
"""
    analysis = _extract(source)
    exports = analysis.exports

    assert exports[0].kind == "named"
    assert exports[0].exported_names == ("a", "c")
    reexports = [item for item in exports if item.kind == "reexport"]
    assert [item.specifier for item in reexports] == ["./all", "./ns", "./x"]
    assert reexports[1].exported_names == ("ns",)
    assert reexports[2].bindings[0].local == "x"
    default = exports[-1]
    assert default.kind == "default"
    assert default.bindings[0].local.startswith("default@")

    anonymous = next(symbol for symbol in analysis.symbols if symbol.kind == "class")
    assert anonymous.name.startswith("default@")
    assert anonymous.is_exported


def test_commonjs_module_exports_and_require():
    analysis = _extract(COMMONJS_SAMPLE, path="/project/counter.js")

    requires = {item.specifier: item for item in analysis.imports}
    assert requires["fs"].kind == "require"
    assert requires["fs"].bindings[0].local == "readFile"
    assert requires["./helper"].bindings[0].local == "helper"

    module_exports = analysis.exports[0]
    assert module_exports.kind == "commonjs"
    assert module_exports.exported_names == ("Counter", "run")
    assert module_exports.bindings[1].local.startswith("run@")
    assert analysis.exports[1].exported_names == ("extra",)

    symbols = _by_qualname(analysis)
    assert symbols["Counter"].is_exported
    assert "readFile" in symbols
    assert analysis.is_javascript
    assert any(symbol.name.startswith("increment@") for symbol in analysis.symbols)


def test_interfaces_only_in_typescript_files():
    source = "function f() {}\n"
    js = _extract(source, path="/project/f.js")
    assert [symbol.kind for symbol in js.symbols] == ["function"]

    ts = _extract("interface Shape { area(): number; }\n", path="/project/shape.ts")
    assert [symbol.qualname for symbol in ts.symbols] == ["Shape", "Shape.area"]


def test_anonymous_functions_get_contextual_names():
    source = """
const api = {
  fetch: function () {},
  save() {},
};
[1, 2].map(function () {});
"""
    names = {symbol.qualname for symbol in _extract(source, path="/project/api.js").symbols}

    assert "api" in names
    assert "api.save" in names
    assert any(name.startswith("api.fetch@") for name in names)
    assert any(name.startswith("anonymous@") for name in names)


def test_parse_error_reports_location():
    with pytest.raises(ParseError) as excinfo:
        SourceParser().parse_text("class {\n", "/project/bad.ts")

    assert excinfo.value.path == "/project/bad.ts"
    assert excinfo.value.line >= 1


def test_columns_count_characters_not_bytes():
    source = "const s = 'é'; foo();\nfunction été() { bar(); }\n"
    analysis = extract_file(SourceParser().parse_text(source, "/project/accents.ts"))

    calls = {call.callee_name: call.location for call in analysis.calls if call.call_type == "function"}
    assert calls["foo"].start.column == 16
    assert calls["foo"].end.column == 21
    assert calls["bar"].start.line == 2
    assert calls["bar"].start.column == 17
    accented = next(symbol for symbol in analysis.symbols if symbol.name == "été")
    assert accented.location.end.column == len("function été() { bar(); }") + 1
