"""NetworkX graph construction from an analysis result."""

from __future__ import annotations

import networkx as nx

from .models import MODULE_CALLER, CallRelation, ExportRelation, ImportRelation, Participant


NODE_FILE = "File"
NODE_MODULE = "Module"
NODE_EXTERNAL = "External"
NODE_MODULE_SCOPE = "ModuleScope"
NODE_TYPES = {
    "class": "Class",
    "interface": "Interface",
    "function": "Function",
    "method": "Method",
    "constructor": "Constructor",
    "property": "Property",
    "variable": "Variable",
}

EDGE_CONTAINS = "CONTAINS"
EDGE_CALLS = "CALLS"
EDGE_IMPORTS = "IMPORTS"
EDGE_EXPORTS = "EXPORTS"


def file_node_id(path: str) -> str:
    return f"file:{path}"


def module_node_id(specifier: str) -> str:
    return f"module:{specifier}"


def module_scope_node_id(path: str) -> str:
    return f"module-scope:{path}"


def external_node_id(participant: Participant) -> str:
    if participant.class_name:
        return f"external:{participant.class_name}.{participant.name}"
    return f"external:{participant.name}"


def build_graph(result) -> nx.DiGraph:
    graph = nx.DiGraph()

    for path in result.files:
        _ensure_node(graph, file_node_id(path), type=NODE_FILE, name=path, path=path)

    for symbol in result.symbols:
        _ensure_node(
            graph,
            file_node_id(symbol.file_path),
            type=NODE_FILE,
            name=symbol.file_path,
            path=symbol.file_path,
        )
        _ensure_node(
            graph,
            symbol.id,
            type=NODE_TYPES.get(symbol.kind, symbol.kind),
            name=symbol.name,
            qualname=symbol.qualname,
            path=symbol.file_path,
            line=symbol.location.start.line,
            class_name=symbol.class_name or "",
            exported=symbol.is_exported,
            visibility=symbol.visibility,
        )
        graph.add_edge(file_node_id(symbol.file_path), symbol.id, type=EDGE_CONTAINS)

    for relation in result.import_relations:
        _add_import_edge(graph, relation)

    top_level = {
        (symbol.file_path, symbol.name): symbol.id
        for symbol in result.symbols
        if symbol.class_name is None
    }
    for relation in result.export_relations:
        _add_export_edges(graph, relation, top_level)

    for relation in result.call_relations:
        _add_call_edge(graph, relation)

    return graph


def _add_import_edge(graph: nx.DiGraph, relation: ImportRelation) -> None:
    source_id = file_node_id(relation.file_path)
    if relation.resolved_file_path:
        target_id = file_node_id(relation.resolved_file_path)
        _ensure_node(
            graph,
            target_id,
            type=NODE_FILE,
            name=relation.resolved_file_path,
            path=relation.resolved_file_path,
        )
    else:
        target_id = module_node_id(relation.specifier)
        _ensure_node(graph, target_id, type=NODE_MODULE, name=relation.specifier, external=True)
    if graph.has_edge(source_id, target_id):
        names = graph.edges[source_id, target_id]["names"]
        graph.edges[source_id, target_id]["names"] = sorted(set(names) | set(relation.imported_names))
    else:
        graph.add_edge(
            source_id,
            target_id,
            type=EDGE_IMPORTS,
            kind=relation.kind,
            names=sorted(set(relation.imported_names)),
        )


def _add_export_edges(graph: nx.DiGraph, relation: ExportRelation, top_level: dict) -> None:
    source_id = file_node_id(relation.file_path)
    if relation.resolved_file_path:
        target_id = file_node_id(relation.resolved_file_path)
        _ensure_node(
            graph,
            target_id,
            type=NODE_FILE,
            name=relation.resolved_file_path,
            path=relation.resolved_file_path,
        )
        names = sorted(set(relation.exported_names))
        if graph.has_edge(source_id, target_id):
            graph.edges[source_id, target_id]["reexports"] = names
        else:
            graph.add_edge(source_id, target_id, type=EDGE_EXPORTS, kind=relation.kind, names=names)
        return
    # Local exports annotate the symbol node; its CONTAINS edge already links the file.
    for binding in relation.bindings:
        symbol_id = top_level.get((relation.file_path, binding.local))
        if symbol_id is not None:
            names = graph.nodes[symbol_id].setdefault("exported_as", [])
            if binding.exported not in names:
                names.append(binding.exported)


def _add_call_edge(graph: nx.DiGraph, relation: CallRelation) -> None:
    caller_id = relation.caller.symbol_id
    if caller_id is None:
        # Top-level code calls from its own node so CALLS never lands on a CONTAINS edge.
        path = relation.caller.file_path
        caller_id = module_scope_node_id(path)
        if caller_id not in graph:
            graph.add_node(caller_id, type=NODE_MODULE_SCOPE, name=MODULE_CALLER, path=path)
            graph.add_edge(file_node_id(path), caller_id, type=EDGE_CONTAINS)
    callee_id = relation.callee.symbol_id
    if callee_id is None or callee_id not in graph:
        callee_id = external_node_id(relation.callee)
        _ensure_node(
            graph,
            callee_id,
            type=NODE_EXTERNAL,
            name=relation.callee.name,
            class_name=relation.callee.class_name or "",
            external=True,
        )
    if graph.has_edge(caller_id, callee_id):
        graph.edges[caller_id, callee_id]["count"] += 1
    else:
        graph.add_edge(caller_id, callee_id, type=EDGE_CALLS, call_type=relation.call_type, count=1)


def _ensure_node(graph: nx.DiGraph, node_id: str, **attrs) -> None:
    if node_id not in graph:
        graph.add_node(node_id, **attrs)
