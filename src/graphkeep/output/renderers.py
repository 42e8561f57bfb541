"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from graphkeep.output.console import create_console, field_style, get_output, severity_style

if TYPE_CHECKING:
    from rich.console import Console

    from graphkeep.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(
    result: ServiceResult,
    *,
    verbose: bool = False,
    show_nodes: bool = False,
) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if not result.ok:
        _render_error(result, console, verbose=verbose)
    elif result.op == "load_graph":
        _render_graph(result, console, verbose=verbose, show_nodes=show_nodes)
    else:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error_message
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(
            str(item.get("path") or item.get("identifier", ""))
            for item in items
            if item.get("ok", True)
        )

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="gk.ok")
    op = Text(f"  {result.op}", style="gk.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="gk.key")
    v = Text(str(value), style=field_style(key))
    console.print(k, v, sep="", end="")
    console.print()


def _fmt_size(value: Any) -> str:
    if value is None:
        return ""
    if value < 1024:
        return f"{value} B"
    if value < 1024 * 1024:
        return f"{value / 1024:.1f} KiB"
    return f"{value / (1024 * 1024):.1f} MiB"


def _fmt_float(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = result.error_message
    label = Text("ERROR", style="gk.error")
    op = Text(f"  {result.op}", style="gk.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Graph renderers ───────────────────────────────────────────────────


def _render_save(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "path", d["path"])
    for kind in ("nodes", "edges"):
        counts = d[kind]
        summary = ", ".join(f"{counts[k]} {k}" for k in ("inserted", "updated", "deleted"))
        if verbose:
            summary += f", {counts['unchanged']} unchanged"
        _field(console, kind, summary)
    if not d.get("changed"):
        console.print(Text("  no node or edge changes", style="dim"))


def _node_table(nodes: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table for the nodes of a loaded graph."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="gk.id", no_wrap=True)
    table.add_column("Label", style="gk.name")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Category")
    table.add_column("Layers")
    if verbose:
        table.add_column("Modified", style="dim")

    for node in nodes:
        row = [
            str(node.get("id", "")),
            str(node.get("label", "")),
            _fmt_float(node.get("x")),
            _fmt_float(node.get("y")),
            str(node.get("category") or ""),
            ", ".join(node.get("layers") or []),
        ]
        if verbose:
            row.append(str(node.get("modifiedAt") or ""))
        table.add_row(*row)
    return table


def _render_graph(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    show_nodes: bool = False,
) -> None:
    """Render load_graph as a summary, optionally with a node table."""
    _status_line(console, result)
    d = result.data
    graph = d.get("graph", {})
    if d.get("name"):
        _field(console, "name", d["name"])
    _field(console, "path", d["path"])
    _field(console, "node_count", d["node_count"])
    _field(console, "edge_count", d["edge_count"])
    offset = graph.get("offset") or {}
    _field(console, "scale", _fmt_float(graph.get("scale")))
    _field(console, "offset", f"{_fmt_float(offset.get('x'))}, {_fmt_float(offset.get('y'))}")

    layers = sorted({tag for node in graph.get("nodes", []) for tag in node.get("layers") or []})
    if layers:
        _field(console, "layers", ", ".join(layers))

    if show_nodes and graph.get("nodes"):
        console.print()
        console.print(_node_table(graph["nodes"], verbose=verbose))


def _render_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(f"No graphs found in {result.data.get('directory', '.')}")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Graph", style="gk.id", no_wrap=True)
    table.add_column("Name", style="gk.name")
    table.add_column("Nodes", style="gk.count", justify="right")
    table.add_column("Edges", style="gk.count", justify="right")
    table.add_column("Modified", style="dim")
    if verbose:
        table.add_column("Created", style="dim")
        table.add_column("Size", style="gk.count", justify="right")
        table.add_column("Path", style="gk.path")

    for item in items:
        row = [
            str(item.get("identifier", "")),
            str(item.get("name", "")),
            str(item.get("node_count", 0)),
            str(item.get("edge_count", 0)),
            str(item.get("modified_at") or ""),
        ]
        if verbose:
            row.append(str(item.get("created_at") or ""))
            row.append(_fmt_size(item.get("size")))
            row.append(str(item.get("path") or ""))
        table.add_row(*row)
    console.print(table)


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render switch/import/export/delete results."""
    _status_line(console, result)
    keys = (
        "name",
        "source",
        "path",
        "previous",
        "output",
        "node_count",
        "edge_count",
        "minted_ids",
        "created",
        "legacy_dropped",
        "deleted",
        "was_open",
    )
    for key in keys:
        value = result.data.get(key)
        if value is None or (key in ("minted_ids", "legacy_dropped", "was_open") and not value):
            continue
        _field(console, key, value)


def _render_migrate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render migrate_json as totals plus one row per source document."""
    _status_line(console, result)
    d = result.data
    _field(console, "directory", d["directory"])
    if d["output_dir"] != d["directory"]:
        _field(console, "output_dir", d["output_dir"])
    _field(console, "migrated", d["migrated"])
    _field(console, "failed", d["failed"])

    items = d.get("items", [])
    if not items:
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Source", style="gk.path", no_wrap=True)
    table.add_column("Status")
    table.add_column("Nodes", style="gk.count", justify="right")
    table.add_column("Edges", style="gk.count", justify="right")
    if verbose:
        table.add_column("Database", style="gk.path")
    for item in items:
        status = Text("ok", style="gk.ok") if item["ok"] else Text("failed", style="gk.error")
        row: list[Any] = [
            Path(item["source"]).name,
            status,
            str(item.get("node_count", 0)),
            str(item.get("edge_count", 0)),
        ]
        if verbose:
            row.append(str(item.get("path") or ""))
        table.add_row(*row)
    console.print()
    console.print(table)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render check results with issues grouped by category."""
    issues = result.data.get("issues", [])
    count = result.data.get("count", len(issues))

    if count == 0:
        console.print("[gk.ok]OK[/gk.ok]  No issues found.")
        return

    by_category: dict[str, list[dict[str, Any]]] = {}
    for issue in issues:
        cat = str(issue.get("category", "unknown"))
        by_category.setdefault(cat, []).append(issue)

    for cat, cat_issues in by_category.items():
        console.print(f"\n[bold]{cat}[/bold]")
        for issue in cat_issues:
            sev = str(issue.get("severity", "warning"))
            style = severity_style(sev)
            prefix = f"[{style}]{sev}[/{style}]" if style else sev
            ref = issue.get("edge_id") or issue.get("node_id")
            rid = f" \\[{ref}]" if ref else ""
            console.print(f"  {prefix}{rid}: {issue.get('message', '')}")

    errors = result.data.get("errors", 0)
    console.print(f"\n{errors} errors, {count - errors} warnings")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS = {
    "save_graph": _render_save,
    "list_graphs": _render_list,
    "switch_file": _render_mutation,
    "import_json": _render_mutation,
    "export_json": _render_mutation,
    "delete_graph": _render_mutation,
    "migrate_json": _render_migrate,
    "check": _render_check,
}
