"""
Report emission.

The emitter only ever sees a fully summarized tree: ``emit_reports`` refuses
to run otherwise. Write failures are logged and counted; they never touch
the computed summaries.
"""

from __future__ import annotations

import html
import json
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

import pandas as pd

from plato_runner.aggregation.tree import AggregationTree, ModuleLeaf, OwnerNode
from plato_runner.analysis.models import FileRecord, Summary
from plato_runner.core.colors import _format_error_msg
from plato_runner.core.constants import (
    ASSETS_DIRNAME,
    INDEX_FILENAME,
    MODULE_OVERVIEW_FILENAME,
    OVERVIEW_CSV_FILENAME,
    REPORT_DIRNAME,
    REPORT_FILENAME,
)
from plato_runner.core.exceptions import OutputError
from plato_runner.pipeline.models import ModuleCategory

OVERVIEW_COLUMNS = ["Module", "Category", "Files", "Total LOC", "Average LOC", "Average Maintainability", "Lint Errors"]


class ReportEmitter(Protocol):
    """Renders artifacts for each level of a summarized tree."""

    def emit_module(self, owner: str, category: ModuleCategory, leaf: ModuleLeaf, output_dir: Path) -> None: ...

    def emit_owner(self, owner: str, node: OwnerNode, output_dir: Path) -> None: ...

    def emit_global(self, tree: AggregationTree, output_dir: Path) -> None: ...


def copy_assets(source: str | Path | None, output_dir: str | Path, logger: logging.Logger | None = None) -> Path | None:
    """Copy the shared static asset bundle once to ``<output>/assets``."""
    logger = logger or logging.getLogger(__name__)
    if source is None or not Path(source).is_dir():
        logger.warning(f"Static assets not found ({source}); reports will reference missing assets")
        return None

    target = Path(output_dir) / ASSETS_DIRNAME
    try:
        shutil.copytree(source, target, dirs_exist_ok=True)
    except OSError as e:
        logger.error(_format_error_msg("copying static assets", error=e))
        return None
    logger.info(f"Copied static assets to {target}")
    return target


def emit_reports(
    tree: AggregationTree, emitter: ReportEmitter, output_dir: str | Path, logger: logging.Logger | None = None
) -> int:
    """Call the emitter for every module leaf, every owner, then the global root.

    Args:
        tree: Aggregation tree after compute_summaries()
        emitter: Emitter receiving each level
        output_dir: Root output directory
        logger: Logger instance

    Returns:
        Number of artifacts that failed to write

    Raises:
        AggregationError: If the tree's summaries are stale
    """
    logger = logger or logging.getLogger(__name__)
    tree.require_summarized()
    output_path = Path(output_dir)
    errors = 0

    def _attempt(description: str, fn, *args) -> None:
        nonlocal errors
        try:
            fn(*args)
        except (OSError, OutputError, ValueError) as e:
            errors += 1
            logger.error(_format_error_msg("writing report", item_type=description, error=e))

    for owner, category, leaf in tree.iter_leaves():
        _attempt(f"{owner}/{category.value}/{leaf.title}", emitter.emit_module, owner, category, leaf, output_path)

    for owner in tree.owner_names():
        _attempt(f"owner {owner}", emitter.emit_owner, owner, tree.owners[owner], output_path)

    _attempt("global overview", emitter.emit_global, tree, output_path)
    return errors


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False, default=str)


def _report_payload(summary: Summary | None, records: list[FileRecord]) -> dict[str, Any]:
    return {
        "summary": summary.to_dict() if summary else None,
        "reports": [record.to_dict() for record in records],
    }


def _summary_row(label: str, category: str, summary: Summary | None) -> dict[str, Any]:
    summary = summary or Summary()
    return {
        "Module": label,
        "Category": category,
        "Files": summary.file_count,
        "Total LOC": summary.total_sloc,
        "Average LOC": summary.average_sloc,
        "Average Maintainability": summary.average_maintainability,
        "Lint Errors": summary.total_lint_errors,
    }


class FileReportEmitter:
    """Write JSON, CSV and HTML overviews into the output tree.

    Layout::

        <output>/<owner>/<category>/<title>/overview.json
        <output>/<owner>/report/report.json, overview.csv, index.html
        <output>/report/report.json, overview.csv, index.html
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)
        self.generated_at = datetime.now().isoformat(timespec="seconds")

    def emit_module(self, owner: str, category: ModuleCategory, leaf: ModuleLeaf, output_dir: Path) -> None:
        path = output_dir / owner / category.value / leaf.title / MODULE_OVERVIEW_FILENAME
        payload = {
            "owner": owner,
            "category": category.value,
            "module": leaf.module_key,
            "title": leaf.title,
            "error": leaf.error,
            **_report_payload(leaf.summary, leaf.records or []),
        }
        _write_json(path, payload)
        self.logger.debug(f"Module overview written to {path}")

    def emit_owner(self, owner: str, node: OwnerNode, output_dir: Path) -> None:
        owner_dir = output_dir / owner
        _write_json(owner_dir / REPORT_DIRNAME / REPORT_FILENAME, _report_payload(node.summary, node.records()))

        rows = []
        for category in ModuleCategory:
            for key in sorted(node.categories[category].modules):
                leaf = node.categories[category].modules[key]
                row = _summary_row(leaf.title, category.value, leaf.summary)
                if leaf.failed:
                    row["Module"] = f"{leaf.title} (failed)"
                rows.append(row)
        df = pd.DataFrame(rows, columns=OVERVIEW_COLUMNS)
        df.to_csv(owner_dir / OVERVIEW_CSV_FILENAME, index=False, encoding="utf-8")

        sections = []
        for category in ModuleCategory:
            category_df = df[df["Category"] == category.value].drop(columns=["Category"])
            category_summary = node.categories[category].summary or Summary()
            sections.append(
                f"""        <h2>{category.value.title()}</h2>
        <p>{category_summary.file_count} files, {category_summary.total_sloc} LOC,
           average maintainability {category_summary.average_maintainability}</p>
        {self._table(category_df)}
"""
            )
        title = f"{owner} - Maintainability Overview"
        self._write_page(owner_dir / INDEX_FILENAME, title, node.summary, "".join(sections), assets_prefix="../")
        self.logger.info(f"Owner report written to {owner_dir}")

    def emit_global(self, tree: AggregationTree, output_dir: Path) -> None:
        _write_json(output_dir / REPORT_DIRNAME / REPORT_FILENAME, _report_payload(tree.summary, tree.records()))

        rows = []
        for owner in tree.owner_names():
            row = _summary_row(owner, "owner", tree.owners[owner].summary)
            del row["Category"]
            row["Owner"] = row.pop("Module")
            rows.append(row)
        columns = ["Owner", *OVERVIEW_COLUMNS[2:]]
        df = pd.DataFrame(rows, columns=columns)
        df.to_csv(output_dir / OVERVIEW_CSV_FILENAME, index=False, encoding="utf-8")

        body = f"""        <h2>Owners</h2>
        {self._table(df)}
"""
        self._write_page(output_dir / INDEX_FILENAME, "Maintainability Overview", tree.summary, body, assets_prefix="")
        self.logger.info(f"Overall report written to {output_dir}")

    @staticmethod
    def _table(df: pd.DataFrame) -> str:
        if df.empty:
            return "<p><em>No modules</em></p>"
        return df.to_html(index=False, escape=True, classes="data-table", border=0)

    def _write_page(self, path: Path, title: str, summary: Summary | None, body: str, assets_prefix: str) -> None:
        summary = summary or Summary()
        title_escaped = html.escape(title)
        page = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title_escaped}</title>
    <link rel="stylesheet" href="{assets_prefix}{ASSETS_DIRNAME}/css/plato.css">
    <style>
        body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 20px; color: #333; }}
        .metadata {{ background-color: #ecf0f1; padding: 15px; border-radius: 5px; }}
        .data-table {{ border-collapse: collapse; width: 100%; }}
        .data-table th, .data-table td {{ padding: 6px 10px; border-bottom: 1px solid #ddd; text-align: left; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{title_escaped}</h1>
        <div class="metadata">
            <div>Files: {summary.file_count}</div>
            <div>Total LOC: {summary.total_sloc}</div>
            <div>Average LOC: {summary.average_sloc}</div>
            <div>Average Maintainability: {summary.average_maintainability}</div>
            <div>Lint Errors: {summary.total_lint_errors}</div>
            <div>Generated: {self.generated_at}</div>
        </div>
{body}    </div>
</body>
</html>"""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(page)
