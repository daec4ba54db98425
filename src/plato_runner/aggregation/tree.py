"""
Aggregation tree for per-module analysis results.

Layout::

    tree.summary
    tree.owners[owner].summary
    tree.owners[owner].categories[category].summary
    tree.owners[owner].categories[category].modules[module_key] -> ModuleLeaf

Raw file records on the leaves are the only source of truth. Every summary
is derived from them by ``compute_summaries`` and is never updated
incrementally. All mutation goes through one lock, so jobs finishing on pool
threads can write leaves while the coordinator creates new owner subtrees.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

from plato_runner.analysis.models import FileRecord, Summary
from plato_runner.core.exceptions import AggregationError
from plato_runner.pipeline.models import ModuleCategory

logger = logging.getLogger(__name__)

OverviewFn = Callable[[Sequence[FileRecord]], Summary]


@dataclass
class ModuleLeaf:
    """Results of one job, filed under (owner, category, module_key).

    Attributes:
        module_key: Module directory
        title: Report title of the job that produced the leaf
        records: Raw per-file records; None when the job failed
        error: Failure message for failed jobs
        summary: Overview of ``records`` (set by compute_summaries)
    """

    module_key: str
    title: str
    records: list[FileRecord] | None = None
    error: str | None = None
    summary: Summary | None = None

    @property
    def failed(self) -> bool:
        return self.records is None


@dataclass
class CategoryNode:
    """All module leaves of one category under one owner."""

    modules: dict[str, ModuleLeaf] = field(default_factory=dict)
    summary: Summary | None = None

    def records(self) -> list[FileRecord]:
        """Concatenate the records of every successful leaf, in module-key order."""
        records: list[FileRecord] = []
        for key in sorted(self.modules):
            leaf = self.modules[key]
            if not leaf.failed:
                records.extend(leaf.records)
        return records


@dataclass
class OwnerNode:
    """One owner's subtree; every category bucket exists from creation."""

    categories: dict[ModuleCategory, CategoryNode] = field(
        default_factory=lambda: {category: CategoryNode() for category in ModuleCategory}
    )
    summary: Summary | None = None

    def records(self) -> list[FileRecord]:
        records: list[FileRecord] = []
        for category in ModuleCategory:
            records.extend(self.categories[category].records())
        return records


class AggregationTree:
    """Thread-safe owner -> category -> module tree with derived summaries."""

    def __init__(self):
        self.owners: dict[str, OwnerNode] = {}
        self.summary: Summary | None = None
        self._lock = threading.RLock()
        self._summarized = False

    @property
    def is_summarized(self) -> bool:
        """True when every summary reflects the current leaves."""
        with self._lock:
            return self._summarized

    def ensure_owner(self, owner: str) -> OwnerNode:
        """Return the owner's subtree, creating it on first sight."""
        with self._lock:
            node = self.owners.get(owner)
            if node is None:
                node = OwnerNode()
                self.owners[owner] = node
                logger.debug(f"Created aggregation subtree for owner '{owner}'")
            return node

    def record_leaf(
        self,
        owner: str,
        category: ModuleCategory,
        module_key: str,
        records: Sequence[FileRecord],
        title: str | None = None,
    ) -> ModuleLeaf:
        """Store a job's records, replacing any previous leaf for the same key."""
        leaf = ModuleLeaf(module_key=module_key, title=title or module_key, records=list(records))
        self._put_leaf(owner, category, leaf)
        return leaf

    def record_failure(
        self,
        owner: str,
        category: ModuleCategory,
        module_key: str,
        error: str,
        title: str | None = None,
    ) -> ModuleLeaf:
        """Store a failed leaf; it carries no records and is left out of every roll-up."""
        leaf = ModuleLeaf(module_key=module_key, title=title or module_key, records=None, error=error)
        self._put_leaf(owner, category, leaf)
        return leaf

    def _put_leaf(self, owner: str, category: ModuleCategory, leaf: ModuleLeaf) -> None:
        with self._lock:
            category = ModuleCategory(category)
            modules = self.ensure_owner(owner).categories[category].modules
            if leaf.module_key in modules:
                logger.debug(f"Replacing existing leaf {owner}/{category.value}/{leaf.module_key}")
            modules[leaf.module_key] = leaf
            self._summarized = False

    def compute_summaries(self, overview: OverviewFn) -> Summary:
        """Recompute every summary bottom-up: module -> category -> owner -> global.

        Each level reduces the raw records below it; no level reads another
        level's summary.

        Args:
            overview: The analyzer's reduction over a sequence of records

        Returns:
            The global summary
        """
        with self._lock:
            for owner in sorted(self.owners):
                node = self.owners[owner]
                for category in ModuleCategory:
                    category_node = node.categories[category]
                    for key in sorted(category_node.modules):
                        leaf = category_node.modules[key]
                        leaf.summary = None if leaf.failed else overview(leaf.records)
                    category_node.summary = overview(category_node.records())
                node.summary = overview(node.records())
            self.summary = overview(self.records())
            self._summarized = True
            return self.summary

    def records(self) -> list[FileRecord]:
        """Every successful record in the tree, in deterministic order."""
        with self._lock:
            records: list[FileRecord] = []
            for owner in sorted(self.owners):
                records.extend(self.owners[owner].records())
            return records

    def records_for(self, owner: str, category: ModuleCategory | None = None) -> list[FileRecord]:
        with self._lock:
            node = self.owners.get(owner)
            if node is None:
                return []
            if category is None:
                return node.records()
            return node.categories[ModuleCategory(category)].records()

    def get_leaf(self, owner: str, category: ModuleCategory, module_key: str) -> ModuleLeaf | None:
        with self._lock:
            node = self.owners.get(owner)
            if node is None:
                return None
            return node.categories[ModuleCategory(category)].modules.get(module_key)

    def owner_names(self) -> list[str]:
        with self._lock:
            return sorted(self.owners)

    def iter_leaves(self) -> Iterator[tuple[str, ModuleCategory, ModuleLeaf]]:
        """Yield (owner, category, leaf) for every leaf, sorted by owner, category, key."""
        with self._lock:
            entries = [
                (owner, category, self.owners[owner].categories[category].modules[key])
                for owner in sorted(self.owners)
                for category in ModuleCategory
                for key in sorted(self.owners[owner].categories[category].modules)
            ]
        yield from entries

    def failed_leaves(self) -> list[tuple[str, ModuleCategory, ModuleLeaf]]:
        return [entry for entry in self.iter_leaves() if entry[2].failed]

    def require_summarized(self) -> None:
        """Raise unless the summaries reflect every leaf written so far."""
        if not self.is_summarized:
            raise AggregationError(
                "Aggregation tree summaries are stale", details="compute_summaries() must run after the last leaf write"
            )
