"""Concurrent aggregation tree: owner -> category -> module."""

from plato_runner.aggregation.tree import AggregationTree, CategoryNode, ModuleLeaf, OwnerNode

__all__ = ["AggregationTree", "CategoryNode", "ModuleLeaf", "OwnerNode"]
