"""Analyzer interface, the overview reduction and the plato adapter."""

from plato_runner.analysis.analyzer import Analyzer, summarize
from plato_runner.analysis.models import AnalysisReport, FileRecord, Summary
from plato_runner.analysis.plato import PlatoAnalyzer, parse_plato_report

__all__ = [
    "AnalysisReport",
    "Analyzer",
    "FileRecord",
    "PlatoAnalyzer",
    "Summary",
    "parse_plato_report",
    "summarize",
]
