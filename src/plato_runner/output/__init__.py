"""Report emission for a finished aggregation tree."""

from plato_runner.output.emitter import FileReportEmitter, ReportEmitter, copy_assets, emit_reports

__all__ = ["FileReportEmitter", "ReportEmitter", "copy_assets", "emit_reports"]
