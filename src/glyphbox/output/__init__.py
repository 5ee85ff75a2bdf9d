# SPDX-License-Identifier: Apache-2.0
"""Output writers for fit check results."""

from .check_report import CHECK_REPORT_VERSION, CheckReport
from .preview_exporter import ExportConfig, PreviewExporter

__all__ = [
    "CHECK_REPORT_VERSION",
    "CheckReport",
    "ExportConfig",
    "PreviewExporter",
]
