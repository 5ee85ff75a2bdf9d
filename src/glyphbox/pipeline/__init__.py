# SPDX-License-Identifier: Apache-2.0
"""Preview pipeline package."""

from .preview_pipeline import BlockReport, PreviewConfig, PreviewPipeline
from .progress import ProgressCallback

__all__ = [
    "BlockReport",
    "PreviewConfig",
    "PreviewPipeline",
    "ProgressCallback",
]
