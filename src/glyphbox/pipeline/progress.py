# SPDX-License-Identifier: Apache-2.0
"""Progress callback protocol for script checks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .preview_pipeline import BlockReport


@runtime_checkable
class ProgressCallback(Protocol):
    """Called after each block of a script has been checked."""

    def __call__(
        self,
        checked: int,
        total: int,
        report: BlockReport,
    ) -> None: ...
