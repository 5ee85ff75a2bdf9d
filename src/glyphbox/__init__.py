# SPDX-License-Identifier: Apache-2.0
"""glyphbox - bitmap font text fitting checks for game translation."""

__version__ = "0.1.0"
