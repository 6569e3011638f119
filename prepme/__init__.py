"""PrepMe: interview-prep problem tracking with spaced repetition and mock tests."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
