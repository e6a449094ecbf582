"""
Runtime wiring: shared context and the presentation-side frame consumer.
"""

from .context import RuntimeContext
from .presenter import FramePresenter

__all__ = ["RuntimeContext", "FramePresenter"]
