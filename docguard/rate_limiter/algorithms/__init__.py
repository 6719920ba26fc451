"""Rate limiting algorithms.

Available Algorithms:
    - evaluate_sliding_window: sliding log over epoch-millisecond timestamps
"""

from docguard.rate_limiter.algorithms.sliding_window import (
    SlidingWindowEvaluation,
    evaluate_sliding_window,
)

__all__ = [
    "SlidingWindowEvaluation",
    "evaluate_sliding_window",
]
