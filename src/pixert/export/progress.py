"""
Module: export.progress

Purpose:
    Monotonic progress reporting for the export pipeline. Each stage owns
    a band of the 0-100 range; completing k of n units in a stage maps
    linearly into that band.

Key Classes:
    - ProgressTracker: Banded, never-decreasing progress reporter
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class ProgressTracker:
    """
    Reports stage progress as a single non-decreasing percentage.

    Example:
        >>> seen = []
        >>> tracker = ProgressTracker(seen.append, bands=(50.0, 90.0))
        >>> tracker.advance("encode", 1, 2)
        >>> tracker.advance("persist", 2, 2)
        >>> seen
        [25.0, 90.0]
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        *,
        bands: Tuple[float, float] = (50.0, 90.0),
    ) -> None:
        encode_end, persist_end = bands
        self._bands: Dict[str, Tuple[float, float]] = {
            "encode": (0.0, encode_end),
            "persist": (encode_end, persist_end),
            "attach": (persist_end, 100.0),
        }
        self._callback = callback
        self._value = 0.0

    @property
    def value(self) -> float:
        return self._value

    def advance(self, stage: str, completed: int, total: int) -> None:
        """Report ``completed`` of ``total`` units done in ``stage``."""
        start, end = self._bands[stage]
        fraction = completed / total if total > 0 else 1.0
        self._emit(start + (end - start) * min(1.0, fraction))

    def finish(self) -> None:
        self._emit(100.0)

    def _emit(self, value: float) -> None:
        if value <= self._value:
            return
        self._value = value
        logger.debug(f"Progress {value:.1f}%")
        if self._callback is not None:
            self._callback(value)
