"""
Inactivity detection.

Each detector turns one observable signal (participant count or audio energy)
into a stop decision. Detectors share nothing; the orchestrator calls them on
their own timers and routes a positive decision to its idempotent stop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from meeting_recorder.config import get_logger

logger = get_logger("detectors")

DEFAULT_SILENCE_THRESHOLD = 10.0


@dataclass
class InactivityState:
    """Per-recording inactivity accumulators."""
    silence_accumulated_ms: int = 0
    participant_count: Optional[int] = None


def frequency_energy(bins: Sequence[float]) -> float:
    """Mean of analyser frequency bins, the audio activity level of one sample."""
    if not bins:
        return 0.0
    return sum(bins) / len(bins)


class SilenceDetector:
    """
    Accumulates consecutive silence.

    Every sample below ``threshold`` adds ``sample_interval_ms``; any sample at
    or above it resets the accumulator. Fires once the accumulated silence
    reaches ``inactivity_limit_ms``.
    """

    def __init__(
        self,
        inactivity_limit_ms: int,
        threshold: float = DEFAULT_SILENCE_THRESHOLD,
        sample_interval_ms: int = 100,
        state: Optional[InactivityState] = None
    ):
        self.inactivity_limit_ms = inactivity_limit_ms
        self.threshold = threshold
        self.sample_interval_ms = sample_interval_ms
        self.state = state or InactivityState()
        self.triggered = False

    def observe(self, energy: float) -> bool:
        """Feed one energy sample. Returns True exactly once, when silence hits the limit."""
        if self.triggered:
            return False

        if energy < self.threshold:
            self.state.silence_accumulated_ms += self.sample_interval_ms
            if self.state.silence_accumulated_ms >= self.inactivity_limit_ms:
                self.triggered = True
                return True
        else:
            self.state.silence_accumulated_ms = 0
        return False

    @property
    def silence_ms(self) -> int:
        return self.state.silence_accumulated_ms


class PresenceDetector:
    """Fires once fewer than ``min_participants`` are in the meeting."""

    def __init__(self, min_participants: int = 2, state: Optional[InactivityState] = None):
        self.min_participants = min_participants
        self.state = state or InactivityState()
        self.triggered = False

    def observe(self, count: Optional[int]) -> bool:
        if self.triggered:
            return False

        self.state.participant_count = count
        if count is None:
            logger.warning("Meeting presence detection is probably not working (no participant count)")
            return False

        if count >= self.min_participants:
            return False

        self.triggered = True
        return True
