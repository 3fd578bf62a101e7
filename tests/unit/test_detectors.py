"""
Tests for silence and presence detection.
"""

import pytest

from meeting_recorder.recording import InactivityState, PresenceDetector, SilenceDetector, frequency_energy


class TestFrequencyEnergy:
    """Tests for the analyser bin average."""

    def test_mean_of_bins(self):
        assert frequency_energy([0, 10, 20, 30]) == 15

    def test_empty_bins_are_silent(self):
        assert frequency_energy([]) == 0.0


class TestSilenceDetector:
    """Tests for silence accumulation."""

    def test_fires_when_limit_reached(self):
        detector = SilenceDetector(inactivity_limit_ms=500, threshold=10, sample_interval_ms=100)

        decisions = [detector.observe(5) for _ in range(5)]

        assert decisions == [False, False, False, False, True]
        assert detector.silence_ms == 500

    def test_activity_resets_accumulator(self):
        detector = SilenceDetector(inactivity_limit_ms=500, threshold=10, sample_interval_ms=100)

        for energy in [5, 5, 5, 5, 50]:
            assert detector.observe(energy) is False

        assert detector.silence_ms == 0

    def test_threshold_is_exclusive(self):
        detector = SilenceDetector(inactivity_limit_ms=100, threshold=10, sample_interval_ms=100)
        assert detector.observe(10) is False
        assert detector.observe(9.9) is True

    def test_fires_only_once(self):
        detector = SilenceDetector(inactivity_limit_ms=100, threshold=10, sample_interval_ms=100)

        assert detector.observe(0) is True
        assert detector.observe(0) is False
        assert detector.triggered

    def test_shares_state(self):
        state = InactivityState()
        detector = SilenceDetector(inactivity_limit_ms=1000, sample_interval_ms=250, state=state)

        detector.observe(0)
        detector.observe(0)

        assert state.silence_accumulated_ms == 500


class TestPresenceDetector:
    """Tests for the alone-in-meeting check."""

    @pytest.mark.parametrize("count", [2, 3, 10])
    def test_enough_participants(self, count):
        assert PresenceDetector(min_participants=2).observe(count) is False

    def test_alone_fires(self):
        detector = PresenceDetector(min_participants=2)
        assert detector.observe(1) is True
        assert detector.observe(0) is False

    def test_unknown_count_makes_no_decision(self, caplog):
        state = InactivityState(participant_count=3)
        detector = PresenceDetector(min_participants=2, state=state)

        with caplog.at_level("WARNING", logger="meeting_recorder"):
            assert detector.observe(None) is False

        assert state.participant_count is None
        assert "presence detection is probably not working" in caplog.text
        assert not detector.triggered

    def test_records_last_count(self):
        state = InactivityState()
        PresenceDetector(state=state).observe(4)
        assert state.participant_count == 4
