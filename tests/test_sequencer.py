"""StepSequencer bounds and transitions."""

import pytest

from care_assessment.sequencer import StepSequencer


class TestStepSequencer:

    def test_starts_at_zero(self):
        seq = StepSequencer(8)
        assert seq.current_index == 0
        assert seq.at_first and not seq.at_last

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            StepSequencer(0)

    def test_start_is_clamped(self):
        assert StepSequencer(3, start=10).current_index == 2
        assert StepSequencer(3, start=-4).current_index == 0

    def test_advance_stops_at_last(self):
        seq = StepSequencer(2)
        assert seq.advance() is True
        assert seq.advance() is False
        assert seq.current_index == 1

    def test_retreat_stops_at_first(self):
        seq = StepSequencer(2)
        assert seq.retreat() is False
        assert seq.current_index == 0

    @pytest.mark.parametrize("target", range(8))
    def test_go_to_every_valid_index(self, target):
        seq = StepSequencer(8)
        assert seq.go_to(target) is True
        assert seq.current_index == target

    @pytest.mark.parametrize("target", [-1, 8, 100])
    def test_go_to_out_of_range_is_refused(self, target):
        seq = StepSequencer(8, start=3)
        assert seq.go_to(target) is False
        assert seq.current_index == 3

    def test_reset(self):
        seq = StepSequencer(5, start=4)
        seq.reset()
        assert seq.current_index == 0
