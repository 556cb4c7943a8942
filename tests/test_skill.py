import pytest
from hexapawn.skill import skill_percentage


class TestSkill:

    def test_nothing_learned(self):
        assert skill_percentage(10, 10) == 0

    def test_everything_learned(self):
        assert skill_percentage(10, 0) == 100

    def test_truncates(self):
        assert skill_percentage(3, 2) == 33
        assert skill_percentage(3, 1) == 66

    def test_no_losses(self):
        assert skill_percentage(0, 0) == 0

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            skill_percentage(5, 6)
        with pytest.raises(ValueError):
            skill_percentage(5, -1)
