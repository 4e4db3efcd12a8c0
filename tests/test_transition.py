from guirlande.presets.color import Color
from guirlande.presets.transition import Transition, TransitionState


def run_to_end(transition: Transition, limit: int = 10_000) -> int:
    calls = 0
    while not transition.finished:
        transition.run()
        calls += 1
        assert calls < limit
    return calls


class TestTransition:
    """Test tick-driven color fades"""

    def test_steps_follow_distance(self):
        transition = Transition(Color(0, 0, 0), Color(255, 100, 7), 0.03, 1)
        assert transition.steps == [8, 3, 1]

    def test_first_run_only_starts(self):
        color = Color(0, 0, 0)
        transition = Transition(color, Color(255, 255, 255), 0.03, 1)
        transition.run()
        assert transition.state is TransitionState.RUNNING
        assert color.to_tuple() == (0, 0, 0)

    def test_reaches_target_exactly(self):
        color = Color(0, 0, 0)
        target = Color(255, 100, 7)
        transition = Transition(color, target, 0.03, 1)

        calls = run_to_end(transition)

        # 2 + max(ceil(255 / 8), ceil(100 / 3), ceil(7 / 1))
        assert calls == 36
        assert color == target

    def test_fades_downward(self):
        color = Color(200, 50, 0)
        transition = Transition(color, Color(0, 0, 0), 0.01, 1)
        run_to_end(transition)
        assert color.to_tuple() == (0, 0, 0)

    def test_equal_colors_finish_quickly(self):
        color = Color(5, 5, 5)
        transition = Transition(color, Color(5, 5, 5), 0.05, 1)
        assert run_to_end(transition) == 3
        assert color.to_tuple() == (5, 5, 5)

    def test_finished_is_terminal(self):
        color = Color(0, 0, 0)
        transition = Transition(color, Color(10, 10, 10), 0.01, 1)
        run_to_end(transition)
        transition.run()
        assert transition.finished
        assert color.to_tuple() == (10, 10, 10)

    def test_reset_restarts(self):
        color = Color(0, 0, 0)
        transition = Transition(color, Color(10, 0, 0), 0.01, 1)
        run_to_end(transition)
        transition.reset(color, Color(0, 0, 0), 0.01, 1)
        assert transition.state is TransitionState.INIT
        run_to_end(transition)
        assert color.to_tuple() == (0, 0, 0)
