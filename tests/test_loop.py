import pytest

from guirlande.common.exceptions import LoopParseError
from guirlande.modules.loop import ColorPart, FadePart, Loop, WaitPart


class TestLoop:
    """Test LED strip loop scripts"""

    def test_build(self):
        loop = Loop().color(255, 0, 0).wait(500).to(0, 0, 255, 1000)
        assert loop.build() == "c(255,0,0)|w(500)|t(0,0,255,1000)"

    def test_parse(self):
        loop = Loop.parse("c(1,2,3)|w(10)|t(4,5,6,20)")
        assert loop.parts == [ColorPart(1, 2, 3), WaitPart(10), FadePart(4, 5, 6, 20)]

    def test_round_trip(self):
        loop = Loop().to(10, 20, 30, 400).color(0, 0, 0).wait(0).color(255, 255, 255)
        assert Loop.parse(loop.build()).parts == loop.parts
        assert Loop.parse(loop.build()) == loop

    def test_empty_loop(self):
        assert Loop().build() == ""
        assert Loop.parse("").parts == []
        assert Loop(None).parts == []

    @pytest.mark.parametrize(
        "text,token",
        [
            ("c(1,2)", "c(1,2)"),
            ("c(1,2,3)x", "c(1,2,3)x"),
            ("w(-1)", "w(-1)"),
            ("c(1000,0,0)", "c(1000,0,0)"),
            ("t(1,2,3)", "t(1,2,3)"),
            ("c(1,2,3)||w(5)", ""),
            ("c(1,2,3)|hello", "hello"),
            (" c(1,2,3)", " c(1,2,3)"),
        ],
    )
    def test_rejects_invalid_tokens(self, text, token):
        with pytest.raises(LoopParseError) as exc:
            Loop.parse(text)
        assert exc.value.token == token

    @pytest.mark.parametrize(
        "build,token",
        [
            (lambda loop: loop.color(1000, -5, 0), "c(1000,-5,0)"),
            (lambda loop: loop.color(256, 0, 0), "c(256,0,0)"),
            (lambda loop: loop.color(1.5, 0, 0), "c(1.5,0,0)"),
            (lambda loop: loop.wait(-1), "w(-1)"),
            (lambda loop: loop.wait(None), "w(None)"),
            (lambda loop: loop.to(0, 0, -1, 10), "t(0,0,-1,10)"),
            (lambda loop: loop.to(0, 0, 0, -10), "t(0,0,0,-10)"),
        ],
    )
    def test_builders_reject_unparsable_values(self, build, token):
        loop = Loop().color(1, 2, 3)
        with pytest.raises(LoopParseError) as exc:
            build(loop)
        assert exc.value.token == token
        assert loop.build() == "c(1,2,3)"

    @pytest.mark.parametrize(
        "loop",
        [
            Loop().color(0, 0, 0).color(255, 255, 255),
            Loop().wait(0).wait(86400000),
            Loop().to(255, 0, 128, 0).wait(1).to(0, 255, 0, 123456),
            Loop().color(7, 8, 9),
        ],
    )
    def test_built_loops_round_trip(self, loop):
        assert Loop.parse(loop.build()) == loop
