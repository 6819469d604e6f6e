"""Test the tween driver and orientation math."""
import asyncio
import math
import pytest
from cubestack.core.tweens import (
    Quaternion, TweenSystem, linear, power2_in, power2_in_out, power2_out, lerp3,
)


class TestEasing:
    """Tests for easing curves."""

    @pytest.mark.parametrize("ease", [linear, power2_in, power2_out, power2_in_out])
    def test_endpoints(self, ease):
        assert ease(0.0) == pytest.approx(0.0)
        assert ease(1.0) == pytest.approx(1.0)

    def test_in_out_is_symmetric(self):
        assert power2_in_out(0.5) == pytest.approx(0.5)
        assert power2_in_out(0.25) == pytest.approx(1 - power2_in_out(0.75))

    def test_lerp3(self):
        assert lerp3((0, 0, 0), (2, 4, -2), 0.5) == (1, 2, -1)


class TestTweenSystem:
    """Tests for Tween handles and the frame driver."""

    def test_tween_runs_to_completion(self):
        values = []

        async def scenario():
            tweens = TweenSystem()
            handle = tweens.tween(1.0, values.append, linear)
            tweens.update(0.25)
            assert handle.progress == pytest.approx(0.25)
            assert not handle.done
            tweens.update(1.0)
            assert handle.done
            assert tweens.active == 0
            await handle

        asyncio.run(scenario())
        assert values[0] == pytest.approx(0.25)
        assert values[-1] == 1.0

    def test_zero_duration_finishes_on_first_update(self):
        values = []

        async def scenario():
            tweens = TweenSystem()
            handle = tweens.tween(0.0, values.append, linear)
            assert not handle.done
            tweens.update(0.0)
            assert handle.done

        asyncio.run(scenario())
        assert values == [1.0]

    def test_clear_cancels_live_tweens(self):
        async def scenario():
            tweens = TweenSystem()
            handle = tweens.tween(1.0, lambda t: None)
            tweens.clear()
            assert tweens.active == 0
            with pytest.raises(asyncio.CancelledError):
                await handle

        asyncio.run(scenario())

    def test_finished_tween_ignores_further_updates(self):
        values = []

        async def scenario():
            tweens = TweenSystem()
            handle = tweens.tween(0.1, values.append, linear)
            tweens.update(0.2)
            handle.advance(0.2)

        asyncio.run(scenario())
        assert values == [1.0]


class TestQuaternion:
    """Tests for Quaternion."""

    def test_identity_leaves_vectors_alone(self):
        assert Quaternion().rotate((1.0, 2.0, 3.0)) == pytest.approx((1.0, 2.0, 3.0))

    def test_quarter_turn_about_y(self):
        q = Quaternion.from_axis_angle((0.0, 1.0, 0.0), math.pi / 2)
        assert q.rotate((1.0, 0.0, 0.0)) == pytest.approx((0.0, 0.0, -1.0), abs=1e-9)

    def test_compose_applies_right_operand_first(self):
        about_z = Quaternion.from_axis_angle((0.0, 0.0, 1.0), math.pi / 2)
        about_x = Quaternion.from_axis_angle((1.0, 0.0, 0.0), math.pi / 2)
        v = (0.0, 1.0, 0.0)
        combined = (about_x * about_z).rotate(v)
        assert combined == pytest.approx(about_x.rotate(about_z.rotate(v)), abs=1e-9)

    def test_zero_axis_is_identity(self):
        assert Quaternion.from_axis_angle((0.0, 0.0, 0.0), 1.0) == Quaternion()
