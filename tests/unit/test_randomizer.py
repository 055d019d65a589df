from __future__ import annotations

import pytest

from inspection_rewriter.domain.angles import encode_angle
from inspection_rewriter.domain.randomizer import (
    MAX_ATTEMPTS,
    generate_in_spec,
    generate_out_of_spec,
    is_out_of_spec,
    quantize,
)


def test_is_out_of_spec_bounds_are_inclusive():
    assert is_out_of_spec(15, 10, 15) is False
    assert is_out_of_spec(10, 10, 15) is False
    assert is_out_of_spec(15.01, 10, 15) is True
    assert is_out_of_spec(9.99, 10, 15) is True


def test_quantize_linear_and_angular():
    assert quantize(12.344, 2) == 12.34
    assert quantize(30.5, 0, angular=True) == 30.5
    assert quantize(-5.51, 0, angular=True) == -(5 + 31 / 60)
    assert quantize(30 + 59.6 / 60, 0, angular=True) == 31.0


class TestGenerateInSpec:
    def test_draw_is_rounded_to_precision(self, scripted_rng):
        rng = scripted_rng(uniform=11.234)
        assert generate_in_spec(10, 12, 2, rng=rng) == 11.23
        assert rng.uniform_calls == 1

    def test_angular_draw_is_whole_minutes(self, scripted_rng):
        value = generate_in_spec(30, 31, 0, angular=True, rng=scripted_rng(uniform=30.5041))
        assert encode_angle(value) == "30°30'"

    @pytest.mark.parametrize("lower,upper", [(10, 10), (12, 10)])
    def test_degenerate_window_returns_lower(self, scripted_rng, lower, upper):
        rng = scripted_rng(uniform=99.0)
        assert generate_in_spec(lower, upper, 2, rng=rng) == lower
        assert rng.uniform_calls == 0

    def test_rounding_outside_window_uses_adjacent_grid_point(self, scripted_rng):
        # 0.0049 -> 0.00 (< lower) -> 0.01 は帯域内
        assert generate_in_spec(0.004, 0.012, 2, rng=scripted_rng(uniform=0.0049)) == 0.01

    def test_rounding_outside_window_without_grid_point_returns_lower(self, scripted_rng):
        assert generate_in_spec(0.004, 0.006, 2, rng=scripted_rng(uniform=0.0049)) == 0.004

    def test_safe_band_uses_inset(self, scripted_rng):
        rng = scripted_rng(uniform=12.0)
        generate_in_spec(10, 20, 2, rng=rng)
        assert rng.uniform_args == pytest.approx((10.5, 19.5))

    def test_collapsed_inset_samples_full_window_inclusive(self, scripted_rng):
        # 幅が inf になり 5% 内側の範囲が潰れるケース
        rng = scripted_rng(uniform=1e308)
        assert generate_in_spec(-1e308, 1e308, 2, rng=rng) == 1e308
        assert rng.uniform_args == (-1e308, 1e308)

    def test_seeded_draws_stay_inside_safe_band(self, seeded_rng):
        for _ in range(200):
            value = generate_in_spec(10, 15, 2, rng=seeded_rng)
            assert 10.25 <= value <= 14.75
            assert value == round(value, 2)


class TestGenerateOutOfSpec:
    def test_shift_above_upper(self, scripted_rng):
        assert generate_out_of_spec(16.0, 10, 15, 2, rng=scripted_rng(randints=[2])) == 16.02

    def test_zero_offset_becomes_one(self, scripted_rng):
        assert generate_out_of_spec(16.0, 10, 15, 2, rng=scripted_rng(randints=[0])) == 16.01

    def test_shift_below_lower(self, scripted_rng):
        assert generate_out_of_spec(9.0, 10, 15, 2, rng=scripted_rng(randints=[-3])) == 8.97

    def test_candidate_back_inside_window_is_retried(self, scripted_rng):
        rng = scripted_rng(randints=[-3, 2])
        assert generate_out_of_spec(15.01, 10, 15, 2, rng=rng) == 15.03
        assert rng.randint_calls == 2

    def test_opposite_side_accepted_only_after_same_side_attempts(self, scripted_rng):
        # -0.01 は下限側、+0.03 の候補は上限側
        rng = scripted_rng(randints=[3])
        result = generate_out_of_spec(-0.01, -0.005, -0.001, 2, rng=rng)
        assert result == 0.02
        assert rng.randint_calls == 22

    def test_exhaustion_returns_original(self, scripted_rng):
        rng = scripted_rng(randints=[-3])
        assert generate_out_of_spec(15.01, 10, 15, 2, rng=rng) == 15.01
        assert rng.randint_calls == MAX_ATTEMPTS

    def test_angular_shift_in_minutes(self, scripted_rng):
        original = 31 + 10 / 60
        value = generate_out_of_spec(original, 30, 31, 0, angular=True, rng=scripted_rng(randints=[1]))
        assert encode_angle(value) == "31°11'"

    def test_seeded_results_stay_out_of_spec_on_same_side(self, seeded_rng):
        for _ in range(200):
            value = generate_out_of_spec(16.0, 10, 15, 2, rng=seeded_rng)
            assert value > 15
            assert value != 16.0
            assert abs(value - 16.0) <= 0.0301
