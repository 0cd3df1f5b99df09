"""Tests for the fractal field capability shared by all families."""

import dataclasses

import numpy as np
import pytest

from resonant.fractals import (
    FAR_DISTANCE,
    FAMILY_NAMES,
    Julia4D,
    KaleidoIFS,
    Mandelbulb,
    Point4,
    color_field,
    distance_estimator,
    distance_field,
    escape_iterations,
    evaluate,
    family_id,
    family_name,
    get_color,
    get_name,
)


class TestDistanceEstimator:
    def test_output_shape_and_dtype(self, field, sample_points):
        result = distance_field(field, sample_points)
        assert result.shape == (len(sample_points),)
        assert result.dtype == np.float32

    def test_always_finite(self, field, sample_points):
        result = distance_field(field, sample_points)
        assert np.all(np.isfinite(result))
        assert np.all(np.abs(result) <= FAR_DISTANCE)

    def test_deterministic(self, field, sample_points):
        r1 = distance_field(field, sample_points)
        r2 = distance_field(field, sample_points)
        np.testing.assert_array_equal(r1, r2)

    def test_scalar_matches_batch(self, field, sample_points):
        batch = distance_field(field, sample_points[:10])
        for point, expected in zip(sample_points[:10], batch):
            assert distance_estimator(field, Point4(*point)) == pytest.approx(
                float(expected), rel=1e-5, abs=1e-6
            )

    def test_origin_is_finite(self, field):
        assert np.isfinite(distance_estimator(field, Point4(0.0, 0.0, 0.0, 0.0)))

    def test_three_component_point_gets_zero_w(self, field):
        assert distance_estimator(field, (0.3, 0.2, 0.1)) == distance_estimator(
            field, (0.3, 0.2, 0.1, 0.0)
        )

    def test_rejects_bad_shape(self, field):
        with pytest.raises(ValueError):
            distance_field(field, np.zeros((5, 2)))

    def test_time_changes_output(self, field, sample_points):
        later = dataclasses.replace(field, time=field.time + 20.0)
        r1 = distance_field(field, sample_points[:50])
        r2 = distance_field(later, sample_points[:50])
        assert not np.allclose(r1, r2)


class TestEscapeIterations:
    def test_bounded_by_cap(self, field, sample_points):
        passes = escape_iterations(field, sample_points)
        assert passes.min() >= 0
        assert passes.max() <= field.iterations

    def test_evaluate_returns_both(self, field, sample_points):
        distances, passes = evaluate(field, sample_points)
        np.testing.assert_array_equal(distances, distance_field(field, sample_points))
        np.testing.assert_array_equal(passes, escape_iterations(field, sample_points))


class TestGetColor:
    def test_channels_in_unit_range(self, field, sample_points):
        distances, passes = evaluate(field, sample_points)
        colors = color_field(field, passes, distances, sample_points)
        assert colors.shape == (len(sample_points), 3)
        assert colors.min() >= 0.0
        assert colors.max() <= 1.0

    @pytest.mark.parametrize("iterations", [-5, 0, 3, 8, 40])
    @pytest.mark.parametrize("distance", [-50.0, -1.0, 0.0, 0.01, 0.5, 3.0, 1e9])
    def test_extreme_inputs_stay_in_range(self, field, iterations, distance):
        color = get_color(field, iterations, distance, Point4(0.4, -1.2, 0.7, 2.0))
        assert all(0.0 <= channel <= 1.0 for channel in color)

    def test_nan_distance_stays_in_range(self, field):
        color = get_color(field, 4, float("nan"), Point4(0.1, 0.2, 0.3, 0.4))
        assert all(0.0 <= channel <= 1.0 for channel in color)

    def test_deterministic(self, field):
        pos = Point4(0.3, 0.1, -0.4, 0.2)
        assert get_color(field, 5, 0.2, pos) == get_color(field, 5, 0.2, pos)

    def test_continuous_in_distance(self, field):
        """An infinitesimal change in distance must not pop the color."""
        pos = Point4(0.3, 0.1, -0.4, 0.2)
        c1 = np.array(get_color(field, 5, 0.2, pos))
        c2 = np.array(get_color(field, 5, 0.2 + 1e-5, pos))
        assert np.abs(c1 - c2).max() < 1e-2


class TestFamilyContract:
    def test_names(self, mandelbulb, julia, kaleido):
        assert get_name(mandelbulb) == "Mandelbulb"
        assert get_name(julia) == "Julia4D"
        assert get_name(kaleido) == "KaleidoIFS"

    def test_gpu_ids(self, mandelbulb, julia, kaleido):
        assert family_id(mandelbulb) == 0
        assert family_id(julia) == 1
        assert family_id(kaleido) == 2

    def test_name_and_id_round_trip(self):
        assert FAMILY_NAMES == ("Mandelbulb", "Julia4D", "KaleidoIFS")
        for gpu_id, name in enumerate(FAMILY_NAMES):
            assert family_id(name) == gpu_id
            assert family_name(gpu_id) == name

    def test_unknown_name_and_id(self):
        with pytest.raises(ValueError):
            family_id("Sierpinski")
        with pytest.raises(ValueError):
            family_name(3)

    def test_non_field_rejected(self):
        with pytest.raises(TypeError):
            get_name("Mandelbulb")

    def test_fields_are_immutable(self, mandelbulb):
        with pytest.raises(AttributeError):
            mandelbulb.time = 2.0


class TestParameterValidation:
    @pytest.mark.parametrize("iterations", [0, -1, 17])
    def test_iteration_cap_bounds(self, iterations):
        with pytest.raises(ValueError):
            Mandelbulb(power=8.0, iterations=iterations)

    def test_iterations_must_be_int(self):
        with pytest.raises(TypeError):
            Julia4D(c=Point4(0, 0, 0, 0), iterations=8.5)

    def test_fold_count_bounds(self):
        with pytest.raises(ValueError):
            KaleidoIFS(fold_count=0, scale=2.0)

    def test_non_finite_time_rejected(self):
        with pytest.raises(ValueError):
            KaleidoIFS(fold_count=4, scale=2.0, time=float("inf"))
