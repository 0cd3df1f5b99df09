"""Tests for frequency extraction."""

import math

import numpy as np
import pytest

from resonant.audio.extractor import (
    BASE_FREQUENCY,
    create_harmonic_series,
    extract_frequencies,
    frame_sample_points,
)
from resonant.fractals import Point4, color_field, create_fractal, distance_field


class TestExtractFrequencies:
    def test_one_frequency_per_point(self, field, sample_points):
        result = extract_frequencies(field, sample_points)
        assert len(result) == len(sample_points)

    def test_lower_bound(self, field, sample_points):
        result = extract_frequencies(field, sample_points)
        assert min(result) >= BASE_FREQUENCY * 0.5
        assert all(math.isfinite(f) for f in result)

    def test_empty_input(self, field):
        assert extract_frequencies(field, []) == []

    def test_deterministic(self, field, sample_points):
        assert extract_frequencies(field, sample_points) == extract_frequencies(
            field, sample_points
        )

    def test_formula(self, mandelbulb):
        point = np.array([[3.0, 0.0, 0.0, 0.0]], dtype=np.float32)
        d = float(distance_field(mandelbulb, point)[0])
        red = float(color_field(mandelbulb, 8, d, point)[0, 0])
        expected = 220.0 * (1.0 + d * 0.5) * (1.0 + red * 0.3)
        assert extract_frequencies(mandelbulb, point)[0] == pytest.approx(expected, rel=1e-5)

    def test_uses_reference_iteration_count(self, julia):
        """Color is taken at 8 iterations regardless of the field's cap."""
        point = np.array([[0.2, 0.1, 0.0, 0.0]], dtype=np.float32)
        d = float(distance_field(julia, point)[0])
        red_at_8 = float(color_field(julia, 8, d, point)[0, 0])
        clamped = max(d, -1.0)
        expected = 220.0 * (1.0 + clamped * 0.5) * (1.0 + red_at_8 * 0.3)
        assert extract_frequencies(julia, point)[0] == pytest.approx(expected, rel=1e-5)

    def test_accepts_point4(self, kaleido):
        result = extract_frequencies(kaleido, [Point4(0.1, 0.2, 0.3, 0.4)])
        assert len(result) == 1

    def test_same_order_as_input(self, field, sample_points):
        forward = extract_frequencies(field, sample_points[:20])
        backward = extract_frequencies(field, sample_points[:20][::-1])
        assert forward == pytest.approx(backward[::-1], rel=1e-5)


class TestHarmonicSeries:
    def test_a3_series(self):
        assert create_harmonic_series(220.0, 4) == [220.0, 440.0, 660.0, 880.0]

    def test_length(self):
        assert len(create_harmonic_series(110.0, 7)) == 7

    def test_zero_harmonics(self):
        assert create_harmonic_series(220.0, 0) == []


class TestFrameSamplePoints:
    def test_shape(self):
        points = frame_sample_points(3.0)
        assert points.shape == (4, 4)
        assert points.dtype == np.float32

    def test_time_zero(self):
        np.testing.assert_allclose(
            frame_sample_points(0.0),
            [[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0.5]],
        )

    def test_frame_frequencies_audible(self):
        field = create_fractal(123456, 12.0)
        result = extract_frequencies(field, frame_sample_points(12.0))
        assert len(result) == 4
        assert min(result) >= 110.0
