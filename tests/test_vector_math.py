import math

import pytest

from VectorMath import angle, clamp01, cosine_similarity, cross, dist, dot, normalize, vec_len, vec_sub


def test_normalize_unit_length():
    for v in [(3.0, 4.0, 0.0), (-1.0, 2.0, -2.0), (1e-3, 0.0, 5e-4)]:
        assert vec_len(normalize(v)) == pytest.approx(1.0)


def test_normalize_zero_vector_unchanged():
    n = normalize((0.0, 0.0, 0.0))
    assert n == (0.0, 0.0, 0.0)
    assert not any(math.isnan(c) for c in n)


def test_basic_ops():
    assert vec_sub((1, 2, 3), (1, 1, 1)) == (0, 1, 2)
    assert dot((1, 0, 0), (0, 1, 0)) == 0
    assert cross((1, 0, 0), (0, 1, 0)) == (0, 0, 1)
    assert dist((0, 0, 0), (3, 4, 0)) == pytest.approx(5.0)
    assert clamp01(1.7) == 1.0
    assert clamp01(-0.2) == 0.0


def test_angle_degrees():
    assert angle((1, 0, 0), (0, 0, 0), (0, 1, 0)) == pytest.approx(90.0)
    assert angle((1, 0, 0), (0, 0, 0), (-1, 0, 0)) == pytest.approx(180.0)
    assert angle((0, 0, 0), (0, 0, 0), (1, 0, 0)) == 0.0


def test_cosine_similarity():
    assert cosine_similarity((0, 2, 0), (0, 5, 0)) == pytest.approx(1.0)
    assert cosine_similarity((0, 1, 0), (0, -1, 0)) == pytest.approx(-1.0)
    assert cosine_similarity((0, 0, 0), (0, 1, 0)) == 0.0
