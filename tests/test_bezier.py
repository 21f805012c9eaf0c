import pytest
import torch

from bzpath import CubicBezier, evaluate_cubic, evaluate_linear, evaluate_quadratic


def _vec(x: float, y: float, z: float) -> torch.Tensor:
    return torch.tensor([x, y, z], dtype=torch.float64)


def test_cubic_of_repeated_point_is_constant() -> None:
    a = _vec(1.5, -2.0, 3.0)
    for t in torch.linspace(0.0, 1.0, 11).tolist():
        assert torch.allclose(evaluate_cubic(a, a, a, a, t), a)


def test_cubic_passes_through_anchors() -> None:
    a, b, c, d = _vec(0, 0, 0), _vec(1, 2, 0), _vec(3, 2, 1), _vec(4, 0, 1)
    assert torch.allclose(evaluate_cubic(a, b, c, d, 0.0), a)
    assert torch.allclose(evaluate_cubic(a, b, c, d, 1.0), d)


def test_lower_degree_midpoints() -> None:
    a, b, c = _vec(0, 0, 0), _vec(2, 2, 0), _vec(4, 0, 0)
    assert torch.allclose(evaluate_linear(a, c, 0.25), _vec(1, 0, 0))
    assert torch.allclose(evaluate_quadratic(a, b, c, 0.5), _vec(2, 1, 0))


def test_parameter_tensor_broadcasts_over_coordinates() -> None:
    a, b, c, d = _vec(0, 0, 0), _vec(1, 0, 0), _vec(2, 0, 0), _vec(3, 0, 0)
    t = torch.tensor([0.0, 0.5, 1.0], dtype=torch.float64)
    points = evaluate_cubic(a, b, c, d, t)
    assert points.shape == (3, 3)
    assert torch.allclose(points[:, 0], torch.tensor([0.0, 1.5, 3.0], dtype=torch.float64))


def test_parameter_is_not_clamped() -> None:
    a, d = _vec(0, 0, 0), _vec(3, 0, 0)
    b, c = _vec(1, 0, 0), _vec(2, 0, 0)
    assert torch.allclose(evaluate_cubic(a, b, c, d, 2.0), _vec(6, 0, 0))


def test_curve_length_estimate() -> None:
    curve = CubicBezier(
        torch.tensor([[0.0, 0.0, 0.0], [10.0 / 3.0, 0.0, 0.0], [20.0 / 3.0, 0.0, 0.0], [10.0, 0.0, 0.0]],
                     dtype=torch.float64)
    )
    # Chord 10 plus half of a control polygon of 10. / 弦长 10 加控制多边形长度 10 的一半。
    assert float(curve.estimated_length()) == pytest.approx(15.0)


def test_sample_returns_step_lengths() -> None:
    curve = CubicBezier(
        torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [3.0, 0.0, 0.0]], dtype=torch.float64)
    )
    t_values, positions, lengths = curve.sample(6)
    assert t_values.shape == (7,)
    assert positions.shape == (7, 3)
    assert float(lengths[0]) == 0.0
    assert float(lengths.sum()) == pytest.approx(3.0)


def test_invalid_control_point_shape_is_rejected() -> None:
    with pytest.raises(ValueError):
        CubicBezier(torch.zeros(3, 3))
    with pytest.raises(ValueError):
        CubicBezier(torch.zeros(4, 3)).sample(0)
