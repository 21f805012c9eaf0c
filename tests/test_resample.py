import math

import pytest
import torch

from bzpath import BezierPath, GroundHit, Resampler


def _vec(x: float, y: float, z: float) -> torch.Tensor:
    return torch.tensor([x, y, z], dtype=torch.float64)


def _straight_path(*anchors, ground=None) -> BezierPath:
    anchors = [_vec(*anchor) for anchor in anchors]
    points = [anchors[0]]
    for start, end in zip(anchors[:-1], anchors[1:]):
        points.extend([start + (end - start) / 3.0, start + (end - start) * 2.0 / 3.0, end])
    return BezierPath.from_points(points, ground=ground)


class _TiltedBeyondFive:
    """Flat ground up to ``x = 5`` and a 45 degree slope after it. / ``x = 5`` 之前为平地，之后为 45 度斜坡。"""

    def raycast(self, origin, direction, max_distance, layer_mask):
        if float(direction[1]) > 0:
            return None
        if float(origin[0]) < 5.0:
            normal = _vec(0.0, 1.0, 0.0)
        else:
            normal = _vec(1.0, 1.0, 0.0) / math.sqrt(2.0)
        return GroundHit(distance=1.0, normal=normal)


def test_straight_segment_is_sampled_at_unit_spacing() -> None:
    path = _straight_path((0, 0, 0), (10, 0, 0))
    spaced = path.spaced_points(1.0, 1)

    assert len(spaced) == 11
    expected = torch.zeros((11, 3), dtype=torch.float64)
    expected[:, 0] = torch.arange(11, dtype=torch.float64)
    assert torch.allclose(spaced.positions, expected, atol=1e-6)
    assert torch.allclose(spaced.normals, _vec(0.0, 1.0, 0.0).expand(11, 3))


def test_length_estimates() -> None:
    path = _straight_path((0, 0, 0), (10, 0, 0), (20, 0, 0), (30, 0, 0))
    resampler = Resampler(path)
    assert resampler.estimated_segment_length(1) == pytest.approx(15.0)
    assert resampler.estimated_length() == pytest.approx(45.0)
    assert path.estimated_length() == pytest.approx(45.0)


def test_disabled_segment_leaves_gap_but_keeps_spacing() -> None:
    path = _straight_path((0, 0, 0), (10, 0, 0), (20, 0, 0), (30, 0, 0))
    path.disable_segment(1)

    xs = path.spaced_points(1.0).positions[:, 0]

    assert xs.shape[0] == 21
    assert not bool(((xs > 10.5) & (xs < 20.5)).any())
    assert torch.allclose(xs, xs.round(), atol=1e-6)
    assert float(xs[-1]) == pytest.approx(30.0)


def test_spacing_and_resolution_are_clamped() -> None:
    path = _straight_path((0, 0, 0), (1, 0, 0))

    spaced = path.spaced_points(0.01, 0)

    assert len(spaced) == 11
    expected = torch.arange(11, dtype=torch.float64) * 0.1
    assert torch.allclose(spaced.positions[:, 0], expected, atol=1e-6)
    assert torch.allclose(spaced.positions, path.spaced_points(0.1, 1).positions)


def test_higher_resolution_stays_on_curve() -> None:
    path = BezierPath()
    for anchor in ((0.0, 0.0, 0.0), (10.0, 0.0, 0.0), (10.0, 0.0, 10.0)):
        path.add_segment(anchor)

    coarse = path.spaced_points(0.5, 1)
    fine = path.spaced_points(0.5, 4)

    steps = torch.linalg.norm(fine.positions[1:] - fine.positions[:-1], dim=-1)
    assert torch.allclose(steps, torch.full_like(steps, 0.5), atol=1e-2)
    assert abs(len(fine) - len(coarse)) <= 1


def test_normals_are_interpolated_between_anchors() -> None:
    path = _straight_path((0, 0, 0), (10, 0, 0), ground=_TiltedBeyondFive())
    spaced = path.spaced_points(1.0)

    start = _vec(0.0, 1.0, 0.0)
    end = _vec(1.0, 1.0, 0.0) / math.sqrt(2.0)
    assert torch.allclose(spaced.normals[0], start)
    assert torch.allclose(spaced.normals[5], torch.lerp(start, end, 0.5), atol=1e-2)
    assert torch.allclose(spaced.normals[-1], end, atol=1e-6)


def test_degenerate_path_has_no_spaced_points() -> None:
    path = BezierPath()
    path.add_segment((0.0, 0.0, 0.0))
    spaced = Resampler(path).spaced_points(1.0)
    assert len(spaced) == 0
    assert spaced.positions.shape == (0, 3)
    assert spaced.normals.shape == (0, 3)
    assert Resampler(path).estimated_length() == 0.0
