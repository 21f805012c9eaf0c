import pytest
import torch

from bzpath import BezierPath, TangentSolver


def _vec(x: float, y: float, z: float) -> torch.Tensor:
    return torch.tensor([x, y, z], dtype=torch.float64)


def _path_through(*anchors, looped: bool = False) -> BezierPath:
    path = BezierPath()
    for anchor in anchors:
        path.add_segment(anchor)
    path.looped = looped
    return path


def _assert_smooth_at(path: BezierPath, point_index: int) -> None:
    """Handles on both sides of an anchor point in opposite directions. / 锚点两侧的控制柄方向相反。"""

    anchor = path[point_index]
    before = path[path.loop_index(point_index - 1)] - anchor
    after = path[path.loop_index(point_index + 1)] - anchor
    assert torch.allclose(torch.linalg.cross(before, after), torch.zeros(3, dtype=torch.float64), atol=1e-9)
    assert float(torch.dot(before, after)) < 0.0


def test_collinear_anchors_get_half_distance_handles() -> None:
    path = _path_through((0.0, 0.0, 0.0), (10.0, 0.0, 0.0), (20.0, 0.0, 0.0))
    path.auto_tangent = True

    assert torch.allclose(path[2], _vec(5.0, 0.0, 0.0))
    assert torch.allclose(path[4], _vec(15.0, 0.0, 0.0))
    # Open ends point at the inner controls. / 开放端点指向内侧控制点。
    assert torch.allclose(path[1], _vec(2.5, 0.0, 0.0))
    assert torch.allclose(path[5], _vec(17.5, 0.0, 0.0))


def test_handle_lengths_follow_neighbour_distances() -> None:
    path = _path_through((0.0, 0.0, 0.0), (4.0, 0.0, 0.0), (4.0, 0.0, 10.0))
    path.auto_tangent = True

    anchor = path[3]
    assert float(torch.linalg.norm(path[2] - anchor)) == pytest.approx(2.0)
    assert float(torch.linalg.norm(path[4] - anchor)) == pytest.approx(5.0)
    _assert_smooth_at(path, 3)


def test_moving_anchor_keeps_curve_smooth() -> None:
    path = _path_through((0.0, 0.0, 0.0), (10.0, 0.0, 5.0), (20.0, 0.0, -5.0), (30.0, 0.0, 0.0))
    path.auto_tangent = True

    path.set_anchor_point(2, (18.0, 3.0, -8.0))

    assert torch.allclose(path.get_anchor_point(2), _vec(18.0, 3.0, -8.0))
    for point_index in (3, 6):
        _assert_smooth_at(path, point_index)


def test_add_segment_recalculates_with_automatic_tangents() -> None:
    path = _path_through((0.0, 0.0, 0.0), (10.0, 0.0, 0.0))
    path.auto_tangent = True
    path.add_segment((10.0, 0.0, 10.0))

    _assert_smooth_at(path, 3)
    assert torch.allclose(path[5], (path[6] + path[4]) * 0.5)


def test_looped_path_is_smooth_at_every_anchor() -> None:
    path = _path_through((0.0, 0.0, 0.0), (10.0, 0.0, 0.0), (10.0, 0.0, 10.0), (0.0, 0.0, 10.0), looped=True)
    path.auto_tangent = True

    for point_index in range(0, path.point_count, 3):
        _assert_smooth_at(path, point_index)


def test_split_with_automatic_tangents_keeps_anchors() -> None:
    path = _path_through((0.0, 0.0, 0.0), (10.0, 0.0, 0.0), (20.0, 0.0, 10.0))
    path.auto_tangent = True
    anchors = path.get_anchor_points()

    path.split_segment((5.0, 0.0, -1.0), 0)

    assert path.segment_count == 3
    new_anchors = path.get_anchor_points()
    assert torch.allclose(new_anchors[0], anchors[0])
    assert torch.allclose(new_anchors[2], anchors[1])
    assert torch.allclose(new_anchors[3], anchors[2])
    _assert_smooth_at(path, 3)


def test_solver_ignores_degenerate_paths() -> None:
    path = BezierPath()
    solver = TangentSolver(path)
    solver.recalculate_all()
    solver.recalculate_around(0)
    solver.fix_open_ends()
    path.add_segment((1.0, 0.0, 0.0))
    solver.recalculate_around(0)
    assert path.point_count == 1
