"""Automatic control points. / 自动控制点。

When automatic tangents are enabled the control points are derived from the anchors alone: each anchor
gets a handle parallel to the bisector of the directions toward its neighbours, and each side of the
handle reaches half way to the corresponding neighbour. /
启用自动切线时，控制点完全由锚点推导：每个锚点的控制柄与指向相邻锚点方向的角平分线平行，两侧控制柄长度分别为到对应相邻锚点距离的一半。
This keeps the curve tangent-continuous through every anchor without any user input. /
这样无需用户干预即可保证曲线在每个锚点处切线连续。
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import torch

if TYPE_CHECKING:
    from .path import BezierPath

Tensor = torch.Tensor


def _normalize(vector: Tensor) -> Tensor:
    length = torch.linalg.norm(vector)
    if length < 1e-12:
        return torch.zeros_like(vector)
    return vector / length


class TangentSolver:
    """Recomputes control points of a :class:`~bzpath.path.BezierPath`. / 重新计算 :class:`~bzpath.path.BezierPath` 的控制点。"""

    def __init__(self, path: "BezierPath"):
        self.path = path

    def recalculate_all(self) -> None:
        path = self.path
        if path.segment_count < 1:
            return
        for index in range(0, path.point_count, 3):
            self.recalculate_anchor(index)
        self.fix_open_ends()

    def recalculate_around(self, anchor_index: int) -> None:
        """Recompute anchor ``anchor_index`` and both neighbouring anchors. / 重新计算第 ``anchor_index`` 个锚点及其两侧相邻锚点。

        Moving one anchor changes the bisector of its neighbours too, so the update reaches one anchor
        further in each direction. / 移动一个锚点也会改变相邻锚点的角平分线，因此更新会向两侧各多传播一个锚点。
        """

        path = self.path
        if path.segment_count < 1:
            return

        center = anchor_index * 3
        for index in range(center - 3, center + 4, 3):
            if 0 <= index < path.point_count or path._looped:
                self.recalculate_anchor(path.loop_index(index))
        self.fix_open_ends()

    def recalculate_anchor(self, point_index: int) -> None:
        """Place the two controls of the anchor at ``point_index``. / 放置位于 ``point_index`` 的锚点的两个控制点。"""

        path = self.path
        if path.segment_count < 1:
            return

        points = path._points
        count = len(points)
        looped = path._looped
        anchor = points[point_index]
        direction = torch.zeros_like(anchor)
        neighbour_distances = [0.0, 0.0]

        # A missing neighbour on an open path simply drops its term. / 开放路径上缺失的相邻锚点直接省略其贡献。
        if point_index - 3 >= 0 or looped:
            offset = points[path.loop_index(point_index - 3)] - anchor
            direction = direction + _normalize(offset)
            neighbour_distances[0] = float(torch.linalg.norm(offset))

        if point_index + 3 < count or looped:
            offset = points[path.loop_index(point_index + 3)] - anchor
            direction = direction - _normalize(offset)
            neighbour_distances[1] = -float(torch.linalg.norm(offset))

        direction = _normalize(direction)

        for side in range(2):
            control_index = point_index + side * 2 - 1
            if 0 <= control_index < count or looped:
                points[path.loop_index(control_index)] = anchor + 0.5 * neighbour_distances[side] * direction

    def fix_open_ends(self) -> None:
        """Point the first and last handles at their inner controls. / 令首尾控制柄指向其内侧控制点。"""

        path = self.path
        if path._looped or path.segment_count < 1:
            return

        points = path._points
        points[1] = (points[0] + points[2]) * 0.5
        points[-2] = (points[-1] + points[-3]) * 0.5


__all__ = ["TangentSolver"]
