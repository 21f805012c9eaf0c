"""Arc-length resampling. / 按弧长重采样。

Cubic segments are not parameterised by arc length: evenly spaced ``t`` values bunch up where the
curve slows down. The resampler walks each segment in small parameter steps, accumulates the travelled
distance and emits a point every ``spacing`` units, pulling the sample back by the overshoot so that
points stay evenly spaced along the curve. /
三次线段并非按弧长参数化：在曲线“减速”的位置，均匀的 ``t`` 值会聚集在一起。
重采样器以很小的参数步长遍历每段曲线，累计行进距离，每经过 ``spacing`` 个单位输出一个点，并将采样点按超出量回退，使输出点沿曲线均匀分布。
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

import torch

from .bezier import CubicBezier

if TYPE_CHECKING:
    from .path import BezierPath

Tensor = torch.Tensor

logger = logging.getLogger(__name__)

MIN_SPACING = 0.1
# Steps per unit of estimated segment length at resolution 1. / 分辨率为 1 时每单位估计长度的步数。
STEPS_PER_UNIT = 10.0
# Rounding slack when comparing travelled distance to the spacing. / 比较行进距离与间距时允许的舍入误差。
SPACING_TOLERANCE = 1e-6


@dataclass
class SpacedPoints:
    """Evenly spaced points and their interpolated ground normals. / 均匀分布的点及其插值得到的地面法向量。"""

    positions: Tensor  # (N, 3) shape / 张量形状 (N, 3)
    normals: Tensor  # (N, 3) shape / 张量形状 (N, 3)

    def __len__(self) -> int:
        return self.positions.shape[0]


def _direction(origin: Tensor, target: Tensor) -> Tensor:
    offset = target - origin
    length = torch.linalg.norm(offset)
    if length < 1e-12:
        return torch.zeros_like(offset)
    return offset / length


class Resampler:
    """Samples a :class:`~bzpath.path.BezierPath` by arc length. / 按弧长对 :class:`~bzpath.path.BezierPath` 采样。"""

    def __init__(self, path: "BezierPath"):
        self.path = path

    def segment(self, index: int) -> CubicBezier:
        return CubicBezier(self.path.get_segment_points(index))

    def estimated_segment_length(self, index: int) -> float:
        """Chord length plus half the control polygon length of segment ``index``. / 第 ``index`` 段的弦长加控制多边形长度的一半。"""

        if self.path.segment_count < 1:
            return 0.0
        return float(self.segment(index).estimated_length())

    def estimated_length(self) -> float:
        return sum(self.estimated_segment_length(index) for index in range(self.path.segment_count))

    def spaced_points(self, spacing: float, resolution: int = 1) -> SpacedPoints:
        """Walk the path and emit a point every ``spacing`` units. / 沿路径行进，每隔 ``spacing`` 个单位输出一个点。

        Parameters
        ----------
        spacing:
            Target distance between consecutive points, at least ``0.1``. / 相邻点之间的目标距离，最小为 ``0.1``。
        resolution:
            Multiplier on the number of parameter steps per segment, at least ``1``.
            / 每段参数步数的倍率，最小为 ``1``。

        Points falling on disabled segments are skipped, but the distance bookkeeping still advances so
        spacing stays consistent on both sides of the gap. /
        落在禁用线段上的点会被跳过，但距离统计仍会推进，从而保证缺口两侧的间距一致。
        """

        path = self.path
        if path.segment_count < 1:
            empty = torch.empty((0, 3), dtype=path.dtype, device=path.device)
            return SpacedPoints(positions=empty, normals=empty.clone())

        spacing = max(float(spacing), MIN_SPACING)
        resolution = max(int(resolution), 1)

        last_point = path[0]
        positions: List[Tensor] = [last_point]
        normals: List[Tensor] = [path.get_anchor_point_normal(0)]
        travelled = 0.0

        for index in range(path.segment_count):
            curve = self.segment(index)
            divisions = max(math.ceil(float(curve.estimated_length()) * resolution * STEPS_PER_UNIT), 1)
            t_values, samples, steps = curve.sample(divisions)
            # The first sample continues from wherever the previous segment stopped. / 首个采样点承接上一段结束的位置。
            steps[0] = torch.linalg.norm(samples[0] - last_point)

            disabled = path.is_segment_disabled(index)
            start_normal = path.get_anchor_point_normal(index)
            end_normal = path.get_anchor_point_normal(index + 1)

            for t, sample, step in zip(t_values.tolist(), samples, steps.tolist()):
                travelled += step
                while travelled + SPACING_TOLERANCE >= spacing:
                    overshoot = max(travelled - spacing, 0.0)
                    point = sample + _direction(sample, last_point) * overshoot
                    if not disabled:
                        positions.append(point)
                        normals.append(torch.lerp(start_normal, end_normal, t))
                    travelled = overshoot
                    last_point = point
                last_point = sample

        logger.debug("Resampled %d segments into %d points (spacing=%g)", path.segment_count, len(positions), spacing)
        return SpacedPoints(positions=torch.stack(positions), normals=torch.stack(normals))


__all__ = ["Resampler", "SpacedPoints"]
