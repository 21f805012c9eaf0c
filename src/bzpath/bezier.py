"""Bézier curve evaluation. / 贝塞尔曲线求值。

A path is a chain of cubic Bézier segments that share their end anchors. /
路径由共享端点锚点的三次贝塞尔段首尾相连组成。
This module holds the stateless part of the mathematics: linear, quadratic and cubic evaluation
written as nested linear interpolation (de Casteljau), plus a small container for batches of segments. /
本模块包含无状态的数学部分：以嵌套线性插值（de Casteljau）形式实现的一次、二次与三次求值，以及批量线段的轻量容器。
All operations use PyTorch tensors so paths can be batched and moved between devices freely. /
所有运算均基于 PyTorch 张量，便于批处理以及在设备之间迁移。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import torch

Tensor = torch.Tensor
Scalar = Union[float, Tensor]


def _weight(t: Scalar) -> Scalar:
    # Parameter tensors gain a trailing axis so they broadcast over coordinates. / 参数张量增加末尾维度以便在坐标维上广播。
    if isinstance(t, Tensor) and t.dim() > 0:
        return t.unsqueeze(-1)
    return t


def _lerp(a: Tensor, b: Tensor, w: Scalar) -> Tensor:
    return a + (b - a) * w


def evaluate_linear(a: Tensor, b: Tensor, t: Scalar) -> Tensor:
    """Point on the segment ``a -> b``. / 线段 ``a -> b`` 上的点。"""

    return _lerp(a, b, _weight(t))


def evaluate_quadratic(a: Tensor, b: Tensor, c: Tensor, t: Scalar) -> Tensor:
    """Quadratic Bézier with control point ``b``. / 以 ``b`` 为控制点的二次贝塞尔曲线。"""

    w = _weight(t)
    return _lerp(_lerp(a, b, w), _lerp(b, c, w), w)


def evaluate_cubic(a: Tensor, b: Tensor, c: Tensor, d: Tensor, t: Scalar) -> Tensor:
    """Cubic Bézier through anchors ``a`` and ``d``. / 经过锚点 ``a`` 与 ``d`` 的三次贝塞尔曲线。

    ``t`` is not clamped; values outside ``[0, 1]`` extrapolate the curve. /
    ``t`` 不做截断，超出 ``[0, 1]`` 的取值会对曲线外推。
    """

    p0 = evaluate_quadratic(a, b, c, t)
    p1 = evaluate_quadratic(b, c, d, t)
    return _lerp(p0, p1, _weight(t))


@dataclass
class CubicBezier:
    """Light-weight container for batches of cubic Bézier control points. / 用于批量存储三次贝塞尔控制点的轻量级容器。

    The control points are stored in the order ``(p0, p1, p2, p3)``; ``p0`` and ``p3`` are anchors.
    / 控制点按照 ``(p0, p1, p2, p3)`` 的顺序存储，其中 ``p0`` 与 ``p3`` 为锚点。
    The tensor layout is ``(..., 4, D)`` so segments of a path can be evaluated together in any dimension.
    / 张量布局为 ``(..., 4, D)``，因此路径中的多个线段可在任意维度下一并求值。
    """

    control_points: Tensor

    def __post_init__(self) -> None:
        if self.control_points.dim() < 2 or self.control_points.shape[-2] != 4:
            raise ValueError(
                "CubicBezier.control_points must have shape (..., 4, D). "
                f"Received {tuple(self.control_points.shape)}"
            )

    @property
    def device(self) -> torch.device:
        return self.control_points.device

    @property
    def dtype(self) -> torch.dtype:
        return self.control_points.dtype

    def evaluate(self, t: Tensor) -> Tensor:
        """Evaluate positions along the curve for parameter ``t``. / 计算参数 ``t`` 对应的曲线上位置。

        Parameters
        ----------
        t:
            A tensor of shape ``(...,)`` supporting broadcasting against the batch dimensions.
            / 形状为 ``(...,)`` 的张量，支持与控制点批次维广播。
        """

        cp = self.control_points
        return evaluate_cubic(cp[..., 0, :], cp[..., 1, :], cp[..., 2, :], cp[..., 3, :], t)

    def estimated_length(self) -> Tensor:
        """Cheap length estimate: chord plus half the control polygon. / 廉价的长度估计：弦长加控制多边形长度的一半。

        This is not the exact arc length, only a bound-like heuristic used to pick sampling densities.
        / 该值并非精确弧长，仅用于选择采样密度的启发式估计。
        """

        cp = self.control_points
        chord = torch.linalg.norm(cp[..., 3, :] - cp[..., 0, :], dim=-1)
        polygon = torch.linalg.norm(cp[..., 1:, :] - cp[..., :-1, :], dim=-1).sum(dim=-1)
        return chord + 0.5 * polygon

    def sample(self, divisions: int) -> Tuple[Tensor, Tensor, Tensor]:
        """Evaluate a single ``(4, D)`` segment at ``divisions + 1`` evenly spaced parameters. / 在 ``divisions + 1`` 个均匀参数处对单个线段求值。

        Returns the parameters, the positions and the distance travelled from the previous sample.
        / 返回参数、位置以及与前一个采样点之间的距离。
        """

        if divisions < 1:
            raise ValueError("divisions must be at least 1")

        steps = torch.arange(divisions + 1, device=self.device, dtype=self.dtype)
        t_values = steps / divisions
        positions = self.evaluate(t_values)
        # Forward differences; the first sample has travelled nothing yet. / 前向差分；首个采样点尚未移动。
        deltas = positions[..., 1:, :] - positions[..., :-1, :]
        lengths = torch.linalg.norm(deltas, dim=-1)
        lengths = torch.nn.functional.pad(lengths, (1, 0), value=0.0)
        return t_values, positions, lengths


__all__ = ["CubicBezier", "evaluate_cubic", "evaluate_linear", "evaluate_quadratic"]
