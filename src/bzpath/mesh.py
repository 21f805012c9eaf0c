"""Ribbon meshes along a path. / 沿路径生成的带状网格。

Each spaced point becomes a pair of vertices offset left and right by half the ribbon width, and
consecutive pairs are joined by a quad made of two triangles. /
每个等距点生成一对左右偏移半个带宽的顶点，相邻顶点对之间以两个三角形组成的四边形相连。
The mesh is returned as plain tensors; rendering or storing it is left to a :class:`MeshSink`
supplied by the host. / 网格以普通张量形式返回，渲染或保存交由宿主提供的 :class:`MeshSink` 完成。
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Protocol

import torch

from .ground import UP
from .resample import Resampler

if TYPE_CHECKING:
    from .path import BezierPath

Tensor = torch.Tensor

logger = logging.getLogger(__name__)

# Texture units per ribbon length unit before tiling. / 平铺前每单位带长对应的纹理单位。
UV_SCALE = 0.05


class MeshSink(Protocol):
    """Consumer of finished meshes, e.g. a renderer or an exporter. / 网格的使用方，例如渲染器或导出器。"""

    def consume(self, vertices: Tensor, uv: Tensor, triangles: Tensor) -> None:
        ...


@dataclass
class MeshConfig:
    """Ribbon parameters shared across mesh builds. / 跨网格构建共享的带状网格参数。"""

    width: float = 3.0
    spacing: float = 0.1  # Distance between vertex pairs / 顶点对之间的距离
    resolution: int = 1
    tiling: float = 1.0  # Texture repeats along the ribbon / 纹理沿带方向的重复次数

    def validate(self) -> None:
        if not math.isfinite(self.width) or self.width <= 0:
            raise ValueError("width must be a positive finite number")
        if self.spacing <= 0:
            raise ValueError("spacing must be positive")
        if self.resolution < 1:
            raise ValueError("resolution must be at least 1")
        if not math.isfinite(self.tiling):
            raise ValueError("tiling must be finite")


@dataclass
class RibbonMesh:
    """Flat vertex, UV and triangle buffers. / 扁平的顶点、UV 与三角形缓冲区。"""

    vertices: Tensor  # (2N, 3) shape / 张量形状 (2N, 3)
    uv: Tensor  # (2N, 2) shape / 张量形状 (2N, 2)
    triangles: Tensor  # (T, 3) int64 vertex indices / int64 顶点下标
    normals: Tensor  # (2N, 3) interpolated ground normals / 插值得到的地面法向量

    @classmethod
    def empty(cls, dtype: torch.dtype = torch.float64, device: Optional[torch.device] = None) -> "RibbonMesh":
        return cls(
            vertices=torch.empty((0, 3), dtype=dtype, device=device),
            uv=torch.empty((0, 2), dtype=dtype, device=device),
            triangles=torch.empty((0, 3), dtype=torch.long, device=device),
            normals=torch.empty((0, 3), dtype=dtype, device=device),
        )

    @property
    def is_empty(self) -> bool:
        return self.vertices.shape[0] == 0

    def emit(self, sink: MeshSink) -> None:
        sink.consume(self.vertices, self.uv, self.triangles)


def _right_vector(forward: Tensor) -> Tensor:
    """Right axis of a look rotation toward ``forward`` with world up. / 以世界向上方向朝 ``forward`` 观察时的右轴。"""

    up = torch.tensor(UP, dtype=forward.dtype, device=forward.device)
    right = torch.linalg.cross(up, forward)
    length = torch.linalg.norm(right)
    if length < 1e-9:
        # Looking straight up or down, or no direction at all. / 正上方、正下方或没有方向。
        return torch.tensor((1.0, 0.0, 0.0), dtype=forward.dtype, device=forward.device)
    return right / length


class MeshBuilder:
    """Builds ribbon meshes for a :class:`~bzpath.path.BezierPath`. / 为 :class:`~bzpath.path.BezierPath` 构建带状网格。"""

    def __init__(self, path: "BezierPath"):
        self.path = path
        self.resampler = Resampler(path)

    def build(self, config: MeshConfig) -> RibbonMesh:
        config.validate()
        return self.create_mesh(config.width, config.spacing, config.resolution, config.tiling)

    def create_mesh(self, width: float, spacing: float, resolution: int = 1, tiling: float = 1.0) -> RibbonMesh:
        """Ribbon of ``width`` following the path. / 沿路径、宽度为 ``width`` 的带状网格。

        Where a disabled segment leaves a gap wider than twice the spacing, the quad across the gap is not
        emitted so the ribbon visibly breaks; vertex indices are still allocated for the point before it.
        / 当禁用线段留下超过两倍间距的缺口时，不会生成跨越缺口的四边形，带状网格因此出现可见的断开；但缺口前的点仍会分配顶点下标。
        """

        path = self.path
        spaced = self.resampler.spaced_points(spacing, resolution)
        count = len(spaced)
        if count < 2:
            return RibbonMesh.empty(dtype=path.dtype, device=path.device)

        looped = path.looped
        positions = spaced.positions
        # Segment each point leads into, judged by its nearest anchor. / 每个点所通往的线段，由其最近的锚点判定。
        leading = [path.closest_anchor_point(point) // 3 for point in positions]
        # A gap point jumps over a disabled segment to its successor. / 缺口点越过禁用线段连接到其后继点。
        gaps = [
            (i < count - 1 or looped)
            and path.is_segment_disabled(leading[i])
            and float(torch.linalg.norm(positions[(i + 1) % count] - positions[i])) > spacing * 2.0
            for i in range(count)
        ]

        vertex_count = count * 2
        vertices = torch.empty((vertex_count, 3), dtype=path.dtype, device=path.device)
        uv = torch.empty((vertex_count, 2), dtype=path.dtype, device=path.device)
        normals = spaced.normals.repeat_interleave(2, dim=0)
        triangles: List[List[int]] = []
        v_scale = count * spacing * UV_SCALE * tiling

        for i in range(count):
            has_next = i < count - 1 or looped
            has_previous = i > 0 or looped
            next_index = (i + 1) % count
            previous_index = (i - 1 + count) % count
            point = positions[i]

            # Directions across a gap are left out of the frame. / 跨越缺口的方向不参与构建坐标系。
            forward = torch.zeros_like(point)
            if has_next and not gaps[i]:
                forward = forward + (positions[next_index] - point)
            if has_previous and not gaps[previous_index]:
                forward = forward + (point - positions[previous_index])
            length = torch.linalg.norm(forward)
            if length > 1e-12:
                forward = forward / length

            offset = 0.5 * width * _right_vector(forward)
            vertex = i * 2
            vertices[vertex] = point - offset
            vertices[vertex + 1] = point + offset

            # Tent profile: v grows toward the middle of the ribbon and falls back at the end. / 帐篷形分布：v 向带中部增大，在末端回落。
            position_in_path = i / (count - 1)
            v = (1.0 - abs(2.0 * position_in_path - 1.0)) * v_scale
            uv[vertex] = torch.tensor((0.0, v), dtype=uv.dtype, device=uv.device)
            uv[vertex + 1] = torch.tensor((1.0, v), dtype=uv.dtype, device=uv.device)

            if has_next and not gaps[i]:
                following = (vertex + 2) % vertex_count
                following_right = (vertex + 3) % vertex_count
                triangles.append([vertex, following, vertex + 1])
                triangles.append([vertex + 1, following, following_right])

        triangle_tensor = torch.tensor(triangles, dtype=torch.long, device=path.device).reshape(-1, 3)
        logger.debug("Built ribbon mesh: %d vertices, %d triangles", vertex_count, triangle_tensor.shape[0])
        return RibbonMesh(vertices=vertices, uv=uv, triangles=triangle_tensor, normals=normals)


__all__ = ["MeshBuilder", "MeshConfig", "MeshSink", "RibbonMesh"]
