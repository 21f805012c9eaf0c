"""Piecewise cubic Bézier path. / 分段三次贝塞尔路径。

The path stores a single flat list of points. Every third point (``index % 3 == 0``) is an *anchor*
that the curve passes through; the two points between consecutive anchors are *control points*. /
路径以一个扁平列表保存所有点。每隔三个点（``index % 3 == 0``）为曲线经过的 *锚点*，相邻锚点之间的两个点为 *控制点*。
Segment ``i`` is the window ``[3i, 3i + 1, 3i + 2, 3i + 3]`` and shares its anchors with its neighbours. /
第 ``i`` 段为窗口 ``[3i, 3i + 1, 3i + 2, 3i + 3]``，并与相邻线段共享锚点。

An open path with ``k`` segments holds ``3k + 1`` points. Closing the loop appends two control points
so the last segment wraps back to anchor ``0`` and the path holds ``3k`` points. /
含 ``k`` 段的开放路径有 ``3k + 1`` 个点。闭合路径时会追加两个控制点，使最后一段回到锚点 ``0``，此时共有 ``3k`` 个点。
All index wrapping goes through :func:`loop_index`; it is the only place where open and looped
topologies differ in arithmetic. / 所有下标回绕都经由 :func:`loop_index` 完成，这是开放与闭合拓扑在下标运算上唯一的区别。
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence, Set, Union

import torch

from .ground import UP, GroundProbeConfig, GroundQuery, probe_normal
from .mesh import MeshBuilder, RibbonMesh
from .resample import Resampler, SpacedPoints
from .state import STATE_VERSION, PathState
from .tangents import TangentSolver

Tensor = torch.Tensor
VectorLike = Union[Tensor, Sequence[float]]

logger = logging.getLogger(__name__)

DEFAULT_DTYPE = torch.float64

# Y-up axes used by the default segment. / 默认线段使用的 Y 轴向上坐标轴。
FORWARD = (0.0, 0.0, 1.0)
RIGHT = (1.0, 0.0, 0.0)

MIN_OPEN_SEGMENTS = 2
MIN_LOOPED_SEGMENTS = 3


def loop_index(index: int, count: int) -> int:
    """Wrap ``index`` into ``[0, count)``; negative indices are allowed. / 将 ``index`` 回绕到 ``[0, count)``，允许负数。"""

    if count < 1:
        raise ValueError("Cannot wrap an index into an empty point buffer")
    return index % count


def _normalize(vector: Tensor) -> Tensor:
    length = torch.linalg.norm(vector)
    if length < 1e-12:
        return torch.zeros_like(vector)
    return vector / length


class BezierPath:
    """Editable chain of cubic Bézier segments. / 可编辑的三次贝塞尔线段链。

    Parameters
    ----------
    ground:
        Optional ray query used to compute anchor normals. Without it every normal is the up vector.
        / 可选的射线查询接口，用于计算锚点法向量；缺省时所有法向量均为向上向量。
    probe:
        How the ground is probed around anchors. / 在锚点周围探测地面的方式。
    dtype, device:
        Tensor layout of stored points. / 所存储点的张量类型与设备。
    """

    def __init__(
        self,
        ground: Optional[GroundQuery] = None,
        *,
        probe: Optional[GroundProbeConfig] = None,
        dtype: torch.dtype = DEFAULT_DTYPE,
        device: Optional[torch.device] = None,
    ):
        self.ground = ground
        self.probe = probe or GroundProbeConfig()
        self.probe.validate()
        self.dtype = dtype
        self.device = device or torch.device("cpu")
        self.disabled_segments: Set[int] = set()
        self.tangents = TangentSolver(self)

        self._points: List[Tensor] = []
        self._normals: List[Tensor] = []
        self._normals_point_count = -1
        self._looped = False
        self._auto_tangent = False

    @classmethod
    def centered(cls, center: VectorLike = (0.0, 0.0, 0.0), ground: Optional[GroundQuery] = None, **kwargs) -> "BezierPath":
        """Build a path holding one default segment around ``center``. / 以 ``center`` 为中心构建含一段默认线段的路径。

        The segment runs from one unit behind the center to one unit ahead of it along ``+Z``.
        / 该线段沿 ``+Z`` 方向，从中心后方一个单位延伸到前方一个单位。
        """

        path = cls(ground, **kwargs)
        center = path._vector(center)
        forward = path._vector(FORWARD)
        right = path._vector(RIGHT)
        path._points = [
            center - forward,
            center + (-forward - right) * 0.5,
            center + (forward + right) * 0.5,
            center + forward,
        ]
        return path

    @classmethod
    def from_points(
        cls,
        points: Union[Tensor, Iterable[VectorLike]],
        *,
        looped: bool = False,
        auto_tangent: bool = False,
        ground: Optional[GroundQuery] = None,
        **kwargs,
    ) -> "BezierPath":
        """Build a path from an explicit point buffer. / 由显式点缓冲区构建路径。

        Open paths need ``3k + 1`` points (``k >= 1``) and looped paths ``3k`` points (``k >= 2``).
        / 开放路径需要 ``3k + 1`` 个点（``k >= 1``），闭合路径需要 ``3k`` 个点（``k >= 2``）。
        """

        path = cls(ground, **kwargs)
        buffer = [path._vector(point) for point in points]
        count = len(buffer)
        expected_remainder = 0 if looped else 1
        if count and (count % 3 != expected_remainder or count < (6 if looped else 4)):
            raise ValueError(
                f"A {'looped' if looped else 'open'} path cannot hold {count} points. "
                f"Expected 3k{'' if looped else ' + 1'} points with at least one segment."
            )
        path._points = buffer
        path._looped = looped and count > 0
        if auto_tangent:
            path.auto_tangent = True
        return path

    @classmethod
    def from_state(cls, state: PathState, ground: Optional[GroundQuery] = None, **kwargs) -> "BezierPath":
        """Restore a path from a snapshot. / 从快照恢复路径。"""

        state.validate()
        path = cls.from_points(state.points, looped=state.looped, ground=ground, **kwargs)
        # Stored controls are trusted; the flag is restored without recomputing them. / 直接信任已保存的控制点，恢复标志时不重新计算。
        path._auto_tangent = state.auto_tangent
        path.disabled_segments = set(state.disabled_segments)
        return path

    def to_state(self) -> PathState:
        """Snapshot of everything needed to rebuild the path. / 重建路径所需全部信息的快照。"""

        return PathState(
            version=STATE_VERSION,
            points=[point.tolist() for point in self._points],
            looped=self._looped,
            auto_tangent=self._auto_tangent,
            disabled_segments=sorted(self.disabled_segments),
        )

    # ------------------------------------------------------------------
    # Counts and indexing / 计数与下标
    # ------------------------------------------------------------------

    @property
    def segment_count(self) -> int:
        return len(self._points) // 3

    @property
    def point_count(self) -> int:
        return len(self._points)

    @property
    def points(self) -> Tensor:
        """Copy of the point buffer as an ``(N, 3)`` tensor. / 以 ``(N, 3)`` 张量形式返回点缓冲区的副本。"""

        if not self._points:
            return torch.empty((0, 3), dtype=self.dtype, device=self.device)
        return torch.stack(self._points)

    def is_valid(self) -> bool:
        """Whether the path holds at least one segment. / 路径是否至少包含一段。"""

        return self.segment_count >= 1

    @staticmethod
    def is_anchor_point(index: int) -> bool:
        return index % 3 == 0

    def loop_index(self, index: int) -> int:
        return loop_index(index, self.point_count)

    def __getitem__(self, index: int) -> Tensor:
        return self._points[index].clone()

    def __setitem__(self, index: int, value: VectorLike) -> None:
        value = self._vector(value)
        if torch.equal(self._points[index], value):
            return
        if self.is_anchor_point(index):
            self.set_anchor_point(index // 3, value)
            return
        if self._auto_tangent:
            logger.debug("Ignoring write to control point %d while tangents are automatic", index)
            return

        self._points[index] = value

        next_is_anchor = self.is_anchor_point(index + 1)
        mirrored_index = index + 2 if next_is_anchor else index - 2
        anchor_index = index + 1 if next_is_anchor else index - 1
        if not (0 <= mirrored_index < self.point_count or self._looped):
            return

        anchor_index = self.loop_index(anchor_index)
        mirrored_index = self.loop_index(mirrored_index)
        anchor = self._points[anchor_index]
        distance = torch.linalg.norm(self._points[mirrored_index] - anchor)
        self._points[mirrored_index] = anchor + _normalize(anchor - value) * distance

    def get_segment_points(self, index: int) -> Tensor:
        """The 4 points of segment ``index`` as a ``(4, 3)`` tensor. / 以 ``(4, 3)`` 张量返回第 ``index`` 段的 4 个点。"""

        if self.segment_count < 1:
            return torch.empty((0, 3), dtype=self.dtype, device=self.device)

        start = index * 3
        return torch.stack(
            [
                self._points[start],
                self._points[start + 1],
                self._points[start + 2],
                self._points[self.loop_index(start + 3)],
            ]
        )

    # ------------------------------------------------------------------
    # Anchors / 锚点
    # ------------------------------------------------------------------

    def get_anchor_point(self, index: int) -> Tensor:
        if self.point_count < 1:
            return torch.zeros(3, dtype=self.dtype, device=self.device)
        return self._points[self.loop_index(index * 3)].clone()

    def get_anchor_points(self) -> Tensor:
        if not self._points:
            return torch.empty((0, 3), dtype=self.dtype, device=self.device)
        return torch.stack(self._points[::3])

    def get_anchor_point_normal(self, index: int) -> Tensor:
        """Ground normal at anchor ``index``, rebuilt lazily when stale. / 第 ``index`` 个锚点处的地面法向量，过期时惰性重建。"""

        if self.point_count < 1:
            return self._vector(UP)
        if self._should_refresh_normals:
            self.refresh_anchor_normals()
        return self._normals[self.loop_index(index * 3) // 3]

    def set_anchor_point(self, index: int, value: VectorLike) -> None:
        """Move anchor ``index`` and update its handles. / 移动第 ``index`` 个锚点并更新其控制柄。

        With automatic tangents the controls around the anchor are recomputed; otherwise the two adjacent
        controls follow the anchor rigidly. / 自动切线模式下会重新计算锚点周围的控制点；否则相邻两个控制点随锚点整体平移。
        """

        index = self.loop_index(index * 3)
        value = self._vector(value)
        delta = value - self._points[index]
        self._points[index] = value

        if self._should_refresh_normals:
            self.refresh_anchor_normals()
        else:
            self._normals[index // 3] = self._probe(value)

        if self._auto_tangent:
            self.tangents.recalculate_around(index // 3)
            return

        if index + 1 < self.point_count or self._looped:
            following = self.loop_index(index + 1)
            self._points[following] = self._points[following] + delta
        if index - 1 > -1 or self._looped:
            preceding = self.loop_index(index - 1)
            self._points[preceding] = self._points[preceding] + delta

    def offset_all_points(self, offset: VectorLike) -> None:
        offset = self._vector(offset)
        self._points = [point + offset for point in self._points]
        self._normals_point_count = -1

    # ------------------------------------------------------------------
    # Topology edits / 拓扑编辑
    # ------------------------------------------------------------------

    def add_segment(self, position: VectorLike) -> None:
        """Append a new anchor at ``position``. / 在 ``position`` 处追加新锚点。

        The first call only places the starting anchor. The second call adds two controls at the midpoint
        of the first segment. Later calls mirror the previous exit handle so the joint stays smooth. /
        第一次调用只放置起始锚点；第二次调用在首段中点处添加两个控制点；之后的调用会镜像上一段的出射控制柄，使连接处保持平滑。
        """

        position = self._vector(position)
        points = self._points
        if not points:
            points.append(position)
            logger.debug("Started path at %s", position.tolist())
            return

        if len(points) == 1:
            points.append((points[-1] + position) * 0.5)
            points.append((points[0] + position) * 0.5)
        else:
            points.append(points[-1] * 2.0 - points[-2])
            points.append((points[-1] + position) * 0.5)
        points.append(position)

        if self._auto_tangent:
            self.tangents.recalculate_around((len(points) - 1) // 3)
        self.refresh_anchor_normals()
        logger.debug("Added segment %d ending at %s", self.segment_count - 1, position.tolist())

    def split_segment(self, position: VectorLike, index: int) -> None:
        """Insert a new anchor at ``position`` inside segment ``index``. / 在第 ``index`` 段内部 ``position`` 处插入新锚点。"""

        if self.segment_count < 1:
            return

        position = self._vector(position)
        zero = torch.zeros(3, dtype=self.dtype, device=self.device)
        insert_at = index * 3 + 2
        self._points[insert_at:insert_at] = [zero, position, zero.clone()]

        anchor = index * 3 + 3
        if self._auto_tangent:
            self.tangents.recalculate_around(anchor // 3)
        else:
            self.tangents.recalculate_anchor(anchor)
        logger.debug("Split segment %d at %s", index, position.tolist())

    def remove_segment(self, anchor_point_index: int) -> bool:
        """Remove the anchor at point index ``anchor_point_index`` with its handles. / 删除位于点下标 ``anchor_point_index`` 的锚点及其控制柄。

        Returns ``False`` without touching the path when the index is not an anchor of this path, or when
        fewer than two segments (three when looped) would remain. /
        若下标不是本路径的锚点，或删除后开放路径少于两段（闭合路径少于三段），则不做修改并返回 ``False``。
        """

        if not 0 <= anchor_point_index < len(self._points) or not self.is_anchor_point(anchor_point_index):
            logger.debug("Refusing to remove point %d: not an anchor", anchor_point_index)
            return False

        minimum = MIN_LOOPED_SEGMENTS if self._looped else MIN_OPEN_SEGMENTS
        if self.segment_count - 1 < minimum:
            logger.debug(
                "Refusing to remove anchor %d: only %d segments left", anchor_point_index, self.segment_count
            )
            return False

        points = self._points
        if anchor_point_index == 0:
            if self._looped:
                points[-1] = points[2]
            del points[0:3]
        elif anchor_point_index == len(points) - 1 and not self._looped:
            del points[anchor_point_index - 2 : anchor_point_index + 1]
        else:
            del points[anchor_point_index - 1 : anchor_point_index + 2]

        if self._auto_tangent:
            self.tangents.recalculate_all()
        logger.debug("Removed anchor %d, %d segments left", anchor_point_index, self.segment_count)
        return True

    @property
    def looped(self) -> bool:
        if self.segment_count < 1:
            return False
        return self._looped

    @looped.setter
    def looped(self, value: bool) -> None:
        self.set_looped(value)

    def set_looped(self, value: bool) -> bool:
        """Close or open the path. Returns whether the topology changed. / 闭合或打开路径，返回拓扑是否发生变化。"""

        value = bool(value)
        if self.segment_count < 1 or self._looped == value:
            return False

        points = self._points
        if value:
            points.append(points[-1] * 2.0 - points[-2])
            points.append(points[0] * 2.0 - points[1])
            self._looped = True
            if self._auto_tangent:
                self.tangents.recalculate_anchor(0)
                self.tangents.recalculate_anchor(len(points) - 3)
        else:
            if len(points) - 2 < 4:
                logger.debug("Refusing to open a path of %d points", len(points))
                return False
            del points[-2:]
            self._looped = False
            if self._auto_tangent:
                self.tangents.fix_open_ends()

        logger.debug("Path %s", "closed" if value else "opened")
        return True

    @property
    def auto_tangent(self) -> bool:
        return self._auto_tangent

    @auto_tangent.setter
    def auto_tangent(self, value: bool) -> None:
        value = bool(value)
        if self._auto_tangent == value:
            return
        self._auto_tangent = value
        if value:
            self.tangents.recalculate_all()

    # ------------------------------------------------------------------
    # Disabled segments / 禁用线段
    # ------------------------------------------------------------------

    def is_segment_disabled(self, index: int) -> bool:
        return index in self.disabled_segments

    def enable_segment(self, index: int) -> None:
        self.disabled_segments.discard(index)

    def disable_segment(self, index: int) -> None:
        self.disabled_segments.add(index)

    # ------------------------------------------------------------------
    # Queries / 查询
    # ------------------------------------------------------------------

    def closest_anchor_point(self, position: VectorLike, max_distance: float = math.inf) -> int:
        """Point index of the nearest anchor within ``max_distance``, or ``-1``. / 返回 ``max_distance`` 范围内最近锚点的点下标，否则返回 ``-1``。"""

        position = self._vector(position)
        closest = -1
        for index in range(0, self.point_count, 3):
            distance = float(torch.linalg.norm(self._points[index] - position))
            if max_distance > distance:
                max_distance = distance
                closest = index
        return closest

    def closest_segment(self, position: VectorLike, max_distance: float = math.inf) -> int:
        """Index of the nearest segment, measured to the mean anchor distance, or ``-1``. / 以到两端锚点的平均距离衡量，返回最近线段的下标，否则返回 ``-1``。

        Paths with fewer than two segments return ``segment_count - 1`` directly.
        / 少于两段的路径直接返回 ``segment_count - 1``。
        """

        if self.segment_count < 2:
            return self.segment_count - 1

        position = self._vector(position)
        closest = -1
        for index in range(0, self.point_count - 3, 3):
            first = float(torch.linalg.norm(position - self._points[index]))
            second = float(torch.linalg.norm(position - self._points[index + 3]))
            distance = (first + second) * 0.5
            if max_distance > distance:
                max_distance = distance
                closest = index // 3
        return closest

    def estimated_length(self) -> float:
        return Resampler(self).estimated_length()

    def spaced_points(self, spacing: float, resolution: int = 1) -> SpacedPoints:
        return Resampler(self).spaced_points(spacing, resolution)

    def create_mesh(self, width: float, spacing: float, resolution: int = 1, tiling: float = 1.0) -> RibbonMesh:
        return MeshBuilder(self).create_mesh(width, spacing, resolution, tiling)

    # ------------------------------------------------------------------
    # Normals / 法向量
    # ------------------------------------------------------------------

    @property
    def _should_refresh_normals(self) -> bool:
        return self._normals_point_count != self.point_count

    def refresh_anchor_normals(self) -> None:
        """Probe the ground at every anchor. / 在每个锚点处探测地面。"""

        self._normals = [self._probe(point) for point in self._points[::3]]
        self._normals_point_count = self.point_count
        logger.debug("Refreshed %d anchor normals", len(self._normals))

    def _probe(self, point: Tensor) -> Tensor:
        return probe_normal(self.ground, point, self.probe).to(dtype=self.dtype, device=self.device)

    def _vector(self, value: VectorLike) -> Tensor:
        vector = torch.as_tensor(value, dtype=self.dtype, device=self.device)
        if vector.shape != (3,):
            raise ValueError(f"Expected a 3D point, received shape {tuple(vector.shape)}")
        return vector.clone()

    def __repr__(self) -> str:
        return (
            f"BezierPath(segments={self.segment_count}, points={self.point_count}, "
            f"looped={self.looped}, auto_tangent={self._auto_tangent})"
        )


__all__ = ["BezierPath", "loop_index"]
