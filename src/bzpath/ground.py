"""Ground surface queries. / 地面查询。

Anchor normals follow the surface under the path: the host supplies a ray query against its collision
world and the path asks it for the surface normal near every anchor. /
锚点法向量跟随路径下方的地表：宿主提供针对其碰撞世界的射线查询，路径据此获取每个锚点附近的表面法向量。
The world is Y-up, matching the default orientation of the path. / 世界坐标系为 Y 轴向上，与路径的默认朝向一致。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union

import torch

Tensor = torch.Tensor
VectorLike = Union[Tensor, Sequence[float]]

logger = logging.getLogger(__name__)

UP = (0.0, 1.0, 0.0)


@dataclass
class GroundHit:
    """Result of a ray query. / 射线查询结果。"""

    distance: float
    normal: Tensor  # (3,) unit surface normal / 单位表面法向量


class GroundQuery(Protocol):
    """Ray query supplied by the host. / 由宿主提供的射线查询接口。

    ``layer_mask`` is a surface filter understood by the host; ``-1`` means every surface.
    / ``layer_mask`` 为宿主可识别的表面过滤器；``-1`` 表示所有表面。
    """

    def raycast(
        self, origin: Tensor, direction: Tensor, max_distance: float, layer_mask: int
    ) -> Optional[GroundHit]:
        ...


@dataclass
class GroundProbeConfig:
    """How anchors probe the ground. / 锚点探测地面的方式。"""

    offset: float = 1.0  # Ray origin distance above/below the anchor / 射线起点相对锚点的上下偏移
    max_distance: float = 10.0
    layer_mask: int = -1

    def validate(self) -> None:
        if self.offset < 0.0:
            raise ValueError("offset must not be negative")
        if self.max_distance <= 0.0:
            raise ValueError("max_distance must be positive")


class PlaneGround:
    """Infinite plane through ``origin`` facing ``normal``. / 经过 ``origin``、朝向 ``normal`` 的无限平面。

    Useful when the host has no physics service, e.g. flat terrain or tests. /
    适用于宿主没有物理服务的场景，例如平坦地形或测试。
    """

    def __init__(self, origin: VectorLike = (0.0, 0.0, 0.0), normal: VectorLike = UP, *, layer: int = 1):
        self.origin = torch.as_tensor(origin, dtype=torch.float64)
        normal = torch.as_tensor(normal, dtype=torch.float64)
        length = torch.linalg.norm(normal)
        if length <= 0.0:
            raise ValueError("PlaneGround.normal must be a non-zero vector")
        self.normal = normal / length
        self.layer = layer

    def raycast(
        self, origin: Tensor, direction: Tensor, max_distance: float, layer_mask: int
    ) -> Optional[GroundHit]:
        if not layer_mask & self.layer:
            return None

        origin = origin.to(self.origin.dtype)
        direction = direction.to(self.origin.dtype)
        denominator = torch.dot(direction, self.normal)
        if abs(float(denominator)) < 1e-12:
            return None

        distance = float(torch.dot(self.origin - origin, self.normal) / denominator)
        if distance < 0.0 or distance > max_distance:
            return None
        # Report the face the ray arrives at. / 返回射线所击中的那一面。
        normal = self.normal if denominator < 0 else -self.normal
        return GroundHit(distance=distance, normal=normal.clone())


def probe_normal(
    query: Optional[GroundQuery], point: Tensor, config: Optional[GroundProbeConfig] = None
) -> Tensor:
    """Surface normal under or above ``point``. / ``point`` 下方或上方的表面法向量。

    Two rays are cast, one down from above the point and one up from below it; the nearer hit wins.
    The normal of an upward hit faces down and is flipped so both cases point away from the ground.
    Without a query or a hit the world up vector is returned. /
    分别从点的上方向下、下方向上投射两条射线，取距离更近的命中结果。
    向上命中的法向量朝下，因此会被翻转，使两种情况都指向远离地面的方向。
    若没有查询接口或未命中，则返回世界坐标的向上向量。
    """

    up = torch.tensor(UP, dtype=point.dtype, device=point.device)
    if query is None:
        return up

    cfg = config or GroundProbeConfig()
    down_hit = query.raycast(point + up * cfg.offset, -up, cfg.max_distance, cfg.layer_mask)
    up_hit = query.raycast(point - up * cfg.offset, up, cfg.max_distance, cfg.layer_mask)

    if down_hit is not None and up_hit is not None:
        if down_hit.distance > up_hit.distance:
            return -up_hit.normal.to(point.dtype)
        return down_hit.normal.to(point.dtype)
    if down_hit is not None:
        return down_hit.normal.to(point.dtype)
    if up_hit is not None:
        return -up_hit.normal.to(point.dtype)

    logger.debug("No ground below %s, falling back to up vector", point.tolist())
    return up


__all__ = ["GroundHit", "GroundProbeConfig", "GroundQuery", "PlaneGround", "UP", "probe_normal"]
