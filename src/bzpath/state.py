"""Versioned path snapshot. / 带版本号的路径快照。

The path does not read or write files itself. Persistence layers store a :class:`PathState` in whatever
format they like and hand it back to :meth:`bzpath.path.BezierPath.from_state`. /
路径本身不负责文件读写。持久化层可用任意格式保存 :class:`PathState`，再交给 :meth:`bzpath.path.BezierPath.from_state` 恢复。
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

STATE_VERSION = 1


@dataclass
class PathState:
    """Plain-data description of a path. / 路径的纯数据描述。"""

    points: List[List[float]] = field(default_factory=list)
    looped: bool = False
    auto_tangent: bool = False
    disabled_segments: List[int] = field(default_factory=list)
    version: int = STATE_VERSION

    def validate(self) -> None:
        if self.version != STATE_VERSION:
            raise ValueError(f"Unsupported path state version {self.version}; expected {STATE_VERSION}")
        for point in self.points:
            if len(point) != 3:
                raise ValueError("Every point of a path state must have 3 coordinates")
        if any(index < 0 for index in self.disabled_segments):
            raise ValueError("Disabled segment indices must not be negative")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PathState":
        state = cls(
            points=[list(map(float, point)) for point in data.get("points", [])],
            looped=bool(data.get("looped", False)),
            auto_tangent=bool(data.get("auto_tangent", False)),
            disabled_segments=[int(index) for index in data.get("disabled_segments", [])],
            version=int(data.get("version", STATE_VERSION)),
        )
        state.validate()
        return state


__all__ = ["PathState", "STATE_VERSION"]
