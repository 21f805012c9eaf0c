"""Piecewise cubic Bézier paths with ribbon meshes. / 带状网格化的分段三次贝塞尔路径。

This package models an editable path made of cubic Bézier segments that share their anchors, keeps its
control points smooth automatically when asked to, resamples it at even arc-length spacing and turns the
samples into a ribbon mesh, e.g. for roads or rails laid over terrain. /
本包对由共享锚点的三次贝塞尔线段构成的可编辑路径进行建模，可按需自动保持控制点平滑，按均匀弧长间距重采样，并将采样点转换为带状网格，例如铺设在地形上的道路或轨道。
Ground normals and mesh consumption come from the host through small protocols, so the core has no
engine dependency beyond PyTorch. / 地面法向量与网格的使用均通过小型协议由宿主提供，因此核心除 PyTorch 外不依赖任何引擎。
"""

from .bezier import CubicBezier, evaluate_cubic, evaluate_linear, evaluate_quadratic
from .ground import GroundHit, GroundProbeConfig, GroundQuery, PlaneGround, probe_normal
from .logging_config import setup_logging
from .mesh import MeshBuilder, MeshConfig, MeshSink, RibbonMesh
from .path import BezierPath, loop_index
from .resample import Resampler, SpacedPoints
from .state import PathState
from .tangents import TangentSolver

__all__ = [
    "BezierPath",
    "CubicBezier",
    "GroundHit",
    "GroundProbeConfig",
    "GroundQuery",
    "MeshBuilder",
    "MeshConfig",
    "MeshSink",
    "PathState",
    "PlaneGround",
    "Resampler",
    "RibbonMesh",
    "SpacedPoints",
    "TangentSolver",
    "evaluate_cubic",
    "evaluate_linear",
    "evaluate_quadratic",
    "loop_index",
    "probe_normal",
    "setup_logging",
]
