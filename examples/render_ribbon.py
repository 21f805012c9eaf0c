"""Render a road-like ribbon along a looped Bézier path. / 沿闭合贝塞尔路径渲染类似道路的带状网格。

Run the script with ``python examples/render_ribbon.py``; it saves a top-down PNG next to this file. /
使用 ``python examples/render_ribbon.py`` 运行脚本，会在本文件旁保存一张俯视 PNG 图像。
The example shows the typical flow: place anchors, let tangents be computed automatically, disable one
segment to leave a gap, then hand the ribbon mesh to a sink. /
该示例展示了典型流程：放置锚点，自动计算切线，禁用一段以留出缺口，最后将带状网格交给使用方。
"""
from __future__ import annotations

import logging
from pathlib import Path

import torch
from PIL import Image, ImageDraw

from bzpath import BezierPath, MeshBuilder, MeshConfig, PlaneGround, setup_logging

OUTPUT_PATH = Path(__file__).with_suffix(".png")
CANVAS_SIZE = 512
MARGIN = 32


class PngSink:
    """Draws ribbon triangles seen from above (X right, Z down). / 从上方绘制带状网格三角形（X 向右，Z 向下）。"""

    def __init__(self, output: Path):
        self.output = output

    def consume(self, vertices: torch.Tensor, uv: torch.Tensor, triangles: torch.Tensor) -> None:
        flat = vertices[:, [0, 2]]
        low = flat.min(dim=0).values
        extent = float((flat.max(dim=0).values - low).max())
        scale = (CANVAS_SIZE - 2 * MARGIN) / max(extent, 1e-6)
        pixels = ((flat - low) * scale + MARGIN).tolist()

        image = Image.new("RGB", (CANVAS_SIZE, CANVAS_SIZE), (245, 245, 240))
        draw = ImageDraw.Draw(image)
        for a, b, c in triangles.tolist():
            # Shade by texture coordinate so tiling is visible. / 按纹理坐标着色，以便观察平铺效果。
            shade = int(80 + 60 * (float(uv[a, 1]) % 1.0))
            draw.polygon([tuple(pixels[a]), tuple(pixels[b]), tuple(pixels[c])], fill=(shade, shade, shade + 20))
        image.save(self.output)


def make_track() -> BezierPath:
    path = BezierPath(PlaneGround())
    for anchor in ((0.0, 0.0, 0.0), (40.0, 0.0, -10.0), (60.0, 0.0, 20.0), (30.0, 0.0, 45.0), (-5.0, 0.0, 30.0)):
        path.add_segment(anchor)
    path.auto_tangent = True
    path.looped = True
    # Leave a gap, e.g. for a bridge modelled separately. / 留出缺口，例如用于单独建模的桥梁。
    path.disable_segment(2)
    return path


def main() -> None:
    setup_logging(logging.INFO)
    path = make_track()
    mesh = MeshBuilder(path).build(MeshConfig(width=6.0, spacing=1.0, tiling=4.0))
    mesh.emit(PngSink(OUTPUT_PATH))
    print(f"Saved ribbon example to {OUTPUT_PATH}")  # Notify where the output was saved / 提示保存路径


if __name__ == "__main__":
    main()
