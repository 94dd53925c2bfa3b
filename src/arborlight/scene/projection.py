"""
3D -> 2D projection and a simple point rasteriser for previews.

The rasteriser only places and sizes dots; colour and shading belong to
the real renderer.
"""

import math
from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw

from arborlight.config import PreviewConfig


def rotation_matrix(yaw: float, pitch: float) -> np.ndarray:
    """3x3 rotation: yaw (around Y) then pitch (around X)."""
    cy, sy = math.cos(yaw), math.sin(yaw)
    cp, sp = math.cos(pitch), math.sin(pitch)
    Ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]], dtype=np.float64)
    Rx = np.array([[1.0, 0.0, 0.0], [0.0, cp, -sp], [0.0, sp, cp]], dtype=np.float64)
    return Rx @ Ry


def project(
    points: np.ndarray,
    yaw: float,
    pitch: float,
    width: int,
    height: int,
    distance: float = 32.0,
    focal_length: float = 900.0,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Rotate → push away from the camera → perspective divide.

    Returns:
        x_px, y_px : pixel coordinates (float64)
        depth      : camera-space distance, larger is further away
    """
    rot = rotation_matrix(yaw, pitch)
    pts = points.astype(np.float64) @ rot.T
    depth = pts[:, 2] + distance
    depth = np.maximum(depth, 1e-3)
    x_px = width / 2.0 + pts[:, 0] / depth * focal_length
    y_px = height / 2.0 - pts[:, 1] / depth * focal_length  # flip Y for screen coords
    return x_px, y_px, depth


def point_radii(sizes: np.ndarray, depth: np.ndarray, config: PreviewConfig) -> np.ndarray:
    """Screen radius per particle, shrinking with distance."""
    return np.maximum(sizes * config.point_scale * (config.camera_distance / depth), 0.5)


def render_snapshot(
    positions: np.ndarray,
    sizes: np.ndarray,
    yaw: float = 0.0,
    pitch: float = 0.0,
    visible: np.ndarray | None = None,
    config: PreviewConfig | None = None,
) -> np.ndarray:
    """
    Rasterise particles as white dots, far to near.

    Returns:
        (height, width, 3) uint8 RGB frame.
    """
    cfg = config or PreviewConfig()
    img = Image.new("RGB", (cfg.width, cfg.height), tuple(cfg.background_color))
    draw = ImageDraw.Draw(img)

    x_px, y_px, depth = project(
        positions, yaw, pitch, cfg.width, cfg.height, cfg.camera_distance, cfg.focal_length
    )
    radii = point_radii(sizes, depth, cfg)
    order = np.argsort(-depth)
    if visible is not None:
        order = order[visible[order]]

    for i in order:
        x, y, r = x_px[i], y_px[i], radii[i]
        shade = int(np.clip(255 * cfg.camera_distance / depth[i], 60, 255))
        draw.ellipse([x - r, y - r, x + r, y + r], fill=(shade, shade, shade))
    return np.array(img)
