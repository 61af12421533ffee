"""
Minimum-Area Enclosing Quadrilateral

Relaxed-mode fallback of the quad detector. When the simplified region
boundary is not four-sided (rounded corners, partial occlusion, ragged
segmentation), the document is approximated by the smallest quadrilateral
that contains the region's convex hull.

Search space: quadrilaterals whose four sides lie on supporting lines of the
hull, one per chosen hull edge direction. The hull is first reduced to a
bounded number of vertices; each candidate side is then pushed outwards until
it supports the full-resolution hull, so every candidate encloses the whole
region regardless of the reduction.
"""

import itertools
import logging
from typing import Optional

import cv2
import numpy as np

from src.common.geometry import polygon_area

logger = logging.getLogger(__name__)

# Angular gaps closer than this to 0 or pi (radians) are rejected: the
# corresponding sides are (anti)parallel and never meet.
_ANGLE_EPSILON = 1e-6

_EPSILON_GROWTH = 1.5


def reduce_hull(
    hull: np.ndarray, epsilon_ratio: float, max_vertices: int
) -> np.ndarray:
    """
    Simplify a convex hull until it has at most ``max_vertices`` vertices.

    Args:
        hull: Convex hull of shape (N, 1, 2).
        epsilon_ratio: Initial Douglas-Peucker tolerance as a fraction of the
            hull perimeter; multiplied by 1.5 until the vertex budget is met.
        max_vertices: Vertex budget.

    Returns:
        Reduced polygon of shape (K, 2), float64, counter-clockwise in
        (x, y) coordinates.
    """
    perimeter = cv2.arcLength(hull, True)
    epsilon = epsilon_ratio * perimeter
    reduced = cv2.approxPolyDP(hull, epsilon, True)

    while len(reduced) > max_vertices:
        epsilon *= _EPSILON_GROWTH
        reduced = cv2.approxPolyDP(hull, epsilon, True)

    pts = reduced.reshape(-1, 2).astype(np.float64)
    if polygon_area(pts) < 0:
        pts = pts[::-1]

    logger.debug(
        f"Reduced hull from {len(hull)} to {len(pts)} vertices (epsilon={epsilon:.2f})"
    )
    return pts


def _supporting_lines(polygon: np.ndarray, support: np.ndarray):
    """
    Outward normals, offsets and normal angles of each polygon edge.

    The offset of edge i is max(n_i . p) over the support points, so the line
    n_i . x = c_i touches the support set and keeps it on its inner side.
    """
    center = support.mean(axis=0)
    normals = []
    offsets = []
    angles = []
    for i in range(len(polygon)):
        p = polygon[i]
        q = polygon[(i + 1) % len(polygon)]
        direction = q - p
        length = float(np.hypot(direction[0], direction[1]))
        if length == 0.0:
            continue
        normal = np.array([direction[1], -direction[0]]) / length
        if np.dot(normal, center - p) > 0:
            normal = -normal
        normals.append(normal)
        offsets.append(float(np.max(support @ normal)))
        angles.append(float(np.arctan2(normal[1], normal[0])))
    return np.array(normals), np.array(offsets), np.array(angles)


def _intersect(n1: np.ndarray, c1: float, n2: np.ndarray, c2: float) -> Optional[np.ndarray]:
    det = n1[0] * n2[1] - n1[1] * n2[0]
    if abs(det) < _ANGLE_EPSILON:
        return None
    x = (c1 * n2[1] - n1[1] * c2) / det
    y = (n1[0] * c2 - c1 * n2[0]) / det
    return np.array([x, y])


def min_area_enclosing_quad(
    points: np.ndarray, epsilon_ratio: float = 0.005, max_vertices: int = 16
) -> Optional[np.ndarray]:
    """
    Find the minimum-area quadrilateral enclosing a point set.

    Args:
        points: Region boundary, shape (N, 1, 2) or (N, 2).
        epsilon_ratio: Initial hull reduction tolerance (fraction of perimeter).
        max_vertices: Hull vertex budget for the exhaustive side search.

    Returns:
        Quadrilateral corners of shape (4, 2), float64, counter-clockwise and
        not yet in canonical order; None if the points span no area.

    Example:
        >>> octagon = np.array([[30, 0], [70, 0], [100, 30], [100, 70],
        ...                     [70, 100], [30, 100], [0, 70], [0, 30]])
        >>> quad = min_area_enclosing_quad(octagon)
        >>> quad.shape
        (4, 2)
    """
    pts = np.asarray(points, dtype=np.float32).reshape(-1, 1, 2)
    if len(pts) < 3:
        return None

    hull = cv2.convexHull(pts)
    support = hull.reshape(-1, 2).astype(np.float64)
    if abs(polygon_area(support)) <= 0.0:
        return None

    polygon = reduce_hull(hull, epsilon_ratio, max_vertices)
    normals, offsets, angles = _supporting_lines(polygon, support)

    best_quad = None
    best_area = np.inf

    if len(normals) >= 4:
        for combo in itertools.combinations(range(len(normals)), 4):
            # Normal angles increase around a counter-clockwise polygon; every
            # turn between consecutive chosen sides must stay below pi or the
            # four half-planes do not close into a quadrilateral.
            gaps = [
                (angles[combo[(k + 1) % 4]] - angles[combo[k]]) % (2 * np.pi)
                for k in range(4)
            ]
            if any(g <= _ANGLE_EPSILON or g >= np.pi - _ANGLE_EPSILON for g in gaps):
                continue

            corners = []
            for k in range(4):
                a = combo[k]
                b = combo[(k + 1) % 4]
                corner = _intersect(normals[a], offsets[a], normals[b], offsets[b])
                if corner is None:
                    break
                corners.append(corner)
            if len(corners) != 4:
                continue

            quad = np.array(corners)
            area = abs(polygon_area(quad))
            if area < best_area:
                best_area = area
                best_quad = quad

    if best_quad is None:
        # Triangular hulls have no four sides to choose from
        rect = cv2.minAreaRect(hull)
        best_quad = cv2.boxPoints(rect).astype(np.float64)
        best_area = abs(polygon_area(best_quad))
        logger.debug("No four-sided candidate, using minimum-area rectangle")

    logger.debug(
        f"Enclosing quad area {best_area:.1f} for hull area "
        f"{abs(polygon_area(support)):.1f}"
    )
    return best_quad
