#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
三角剖分适配模块
将（近似）平面多边形剖分为三角形，检查退化结果并恢复原多边形的朝向。

剖分算法通过TriangulationAlgorithm接口接入：
- EarcutTriangulationAlgorithm: 调用mapbox-earcut的耳切法，适用于任意简单多边形
- FanTriangulationAlgorithm: 扇形剖分，仅用于凸多边形，作为备选

作者: xodr-geometry项目组
版本: 1.0.0
"""

import math
import logging
from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np
import mapbox_earcut as earcut
from shapely.geometry import Polygon as ShapelyPolygon

from .errors import ColinearTriangleError, TriangulationError, TriangulationFailure
from .polygon import Polygon3D
from .vectors import Vector3D
from .vertex_processing import (
    calculate_normal,
    is_colinear_triple,
    remove_closing_duplicates,
    remove_consecutive_side_duplicates,
)

logger = logging.getLogger(__name__)

# 三角形法向与参考法向夹角超过该值（135°）时反转三角形
DEFAULT_ORIENTATION_THRESHOLD = 0.75 * math.pi


def _reference_normal(vertices: Sequence[Vector3D]) -> Vector3D:
    try:
        return calculate_normal(vertices)
    except ValueError as e:
        raise TriangulationFailure(f"无法计算参考法向量: {e}") from e


def _project_to_plane(vertices: Sequence[Vector3D], normal: Vector3D) -> np.ndarray:
    """投影到与法向量最接近的坐标平面上（水平多边形即为xy平面）"""
    coordinates = np.array([v.to_tuple() for v in vertices], dtype=float)
    dropped_axis = int(np.argmax(np.abs(normal.to_array())))
    kept_axes = [axis for axis in range(3) if axis != dropped_axis]
    return np.ascontiguousarray(coordinates[:, kept_axes])


class TriangulationAlgorithm(ABC):
    """三角剖分算法接口

    子类只负责把顶点划分为三角形；共线检查和朝向修正由基类统一完成，
    与具体算法无关。
    """

    name = 'abstract'

    @abstractmethod
    def _triangulate_vertices(self, vertices: List[Vector3D], tolerance: float) -> List[List[Vector3D]]:
        """返回三角形顶点列表，不要求保持原有朝向"""

    def triangulate(self, vertices: Sequence[Vector3D], tolerance: float,
                    orientation_threshold: float = DEFAULT_ORIENTATION_THRESHOLD) -> List[Polygon3D]:
        """剖分多边形

        Args:
            vertices: 多边形顶点（不含闭合点）
            tolerance: 容差
            orientation_threshold: 朝向修正的角度阈值（弧度）

        Returns:
            List[Polygon3D]: 与原多边形朝向一致的三角形

        Raises:
            TriangulationFailure: 剖分算法内部出错
            ColinearTriangleError: 结果中存在退化三角形
        """
        cleaned = remove_closing_duplicates(remove_consecutive_side_duplicates(vertices, tolerance), tolerance)
        if len(cleaned) < 3:
            raise TriangulationFailure(f"去除重复顶点后剩余 {len(cleaned)} 个顶点，无法剖分")

        try:
            raw_triangles = self._triangulate_vertices(cleaned, tolerance)
        except TriangulationError:
            raise
        except RecursionError as e:
            raise TriangulationFailure(f"{self.name}剖分失败: 递归深度耗尽") from e
        except Exception as e:
            raise TriangulationFailure(f"{self.name}剖分失败: {e}") from e

        if not raw_triangles:
            raise TriangulationFailure(f"{self.name}剖分没有产生三角形")

        for triangle in raw_triangles:
            if is_colinear_triple(triangle[0], triangle[1], triangle[2], tolerance):
                raise ColinearTriangleError(f"{self.name}剖分结果包含共线三角形: {[v.to_tuple() for v in triangle]}")

        triangles = [Polygon3D(t, tolerance) for t in raw_triangles]
        return adjust_orientation(vertices, triangles, orientation_threshold)


def adjust_orientation(original_vertices: Sequence[Vector3D], triangles: Sequence[Polygon3D],
                       orientation_threshold: float = DEFAULT_ORIENTATION_THRESHOLD) -> List[Polygon3D]:
    """根据原多边形的参考法向量恢复三角形的朝向

    Args:
        original_vertices: 剖分前的顶点，用于计算参考法向量
        triangles: 待修正的三角形
        orientation_threshold: 夹角超过该值时反转三角形

    Returns:
        List[Polygon3D]: 修正后的三角形
    """
    reference_normal = _reference_normal(original_vertices)
    adjusted = []
    for triangle in triangles:
        if reference_normal.angle(triangle.normal) > orientation_threshold:
            adjusted.append(triangle.reversed())
        else:
            adjusted.append(triangle)
    return adjusted


class EarcutTriangulationAlgorithm(TriangulationAlgorithm):
    """基于mapbox-earcut的耳切法剖分"""

    name = 'Earcut'

    def _triangulate_vertices(self, vertices: List[Vector3D], tolerance: float) -> List[List[Vector3D]]:
        projected = _project_to_plane(vertices, _reference_normal(vertices))
        if not ShapelyPolygon(projected).is_valid:
            raise TriangulationFailure("投影后的多边形自相交")

        rings = np.array([len(projected)], dtype=np.uint32)
        indices = earcut.triangulate_float64(projected, rings)
        return [[vertices[int(indices[i])], vertices[int(indices[i + 1])], vertices[int(indices[i + 2])]]
                for i in range(0, len(indices), 3)]


class FanTriangulationAlgorithm(TriangulationAlgorithm):
    """以第一个顶点为中心的扇形剖分，只接受凸多边形"""

    name = 'Fan'

    def _triangulate_vertices(self, vertices: List[Vector3D], tolerance: float) -> List[List[Vector3D]]:
        projected = ShapelyPolygon(_project_to_plane(vertices, _reference_normal(vertices)))
        if not projected.is_valid or projected.convex_hull.area - projected.area > tolerance:
            raise TriangulationFailure("扇形剖分只适用于凸多边形")
        return [[vertices[0], vertices[i], vertices[i + 1]] for i in range(1, len(vertices) - 1)]


class Triangulator:
    """按顺序尝试多个剖分算法，返回第一个成功的结果"""

    def __init__(self, algorithms: Sequence[TriangulationAlgorithm] = None,
                 orientation_threshold: float = DEFAULT_ORIENTATION_THRESHOLD):
        if algorithms is None:
            algorithms = [EarcutTriangulationAlgorithm(), FanTriangulationAlgorithm()]
        if len(algorithms) == 0:
            raise ValueError("至少需要一个剖分算法")
        self.algorithms = list(algorithms)
        self.orientation_threshold = orientation_threshold

    def triangulate(self, vertices: Sequence[Vector3D], tolerance: float) -> List[Polygon3D]:
        """剖分多边形，返回第一个成功算法的结果

        所有算法都失败时，若有算法产生过共线三角形则抛出该ColinearTriangleError，
        否则抛出最后一个算法的异常。

        Raises:
            ColinearTriangleError: 所有算法均失败，且至少一个算法的结果包含共线三角形
            TriangulationFailure: 所有算法均失败
        """
        colinear_error = None
        last_error = None
        for algorithm in self.algorithms:
            try:
                return algorithm.triangulate(vertices, tolerance, self.orientation_threshold)
            except ColinearTriangleError as e:
                logger.debug(f"{algorithm.name}剖分结果包含共线三角形，尝试下一个算法: {e}")
                if colinear_error is None:
                    colinear_error = e
            except TriangulationError as e:
                logger.debug(f"{algorithm.name}剖分失败，尝试下一个算法: {e}")
                last_error = e
        raise colinear_error if colinear_error is not None else last_error


def triangulate(vertices: Sequence[Vector3D], tolerance: float,
                orientation_threshold: float = DEFAULT_ORIENTATION_THRESHOLD) -> List[Polygon3D]:
    """使用默认算法序列剖分多边形"""
    return Triangulator(orientation_threshold=orientation_threshold).triangulate(vertices, tolerance)
