"""曲面构建模块

线性环、参数有界曲面（两条边界曲线之间的直纹面）以及矩形、圆等基本曲面。
所有曲面通过calculate_polygons_global_cs()输出全局坐标系下的多边形网格。
"""

import math
import logging
from abc import ABC, abstractmethod
from functools import cached_property
from typing import List, Sequence

from .affine_transform import Affine3D, AffineSequence3D
from .curve3d import Curve3D
from .errors import DegenerateRingError, DegenerateSurfaceError, DomainMismatchError
from .fuzzy import require_positive_tolerance
from .polygon import Polygon3D
from .range_domain import Range
from .triangulation import Triangulator
from .vectors import Vector3D
from .vertex_processing import (
    is_colinear,
    is_planar,
    remove_closing_duplicates,
    remove_consecutive_side_duplicates,
    remove_redundant_vertices_on_line_segments_enclosing,
)

logger = logging.getLogger(__name__)

# 参数有界曲面的默认离散步长（米）
DEFAULT_STEP_SIZE = 0.3


class AbstractGeometry3D(ABC):
    """带仿射放置的三维几何体基类"""

    def __init__(self, tolerance: float, affine_sequence: AffineSequence3D = None):
        require_positive_tolerance(tolerance)
        self.tolerance = tolerance
        self.affine_sequence = affine_sequence if affine_sequence is not None else AffineSequence3D.empty()

    @cached_property
    def affine(self) -> Affine3D:
        return self.affine_sequence.solve()

    @abstractmethod
    def calculate_polygons_local_cs(self) -> List[Polygon3D]:
        pass

    @cached_property
    def _polygons_global_cs(self) -> List[Polygon3D]:
        return [polygon.transformed(self.affine) for polygon in self.calculate_polygons_local_cs()]

    def calculate_polygons_global_cs(self) -> List[Polygon3D]:
        """全局坐标系下的多边形，第一次调用时计算并缓存"""
        return list(self._polygons_global_cs)


class LinearRing3D(AbstractGeometry3D):
    """闭合的三维顶点环（首尾不重复存储）

    Raises:
        DegenerateRingError: 顶点少于三个、存在相邻重复顶点或全部共线
    """

    def __init__(self, vertices: Sequence[Vector3D], tolerance: float,
                 affine_sequence: AffineSequence3D = None, triangulator: Triangulator = None):
        super().__init__(tolerance, affine_sequence)
        if len(vertices) < 3:
            raise DegenerateRingError(f"线性环至少需要三个顶点，实际为 {len(vertices)} 个")
        cleaned = remove_closing_duplicates(remove_consecutive_side_duplicates(vertices, tolerance), tolerance)
        if len(cleaned) != len(vertices):
            raise DegenerateRingError("线性环包含相邻的重复顶点")
        if is_colinear(vertices, tolerance):
            raise DegenerateRingError("线性环的顶点全部共线")
        self.vertices = tuple(vertices)
        self.triangulator = triangulator

    def __len__(self) -> int:
        return len(self.vertices)

    def with_affine_sequence(self, affine_sequence: AffineSequence3D) -> 'LinearRing3D':
        return LinearRing3D(self.vertices, self.tolerance, affine_sequence, self.triangulator)

    def is_planar(self) -> bool:
        return is_planar(self.vertices, self.tolerance)

    def calculate_polygons_local_cs(self) -> List[Polygon3D]:
        """平面环直接作为一个多边形，非平面环进行三角剖分"""
        if self.is_planar():
            return [Polygon3D(self.vertices, self.tolerance)]
        triangulator = self.triangulator if self.triangulator is not None else Triangulator()
        return triangulator.triangulate(self.vertices, self.tolerance)

    @classmethod
    def of_with_duplicates_removal(cls, left_vertices: Sequence[Vector3D], right_vertices: Sequence[Vector3D],
                                   tolerance: float, triangulator: Triangulator = None) -> List['LinearRing3D']:
        """由两条对应的顶点序列构建条带状的线性环

        第i个环由 left[i], left[i+1], right[i+1], right[i] 组成；
        去除冗余顶点后退化的环（例如两条边界在此处重合）被跳过。

        Raises:
            DomainMismatchError: 两个序列的顶点数量不一致
        """
        if len(left_vertices) != len(right_vertices):
            raise DomainMismatchError(
                f"左右顶点数量不一致: {len(left_vertices)} != {len(right_vertices)}")

        rings = []
        for index in range(len(left_vertices) - 1):
            candidate = [left_vertices[index], left_vertices[index + 1],
                         right_vertices[index + 1], right_vertices[index]]
            cleaned = remove_redundant_vertices_on_line_segments_enclosing(candidate, tolerance)
            if len(cleaned) < 3 or is_colinear(cleaned, tolerance):
                logger.debug(f"跳过退化的条带环（索引 {index}）")
                continue
            rings.append(cls(cleaned, tolerance, triangulator=triangulator))
        return rings


def build_linear_ring(vertices: Sequence[Vector3D], tolerance: float,
                      triangulator: Triangulator = None) -> LinearRing3D:
    """由轮廓顶点构建线性环，去除重复顶点和位于相邻顶点连线上的冗余顶点

    Args:
        vertices: 有序的轮廓顶点，可以包含闭合点
        tolerance: 容差

    Returns:
        LinearRing3D: 清理后的线性环

    Raises:
        DegenerateRingError: 清理后不足三个顶点或全部共线
    """
    cleaned = remove_redundant_vertices_on_line_segments_enclosing(vertices, tolerance)
    if len(cleaned) < 3:
        raise DegenerateRingError(f"去除冗余顶点后只剩 {len(cleaned)} 个顶点")
    if is_colinear(cleaned, tolerance):
        raise DegenerateRingError("线性环的顶点全部共线")
    return LinearRing3D(cleaned, tolerance, triangulator=triangulator)


class ParametricBoundedSurface3D(AbstractGeometry3D):
    """两条边界曲线之间的直纹面

    两条边界按相同的弧长步长离散化（始终包含定义域两端），对应采样点之间
    连接成条带网格。采样结果在第一次使用时计算并缓存在对象上。
    left/right只决定条带环的顶点顺序，多边形法向按该顺序由右手定则确定。

    Raises:
        DomainMismatchError: 两条边界的定义域不同
        DegenerateSurfaceError: 长度不大于容差
    """

    def __init__(self, left_boundary: Curve3D, right_boundary: Curve3D, tolerance: float,
                 discretization_step_size: float = DEFAULT_STEP_SIZE, triangulator: Triangulator = None):
        super().__init__(tolerance)
        if left_boundary.domain != right_boundary.domain:
            raise DomainMismatchError(
                f"边界曲线的定义域必须相同: {left_boundary.domain} != {right_boundary.domain}")
        if discretization_step_size <= 0.0:
            raise ValueError(f"离散步长必须为正数: {discretization_step_size}")
        self.left_boundary = left_boundary
        self.right_boundary = right_boundary
        self.discretization_step_size = discretization_step_size
        self.triangulator = triangulator
        if self.length <= tolerance:
            raise DegenerateSurfaceError(f"曲面长度 {self.length} 必须大于容差 {tolerance}")

    @property
    def domain(self) -> Range:
        return self.left_boundary.domain

    @property
    def length(self) -> float:
        return self.domain.length

    @cached_property
    def left_vertices(self) -> List[Vector3D]:
        return self.left_boundary.calculate_point_list_global_cs(self.discretization_step_size)

    @cached_property
    def right_vertices(self) -> List[Vector3D]:
        return self.right_boundary.calculate_point_list_global_cs(self.discretization_step_size)

    def calculate_polygons_local_cs(self) -> List[Polygon3D]:
        rings = LinearRing3D.of_with_duplicates_removal(self.left_vertices, self.right_vertices, self.tolerance,
                                                    self.triangulator)
        return [polygon for ring in rings for polygon in ring.calculate_polygons_global_cs()]


def build_parametric_bounded_surface(left_boundary: Curve3D, right_boundary: Curve3D, tolerance: float,
                                     step_size: float = DEFAULT_STEP_SIZE) -> ParametricBoundedSurface3D:
    return ParametricBoundedSurface3D(left_boundary, right_boundary, tolerance, step_size)


class Rectangle3D(AbstractGeometry3D):
    """局部xy平面内以原点为中心的矩形，长度沿x轴"""

    def __init__(self, length: float, width: float, tolerance: float, affine_sequence: AffineSequence3D = None):
        super().__init__(tolerance, affine_sequence)
        if length <= tolerance or width <= tolerance:
            raise DegenerateSurfaceError(f"矩形的长和宽必须大于容差: length={length}, width={width}")
        self.length = length
        self.width = width

    @property
    def vertices(self) -> List[Vector3D]:
        half_length, half_width = self.length / 2.0, self.width / 2.0
        return [Vector3D(-half_length, -half_width, 0.0), Vector3D(half_length, -half_width, 0.0),
                Vector3D(half_length, half_width, 0.0), Vector3D(-half_length, half_width, 0.0)]

    def calculate_polygons_local_cs(self) -> List[Polygon3D]:
        return [Polygon3D(self.vertices, self.tolerance)]


def circle_vertices(radius: float, number_slices: int, z: float = 0.0) -> List[Vector3D]:
    """圆周上逆时针均匀分布的顶点"""
    return [Vector3D(radius * math.cos(2.0 * math.pi * i / number_slices),
                     radius * math.sin(2.0 * math.pi * i / number_slices), z)
            for i in range(number_slices)]


class Circle3D(AbstractGeometry3D):
    """局部xy平面内以原点为圆心的圆，用正多边形近似"""

    def __init__(self, radius: float, tolerance: float, affine_sequence: AffineSequence3D = None,
                 number_slices: int = 16):
        super().__init__(tolerance, affine_sequence)
        if radius <= tolerance:
            raise DegenerateSurfaceError(f"圆的半径必须大于容差: {radius}")
        if number_slices < 3:
            raise ValueError(f"圆至少需要分为3段: {number_slices}")
        self.radius = radius
        self.number_slices = number_slices

    def calculate_polygons_local_cs(self) -> List[Polygon3D]:
        return [Polygon3D(circle_vertices(self.radius, self.number_slices), self.tolerance)]
