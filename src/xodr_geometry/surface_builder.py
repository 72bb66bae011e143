"""曲面与实体构建器

由道路对象记录构建曲面（矩形、圆、轮廓线性环、重复对象的直纹面）和实体（长方体、圆柱体）。
单个对象的放置由参考线在s处的局部坐标系（curve_affine）和对象相对位姿组成。
"""

import logging
from typing import List

from .affine_transform import Affine3D, AffineSequence3D
from .curve3d import Curve3D
from .curve_builder import Curve2DBuilder
from .fuzzy import DEFAULT_TOLERANCE, require_positive_tolerance
from .plan_view import RepeatDefinition, RoadObjectDefinition
from .solids import Cuboid3D, Cylinder3D
from .surfaces import (
    DEFAULT_STEP_SIZE,
    Circle3D,
    LinearRing3D,
    ParametricBoundedSurface3D,
    Rectangle3D,
    build_linear_ring,
)
from .triangulation import DEFAULT_ORIENTATION_THRESHOLD, Triangulator
from .univariate import SectionedUnivariateFunction, StackedFunction, UnivariateFunction

logger = logging.getLogger(__name__)


def _object_affine_sequence(road_object: RoadObjectDefinition, curve_affine: Affine3D) -> AffineSequence3D:
    object_affine = Affine3D.of_pose(road_object.reference_line_relative_pose)
    return AffineSequence3D.of(curve_affine, object_affine)


class Surface3DBuilder:
    """曲面构建器

    Args:
        tolerance: 容差
        discretization_step_size: 直纹面的离散步长
        circle_slices: 圆的分段数
        orientation_threshold: 非平面环三角剖分时的朝向修正阈值（弧度）
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE, discretization_step_size: float = DEFAULT_STEP_SIZE,
                 circle_slices: int = 16, orientation_threshold: float = DEFAULT_ORIENTATION_THRESHOLD):
        require_positive_tolerance(tolerance)
        self.tolerance = tolerance
        self.discretization_step_size = discretization_step_size
        self.circle_slices = circle_slices
        self._curve_builder = Curve2DBuilder(tolerance)
        self.triangulator = Triangulator(orientation_threshold=orientation_threshold)

    def build_rectangles(self, road_object: RoadObjectDefinition, curve_affine: Affine3D) -> List[Rectangle3D]:
        if not road_object.is_rectangle(self.tolerance):
            return []
        affine_sequence = _object_affine_sequence(road_object, curve_affine)
        return [Rectangle3D(road_object.length, road_object.width, self.tolerance, affine_sequence)]

    def build_circles(self, road_object: RoadObjectDefinition, curve_affine: Affine3D) -> List[Circle3D]:
        if not road_object.is_circle(self.tolerance):
            return []
        affine_sequence = _object_affine_sequence(road_object, curve_affine)
        return [Circle3D(road_object.radius, self.tolerance, affine_sequence, self.circle_slices)]

    def build_linear_rings_by_local_corners(self, road_object: RoadObjectDefinition,
                                            curve_affine: Affine3D) -> List[LinearRing3D]:
        """由局部坐标系中的轮廓角点构建线性环

        Raises:
            DegenerateRingError: 轮廓去除冗余顶点后退化
        """
        if not road_object.outline:
            return []
        ring = build_linear_ring(road_object.local_corners(), self.tolerance, self.triangulator)
        return [ring.with_affine_sequence(_object_affine_sequence(road_object, curve_affine))]

    def build_stacked_height_function(self, repeat: RepeatDefinition,
                                      reference_line: Curve3D) -> UnivariateFunction:
        """重复对象的基准高度：参考线高度（截取重复区间）加上zOffset"""
        reference_height = SectionedUnivariateFunction(reference_line.height_function,
                                                       repeat.reference_line_section, self.tolerance)
        return StackedFunction.of_sum(reference_height, repeat.z_offset_function)

    def build_parametric_bounded_surfaces_by_horizontal_repeat(
            self, repeat: RepeatDefinition, reference_line: Curve3D) -> List[ParametricBoundedSurface3D]:
        """水平重复对象：参考曲线左右各平移半个宽度作为边界

        Raises:
            DomainMismatchError: 重复区间超出参考线定义域
        """
        if not repeat.is_horizontal_surface(self.tolerance):
            return []

        reference_curve = self._curve_builder.build_lateral_translated_curve(repeat, reference_line)
        reference_height = self.build_stacked_height_function(repeat, reference_line)

        logger.debug(f"水平重复对象: 区间 {repeat.reference_line_section}")
        # 横向偏移向左为正
        left_boundary = Curve3D(reference_curve.add_lateral_translation(repeat.width_function, +0.5),
                                reference_height)
        right_boundary = Curve3D(reference_curve.add_lateral_translation(repeat.width_function, -0.5),
                                 reference_height)
        # 右边界作为曲面的第一条边界，多边形法向朝上
        return [ParametricBoundedSurface3D(right_boundary, left_boundary, self.tolerance,
                                           self.discretization_step_size, self.triangulator)]

    def build_parametric_bounded_surfaces_by_vertical_repeat(
            self, repeat: RepeatDefinition, reference_line: Curve3D) -> List[ParametricBoundedSurface3D]:
        """竖直重复对象：下边界为参考曲线，上边界再叠加对象高度

        Raises:
            DomainMismatchError: 重复区间超出参考线定义域
        """
        if not repeat.is_vertical_surface(self.tolerance):
            return []

        reference_curve = self._curve_builder.build_lateral_translated_curve(repeat, reference_line)
        reference_height = self.build_stacked_height_function(repeat, reference_line)

        logger.debug(f"竖直重复对象: 区间 {repeat.reference_line_section}")
        lower_boundary = Curve3D(reference_curve, reference_height)
        upper_height = StackedFunction.of_sum(reference_height, repeat.height_function, default_value=0.0)
        upper_boundary = Curve3D(reference_curve, upper_height)
        return [ParametricBoundedSurface3D(lower_boundary, upper_boundary, self.tolerance,
                                           self.discretization_step_size, self.triangulator)]


class Solid3DBuilder:
    """实体构建器"""

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE, circle_slices: int = 16):
        require_positive_tolerance(tolerance)
        self.tolerance = tolerance
        self.circle_slices = circle_slices

    def build_cuboids(self, road_object: RoadObjectDefinition, curve_affine: Affine3D) -> List[Cuboid3D]:
        if not road_object.is_cuboid(self.tolerance):
            return []
        affine_sequence = _object_affine_sequence(road_object, curve_affine)
        return [Cuboid3D(road_object.length, road_object.width, road_object.height, self.tolerance,
                         affine_sequence)]

    def build_cylinders(self, road_object: RoadObjectDefinition, curve_affine: Affine3D) -> List[Cylinder3D]:
        if not road_object.is_cylinder(self.tolerance):
            return []
        affine_sequence = _object_affine_sequence(road_object, curve_affine)
        return [Cylinder3D(road_object.radius, road_object.height, self.tolerance, affine_sequence,
                           self.circle_slices)]
