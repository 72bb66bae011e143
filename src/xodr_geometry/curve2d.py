#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
二维曲线段模块
平面视图中的基本几何段：直线、圆弧、螺旋线（回旋线）、三次多项式和参数三次多项式。
每个曲线段在局部参数域 [0, length) 或 [0, length]（组合曲线的最后一段）上求值，
并携带一个仿射变换序列，将局部坐标系中的位姿放置到全局坐标系。

作者: xodr-geometry项目组
版本: 1.0.0
"""

import math
from abc import ABC, abstractmethod
from functools import cached_property
from typing import Callable, List, Sequence

import numpy as np
from scipy.special import fresnel
from shapely.geometry import LineString

from .affine_transform import Affine2D, AffineSequence2D
from .errors import CurveBuildError, OutOfDomainError
from .fuzzy import clamp, fuzzy_is_zero, require_positive_tolerance
from .range_domain import BoundType, Range
from .univariate import LinearFunction
from .vectors import Pose2D, Rotation2D, Vector2D


def sample_parameters(domain: Range, step_size: float, tolerance: float) -> List[float]:
    """按步长离散化定义域，始终包含两个端点

    与上界距离不超过容差的采样点被上界替代，避免出现极短的最后一段。

    Args:
        domain: 有界定义域
        step_size: 采样步长
        tolerance: 容差

    Returns:
        升序排列的参数列表
    """
    if step_size <= 0.0:
        raise ValueError(f"采样步长必须为正数: {step_size}")
    lower, upper = domain.lower, domain.upper
    parameters = np.arange(lower, upper, step_size).tolist()
    if len(parameters) > 1 and upper - parameters[-1] <= tolerance:
        parameters.pop()
    parameters.append(upper)
    return parameters


class AbstractCurve2D(ABC):
    """二维曲线的基类

    子类实现局部坐标系中的位姿计算，基类负责定义域检查和仿射放置。
    """

    def __init__(self, tolerance: float, affine_sequence: AffineSequence2D = None):
        require_positive_tolerance(tolerance)
        self.tolerance = tolerance
        self.affine_sequence = affine_sequence if affine_sequence is not None else AffineSequence2D.empty()

    @property
    @abstractmethod
    def domain(self) -> Range:
        pass

    @property
    def length(self) -> float:
        return self.domain.length

    @cached_property
    def affine(self) -> Affine2D:
        return self.affine_sequence.solve()

    @cached_property
    def _affine_rotation(self) -> Rotation2D:
        return self.affine.extract_rotation()

    @abstractmethod
    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        """计算局部坐标系中的位姿，curve_position已保证位于定义域内"""

    def _checked_position(self, curve_position: float) -> float:
        if not self.domain.fuzzy_contains(curve_position, self.tolerance):
            raise OutOfDomainError(
                f"曲线参数 {curve_position} 不在定义域 {self.domain} 内（容差 {self.tolerance}）")
        return clamp(curve_position, self.domain.lower, self.domain.upper)

    def calculate_pose_global_cs(self, curve_position: float) -> Pose2D:
        """计算全局坐标系中的位姿

        Raises:
            OutOfDomainError: 参数超出定义域（含容差）
        """
        local_pose = self.calculate_pose_local_cs(self._checked_position(curve_position))
        return Pose2D(self.affine.transform(local_pose.point), local_pose.rotation + self._affine_rotation)

    def calculate_point_global_cs(self, curve_position: float) -> Vector2D:
        return self.calculate_pose_global_cs(curve_position).point

    def calculate_rotation_global_cs(self, curve_position: float) -> Rotation2D:
        return self.calculate_pose_global_cs(curve_position).rotation

    def calculate_point_list_global_cs(self, step_size: float) -> List[Vector2D]:
        return [self.calculate_point_global_cs(s)
                for s in sample_parameters(self.domain, step_size, self.tolerance)]

    def to_linestring(self, step_size: float) -> LineString:
        return LineString([p.to_tuple() for p in self.calculate_point_list_global_cs(step_size)])


class _SegmentCurve2D(AbstractCurve2D):
    """长度确定、局部参数域为 [0, length) 或 [0, length] 的曲线段"""

    def __init__(self, length: float, tolerance: float, affine_sequence: AffineSequence2D = None,
                 end_bound_type: BoundType = BoundType.CLOSED):
        super().__init__(tolerance, affine_sequence)
        if not math.isfinite(length) or length <= tolerance:
            raise CurveBuildError(f"曲线段长度必须大于容差: length={length}, tolerance={tolerance}")
        self._length = float(length)
        self.end_bound_type = end_bound_type
        self._domain = Range.closed_x(0.0, self._length, end_bound_type)

    @property
    def domain(self) -> Range:
        return self._domain

    @property
    def length(self) -> float:
        return self._length


class LineSegment2D(_SegmentCurve2D):
    """直线段，局部坐标系中沿x轴"""

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        return Pose2D(Vector2D(curve_position, 0.0), Rotation2D(0.0))


class Arc2D(_SegmentCurve2D):
    """圆弧，曲率为正时左转"""

    def __init__(self, curvature: float, length: float, tolerance: float,
                 affine_sequence: AffineSequence2D = None, end_bound_type: BoundType = BoundType.CLOSED):
        super().__init__(length, tolerance, affine_sequence, end_bound_type)
        self.curvature = float(curvature)

    @property
    def radius(self) -> float:
        return math.inf if self.curvature == 0.0 else 1.0 / abs(self.curvature)

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        return _arc_pose(self.curvature, curve_position)


def _arc_pose(curvature: float, curve_position: float) -> Pose2D:
    if curvature == 0.0:
        return Pose2D(Vector2D(curve_position, 0.0), Rotation2D(0.0))

    angle = curvature * curve_position
    x = math.sin(angle) / curvature
    # 1 - cos(angle) = 2 sin^2(angle / 2)，避免小角度时的相消误差
    y = 2.0 * math.sin(angle / 2.0) ** 2 / curvature
    return Pose2D(Vector2D(x, y), Rotation2D(angle))


class SpiralSegment2D(_SegmentCurve2D):
    """螺旋线（回旋线）段，曲率沿弧长线性变化

    通过菲涅尔积分计算标准回旋线，再平移旋转到起点曲率对应的位置。
    """

    def __init__(self, curvature_function: LinearFunction, tolerance: float,
                 affine_sequence: AffineSequence2D = None, end_bound_type: BoundType = BoundType.CLOSED):
        domain = curvature_function.domain
        if domain.lower != 0.0 or not domain.has_upper_bound():
            raise CurveBuildError(f"螺旋线曲率函数的定义域必须为 [0, length]: {domain}")
        super().__init__(domain.upper, tolerance, affine_sequence, end_bound_type)
        self.curvature_function = curvature_function

    @property
    def curvature_start(self) -> float:
        return self.curvature_function.intercept

    @property
    def curvature_end(self) -> float:
        return self.curvature_function.slope * self.length + self.curvature_function.intercept

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        curvature_dot = self.curvature_function.slope
        curvature_start = self.curvature_start

        if fuzzy_is_zero(curvature_dot * self.length, self.tolerance):
            return _arc_pose(curvature_start, curve_position)

        # 在标准回旋线上对应起点曲率的位置
        t_start = curvature_start / curvature_dot
        start_x, start_y, start_heading = _standard_clothoid(t_start, curvature_dot)
        end_x, end_y, end_heading = _standard_clothoid(t_start + curve_position, curvature_dot)

        dx, dy = end_x - start_x, end_y - start_y
        cos_h, sin_h = math.cos(start_heading), math.sin(start_heading)
        x = cos_h * dx + sin_h * dy
        y = -sin_h * dx + cos_h * dy
        return Pose2D(Vector2D(x, y), Rotation2D(end_heading - start_heading))


def _standard_clothoid(t: float, curvature_dot: float):
    """曲率为 curvature_dot * t 的标准回旋线在参数t处的点与航向角"""
    scale = math.sqrt(math.pi / abs(curvature_dot))
    fresnel_s, fresnel_c = fresnel(t / scale)
    x = scale * float(fresnel_c)
    y = math.copysign(1.0, curvature_dot) * scale * float(fresnel_s)
    heading = 0.5 * curvature_dot * t * t
    return x, y, heading


class CubicCurve2D(_SegmentCurve2D):
    """三次多项式曲线 y = a + b*x + c*x^2 + d*x^3（局部坐标系）"""

    def __init__(self, coefficients: Sequence[float], length: float, tolerance: float,
                 affine_sequence: AffineSequence2D = None, end_bound_type: BoundType = BoundType.CLOSED):
        super().__init__(length, tolerance, affine_sequence, end_bound_type)
        if len(coefficients) != 4:
            raise CurveBuildError(f"三次多项式需要4个系数: {list(coefficients)}")
        self.coefficients = tuple(float(c) for c in coefficients)

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        a, b, c, d = self.coefficients
        x = curve_position
        y = a + b * x + c * x * x + d * x * x * x
        slope = b + 2 * c * x + 3 * d * x * x
        return Pose2D(Vector2D(x, y), Rotation2D(math.atan(slope)))


class ParametricCubicCurve2D(_SegmentCurve2D):
    """参数三次多项式曲线 u(p), v(p)，p ∈ [0, length]"""

    def __init__(self, coefficients_u: Sequence[float], coefficients_v: Sequence[float], length: float,
                 tolerance: float, affine_sequence: AffineSequence2D = None,
                 end_bound_type: BoundType = BoundType.CLOSED):
        super().__init__(length, tolerance, affine_sequence, end_bound_type)
        if len(coefficients_u) != 4 or len(coefficients_v) != 4:
            raise CurveBuildError("参数三次多项式的u和v各需要4个系数")
        self.coefficients_u = tuple(float(c) for c in coefficients_u)
        self.coefficients_v = tuple(float(c) for c in coefficients_v)

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        p = curve_position
        a_u, b_u, c_u, d_u = self.coefficients_u
        a_v, b_v, c_v, d_v = self.coefficients_v

        u = a_u + b_u * p + c_u * p * p + d_u * p * p * p
        v = a_v + b_v * p + c_v * p * p + d_v * p * p * p
        du = b_u + 2 * c_u * p + 3 * d_u * p * p
        dv = b_v + 2 * c_v * p + 3 * d_v * p * p
        return Pose2D(Vector2D(u, v), Rotation2D(math.atan2(dv, du)))


class ParameterTransformedCurve2D(AbstractCurve2D):
    """对参数进行变换后再在基础曲线上求值，例如归一化的参数三次多项式"""

    def __init__(self, base_curve: AbstractCurve2D, parameter_transformation: Callable[[float], float],
                 domain: Range):
        super().__init__(base_curve.tolerance, base_curve.affine_sequence)
        self.base_curve = base_curve
        self.parameter_transformation = parameter_transformation
        self._domain = domain

    @property
    def domain(self) -> Range:
        return self._domain

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        base_position = self.base_curve._checked_position(self.parameter_transformation(curve_position))
        return self.base_curve.calculate_pose_local_cs(base_position)
