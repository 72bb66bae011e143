"""三维曲线模块

由平面曲线和沿弧长变化的高度函数组成的三维曲线，例如带高程剖面的道路参考线。
"""

from typing import List

from shapely.geometry import LineString

from .affine_transform import Affine3D
from .curve2d import AbstractCurve2D, sample_parameters
from .range_domain import Range
from .univariate import ConstantFunction, UnivariateFunction
from .vectors import Pose3D, Rotation3D, Vector3D


class Curve3D:
    """三维曲线

    Args:
        curve_xy: 平面投影曲线
        height_function: 高度函数 z(s)
        torsion_function: 绕切线方向的横滚角函数（超高），为空时为0
    """

    def __init__(self, curve_xy: AbstractCurve2D, height_function: UnivariateFunction = None,
                 torsion_function: UnivariateFunction = None):
        self.curve_xy = curve_xy
        self.height_function = height_function if height_function is not None else ConstantFunction(0.0)
        self.torsion_function = torsion_function if torsion_function is not None else ConstantFunction(0.0)

    @property
    def domain(self) -> Range:
        return self.curve_xy.domain

    @property
    def length(self) -> float:
        return self.curve_xy.length

    @property
    def tolerance(self) -> float:
        return self.curve_xy.tolerance

    def calculate_point_global_cs(self, curve_position: float) -> Vector3D:
        point_xy = self.curve_xy.calculate_point_global_cs(curve_position)
        height = self.height_function.value_fuzzy(curve_position, self.tolerance)
        return point_xy.to_vector3d(height)

    def calculate_pose_global_cs(self, curve_position: float) -> Pose3D:
        pose_xy = self.curve_xy.calculate_pose_global_cs(curve_position)
        height = self.height_function.value_fuzzy(curve_position, self.tolerance)
        roll = self.torsion_function.value_fuzzy(curve_position, self.tolerance)
        return Pose3D(pose_xy.point.to_vector3d(height), Rotation3D(heading=pose_xy.heading, roll=roll))

    def calculate_affine(self, curve_position: float) -> Affine3D:
        """参考线上某点的局部坐标系，用于放置道路对象"""
        return Affine3D.of_pose(self.calculate_pose_global_cs(curve_position))

    def calculate_point_list_global_cs(self, step_size: float) -> List[Vector3D]:
        return [self.calculate_point_global_cs(s)
                for s in sample_parameters(self.domain, step_size, self.tolerance)]

    def to_linestring(self, step_size: float) -> LineString:
        return LineString([p.to_tuple() for p in self.calculate_point_list_global_cs(step_size)])
