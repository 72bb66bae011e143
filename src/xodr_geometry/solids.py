"""实体构建模块

长方体和圆柱体，用于道路对象（护栏立柱、路灯杆、建筑等）的简化表示。
实体底面位于局部坐标系的z=0平面，所有面的法向朝外。
"""

from typing import List, Sequence

from .affine_transform import AffineSequence3D
from .errors import DegenerateSurfaceError
from .polygon import Polygon3D
from .surfaces import AbstractGeometry3D, circle_vertices
from .vectors import Vector3D


def extrude_polygons(base_vertices: Sequence[Vector3D], height: float, tolerance: float) -> List[Polygon3D]:
    """将逆时针的底面轮廓沿z轴拉伸为棱柱的全部面

    Args:
        base_vertices: z=0平面内逆时针排列的底面顶点
        height: 拉伸高度
        tolerance: 容差

    Returns:
        List[Polygon3D]: 底面、顶面和侧面
    """
    offset = Vector3D(0.0, 0.0, height)
    top_vertices = [v + offset for v in base_vertices]

    polygons = [Polygon3D(list(reversed(base_vertices)), tolerance), Polygon3D(top_vertices, tolerance)]
    count = len(base_vertices)
    for index in range(count):
        following = (index + 1) % count
        polygons.append(Polygon3D([base_vertices[index], base_vertices[following],
                                   top_vertices[following], top_vertices[index]], tolerance))
    return polygons


class Cuboid3D(AbstractGeometry3D):
    """长方体，底面中心位于局部原点，长度沿x轴、宽度沿y轴"""

    def __init__(self, length: float, width: float, height: float, tolerance: float,
                 affine_sequence: AffineSequence3D = None):
        super().__init__(tolerance, affine_sequence)
        if min(length, width, height) <= tolerance:
            raise DegenerateSurfaceError(
                f"长方体的尺寸必须大于容差: length={length}, width={width}, height={height}")
        self.length = length
        self.width = width
        self.height = height

    def calculate_polygons_local_cs(self) -> List[Polygon3D]:
        half_length, half_width = self.length / 2.0, self.width / 2.0
        base = [Vector3D(-half_length, -half_width, 0.0), Vector3D(half_length, -half_width, 0.0),
                Vector3D(half_length, half_width, 0.0), Vector3D(-half_length, half_width, 0.0)]
        return extrude_polygons(base, self.height, self.tolerance)


class Cylinder3D(AbstractGeometry3D):
    """圆柱体，底面圆心位于局部原点，侧面用number_slices个矩形近似"""

    def __init__(self, radius: float, height: float, tolerance: float, affine_sequence: AffineSequence3D = None,
                 number_slices: int = 16):
        super().__init__(tolerance, affine_sequence)
        if radius <= tolerance or height <= tolerance:
            raise DegenerateSurfaceError(f"圆柱体的半径和高度必须大于容差: radius={radius}, height={height}")
        if number_slices < 3:
            raise ValueError(f"圆柱体至少需要分为3段: {number_slices}")
        self.radius = radius
        self.height = height
        self.number_slices = number_slices

    def calculate_polygons_local_cs(self) -> List[Polygon3D]:
        return extrude_polygons(circle_vertices(self.radius, self.number_slices), self.height, self.tolerance)
