"""三维多边形模块"""

from typing import List, Sequence, Tuple

from shapely.geometry import Polygon as ShapelyPolygon

from .affine_transform import Affine3D
from .errors import DegenerateRingError
from .fuzzy import require_positive_tolerance
from .vertex_processing import calculate_normal, is_colinear
from .vectors import Vector3D


class Polygon3D:
    """三维平面多边形（网格面），顶点顺序决定法向方向

    Raises:
        DegenerateRingError: 顶点少于三个或全部共线
    """

    def __init__(self, vertices: Sequence[Vector3D], tolerance: float):
        require_positive_tolerance(tolerance)
        if len(vertices) < 3:
            raise DegenerateRingError(f"多边形至少需要三个顶点，实际为 {len(vertices)} 个")
        if is_colinear(vertices, tolerance):
            raise DegenerateRingError("多边形的顶点全部共线")
        self.vertices: Tuple[Vector3D, ...] = tuple(vertices)
        self.tolerance = tolerance

    def __len__(self) -> int:
        return len(self.vertices)

    def __eq__(self, other) -> bool:
        return isinstance(other, Polygon3D) and self.vertices == other.vertices

    def __hash__(self) -> int:
        return hash(self.vertices)

    def __repr__(self) -> str:
        return f"Polygon3D({[v.to_tuple() for v in self.vertices]})"

    @property
    def normal(self) -> Vector3D:
        return calculate_normal(self.vertices)

    def reversed(self) -> 'Polygon3D':
        return Polygon3D(list(reversed(self.vertices)), self.tolerance)

    def transformed(self, affine: Affine3D) -> 'Polygon3D':
        return Polygon3D(affine.transform_all(self.vertices), self.tolerance)

    def to_tuples(self) -> List[Tuple[float, float, float]]:
        return [v.to_tuple() for v in self.vertices]

    def to_shapely(self) -> ShapelyPolygon:
        return ShapelyPolygon(self.to_tuples())
