"""xodr-geometry - OpenDRIVE道路网络的参数化曲线与曲面几何内核

这个包将平面视图几何段、高程剖面和道路对象转换为统一三维坐标系下的几何模型。
主要模块包括：
- affine_transform: 二维/三维仿射变换及变换序列
- range_domain: 区间与区间集合
- curve2d / composite_curve / curve_builder: 曲线段、组合曲线及其构建
- surfaces / solids / surface_builder: 线性环、直纹面和基本实体
- triangulation: 三角剖分与朝向修正
- road_transformer: 按道路批量转换
"""

__version__ = "1.0.0"
__author__ = "xodr-geometry Team"

from .errors import (
    GeometryError,
    CurveBuildError,
    EmptyCurveError,
    DomainMismatchError,
    OutOfDomainError,
    DegenerateRingError,
    DegenerateSurfaceError,
    SingularTransformError,
    TriangulationError,
    ColinearTriangleError,
    TriangulationFailure,
    RecordFormatError,
)
from .vectors import Vector2D, Vector3D, Rotation2D, Rotation3D, Pose2D, Pose3D
from .affine_transform import Affine2D, Affine3D, AffineSequence2D, AffineSequence3D
from .range_domain import BoundType, Range, RangeSet
from .composite_curve import CompositeCurve2D, evaluate
from .curve3d import Curve3D
from .plan_view import PlanViewGeometry, RepeatDefinition, RoadObjectDefinition
from .curve_builder import Curve2DBuilder, build_composite
from .surfaces import LinearRing3D, ParametricBoundedSurface3D, build_linear_ring, build_parametric_bounded_surface
from .triangulation import Triangulator, triangulate
from .surface_builder import Surface3DBuilder, Solid3DBuilder
from .road_transformer import RoadGeometryTransformer, configure_logging

__all__ = [
    "GeometryError",
    "CurveBuildError",
    "EmptyCurveError",
    "DomainMismatchError",
    "OutOfDomainError",
    "DegenerateRingError",
    "DegenerateSurfaceError",
    "SingularTransformError",
    "TriangulationError",
    "ColinearTriangleError",
    "TriangulationFailure",
    "RecordFormatError",
    "Vector2D",
    "Vector3D",
    "Rotation2D",
    "Rotation3D",
    "Pose2D",
    "Pose3D",
    "Affine2D",
    "Affine3D",
    "AffineSequence2D",
    "AffineSequence3D",
    "BoundType",
    "Range",
    "RangeSet",
    "CompositeCurve2D",
    "evaluate",
    "Curve3D",
    "PlanViewGeometry",
    "RepeatDefinition",
    "RoadObjectDefinition",
    "Curve2DBuilder",
    "build_composite",
    "LinearRing3D",
    "ParametricBoundedSurface3D",
    "build_linear_ring",
    "build_parametric_bounded_surface",
    "Triangulator",
    "triangulate",
    "Surface3DBuilder",
    "Solid3DBuilder",
    "RoadGeometryTransformer",
    "configure_logging",
]
