"""平面视图原始记录模块

解析器输出的几何记录（纯数据，无行为）以及重复道路对象的定义。
记录格式与OpenDRIVE解析器的字典一致:
    {'s', 'x', 'y', 'hdg', 'length', 'type', 'params'}
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import RecordFormatError
from .fuzzy import fuzzy_is_zero, is_finite_number
from .range_domain import Range
from .univariate import LinearFunction
from .vectors import Pose2D, Pose3D, Rotation3D, Vector3D


class GeometryKind(Enum):
    """平面几何段类型，声明顺序即构建时的优先级"""
    SPIRAL = 'spiral'
    ARC = 'arc'
    POLY3 = 'poly3'
    PARAM_POLY3_NORMALIZED = 'paramPoly3_normalized'
    PARAM_POLY3_ARC_LENGTH = 'paramPoly3_arcLength'
    LINE = 'line'


@dataclass(frozen=True)
class SpiralDefinition:
    curv_start: float
    curv_end: float


@dataclass(frozen=True)
class ParamPoly3Definition:
    """参数三次多项式，normalized为True时参数范围为 [0, 1]（OpenDRIVE的pRange="normalized"）"""
    coefficients_u: Tuple[float, float, float, float]
    coefficients_v: Tuple[float, float, float, float]
    normalized: bool = True


@dataclass(frozen=True)
class PlanViewGeometry:
    """平面视图中的一个几何记录

    一个记录可以同时携带多种描述，构建时按select_geometry_kind()的优先级选择。
    没有任何描述时按直线处理。
    """
    s: float
    x: float
    y: float
    hdg: float
    length: float
    spiral: Optional[SpiralDefinition] = None
    arc_curvature: Optional[float] = None
    poly3: Optional[Tuple[float, float, float, float]] = None
    param_poly3: Optional[ParamPoly3Definition] = None

    def __post_init__(self):
        for name in ('s', 'x', 'y', 'hdg', 'length'):
            if not is_finite_number(getattr(self, name)):
                raise ValueError(f"几何记录的 {name} 必须为有限数值: {getattr(self, name)}")
        if self.length < 0.0:
            raise ValueError(f"几何记录的长度不能为负: {self.length}")

    @property
    def start_pose(self) -> Pose2D:
        return Pose2D.of(self.x, self.y, self.hdg)

    @classmethod
    def from_dict(cls, geometry: Dict) -> 'PlanViewGeometry':
        """由解析器输出的字典构造

        Args:
            geometry: 包含s、x、y、hdg、length、type和params的字典

        Returns:
            PlanViewGeometry: 几何记录

        Raises:
            ValueError: 几何类型未知
            RecordFormatError: 记录不是字典或字段类型错误
        """
        if not isinstance(geometry, dict):
            raise RecordFormatError(f"几何记录必须为字典: {type(geometry).__name__}")
        try:
            return cls._from_fields(geometry)
        except (TypeError, AttributeError) as e:
            raise RecordFormatError(f"几何记录格式错误: {e}") from e

    @classmethod
    def _from_fields(cls, geometry: Dict) -> 'PlanViewGeometry':
        geometry_type = geometry.get('type') or 'line'
        params = geometry.get('params') or {}
        kwargs = {}

        if geometry_type == 'spiral':
            kwargs['spiral'] = SpiralDefinition(float(params.get('curvStart', 0.0)),
                                                float(params.get('curvEnd', 0.0)))
        elif geometry_type == 'arc':
            kwargs['arc_curvature'] = float(params.get('curvature', 0.0))
        elif geometry_type == 'poly3':
            kwargs['poly3'] = tuple(float(params.get(key, 0.0)) for key in ('a', 'b', 'c', 'd'))
        elif geometry_type in ('paramPoly3', 'parampoly3'):
            kwargs['param_poly3'] = ParamPoly3Definition(
                tuple(float(params.get(key, 0.0)) for key in ('aU', 'bU', 'cU', 'dU')),
                tuple(float(params.get(key, 0.0)) for key in ('aV', 'bV', 'cV', 'dV')),
                params.get('pRange', 'normalized') != 'arcLength')
        elif geometry_type != 'line':
            raise ValueError(f"未知的几何类型: {geometry_type}")

        return cls(s=float(geometry.get('s', 0.0)), x=float(geometry.get('x', 0.0)),
                   y=float(geometry.get('y', 0.0)), hdg=float(geometry.get('hdg', 0.0)),
                   length=float(geometry.get('length', 0.0)), **kwargs)


def select_geometry_kind(geometry: PlanViewGeometry) -> GeometryKind:
    """按优先级 spiral > arc > poly3 > paramPoly3 > line 选择几何段类型"""
    if geometry.spiral is not None:
        return GeometryKind.SPIRAL
    if geometry.arc_curvature is not None:
        return GeometryKind.ARC
    if geometry.poly3 is not None:
        return GeometryKind.POLY3
    if geometry.param_poly3 is not None:
        if geometry.param_poly3.normalized:
            return GeometryKind.PARAM_POLY3_NORMALIZED
        return GeometryKind.PARAM_POLY3_ARC_LENGTH
    return GeometryKind.LINE


@dataclass(frozen=True)
class RepeatDefinition:
    """沿参考线重复的道路对象（护栏、路缘石、墙体等）

    各属性从起点值线性变化到终点值，变化区间为 [s, s + length]。
    """
    s: float
    length: float
    distance: float = 0.0
    t_start: float = 0.0
    t_end: float = 0.0
    width_start: float = 0.0
    width_end: float = 0.0
    height_start: float = 0.0
    height_end: float = 0.0
    z_offset_start: float = 0.0
    z_offset_end: float = 0.0

    def __post_init__(self):
        if self.length <= 0.0:
            raise ValueError(f"重复对象的长度必须为正数: {self.length}")

    @classmethod
    def from_dict(cls, repeat: Dict) -> 'RepeatDefinition':
        """由OpenDRIVE风格的属性字典构造（tStart、widthStart、zOffsetStart等）"""
        return cls(s=float(repeat.get('s', 0.0)), length=float(repeat.get('length', 0.0)),
                   distance=float(repeat.get('distance', 0.0)),
                   t_start=float(repeat.get('tStart', 0.0)), t_end=float(repeat.get('tEnd', 0.0)),
                   width_start=float(repeat.get('widthStart', 0.0)), width_end=float(repeat.get('widthEnd', 0.0)),
                   height_start=float(repeat.get('heightStart', 0.0)),
                   height_end=float(repeat.get('heightEnd', 0.0)),
                   z_offset_start=float(repeat.get('zOffsetStart', 0.0)),
                   z_offset_end=float(repeat.get('zOffsetEnd', 0.0)))

    @property
    def reference_line_section(self) -> Range:
        return Range.closed(self.s, self.s + self.length)

    def _linear(self, start: float, end: float) -> LinearFunction:
        return LinearFunction.of_inclusive_intercept_and_point(start, self.length, end)

    @property
    def lateral_offset_function(self) -> LinearFunction:
        return self._linear(self.t_start, self.t_end)

    @property
    def width_function(self) -> LinearFunction:
        return self._linear(self.width_start, self.width_end)

    @property
    def height_function(self) -> LinearFunction:
        return self._linear(self.height_start, self.height_end)

    @property
    def z_offset_function(self) -> LinearFunction:
        return self._linear(self.z_offset_start, self.z_offset_end)

    def is_continuous(self, tolerance: float) -> bool:
        """distance为0表示连续对象，否则为按间距重复的单个对象"""
        return fuzzy_is_zero(self.distance, tolerance)

    def is_horizontal_surface(self, tolerance: float) -> bool:
        """连续、有宽度、无高度的水平面（如路面标线区域）"""
        return (self.is_continuous(tolerance)
                and not (fuzzy_is_zero(self.width_start, tolerance) and fuzzy_is_zero(self.width_end, tolerance))
                and fuzzy_is_zero(self.height_start, tolerance) and fuzzy_is_zero(self.height_end, tolerance))

    def is_vertical_surface(self, tolerance: float) -> bool:
        """连续、有高度、无宽度的竖直面（如墙体、隔音屏）"""
        return (self.is_continuous(tolerance)
                and fuzzy_is_zero(self.width_start, tolerance) and fuzzy_is_zero(self.width_end, tolerance)
                and not (fuzzy_is_zero(self.height_start, tolerance) and fuzzy_is_zero(self.height_end, tolerance)))


@dataclass(frozen=True)
class RoadObjectDefinition:
    """道路对象记录

    位置以参考线坐标 (s, t, zOffset) 给出，朝向相对于参考线在s处的切线方向。
    outline为局部坐标系 (u, v, z) 中的轮廓角点。
    """
    object_id: str
    s: float
    t: float = 0.0
    z_offset: float = 0.0
    hdg: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0
    radius: float = 0.0
    outline: Tuple[Vector3D, ...] = ()
    repeat: Optional[RepeatDefinition] = None

    @classmethod
    def from_dict(cls, road_object: Dict) -> 'RoadObjectDefinition':
        """由OpenDRIVE风格的属性字典构造

        Args:
            road_object: 包含id、s、t、zOffset、hdg等属性的字典，
                可选的outline为 [{'u', 'v', 'z'}, ...]，repeat为重复定义字典

        Returns:
            RoadObjectDefinition: 道路对象记录

        Raises:
            RecordFormatError: 记录不是字典或字段类型错误
        """
        if not isinstance(road_object, dict):
            raise RecordFormatError(f"道路对象记录必须为字典: {type(road_object).__name__}")
        try:
            return cls._from_fields(road_object)
        except (TypeError, AttributeError) as e:
            raise RecordFormatError(f"道路对象记录格式错误: {e}") from e

    @classmethod
    def _from_fields(cls, road_object: Dict) -> 'RoadObjectDefinition':
        outline = tuple(Vector3D(float(c.get('u', 0.0)), float(c.get('v', 0.0)), float(c.get('z', 0.0)))
                        for c in road_object.get('outline') or [])
        repeat = road_object.get('repeat')
        return cls(object_id=str(road_object.get('id', '')), s=float(road_object.get('s', 0.0)),
                   t=float(road_object.get('t', 0.0)), z_offset=float(road_object.get('zOffset', 0.0)),
                   hdg=float(road_object.get('hdg', 0.0)), pitch=float(road_object.get('pitch', 0.0)),
                   roll=float(road_object.get('roll', 0.0)), length=float(road_object.get('length', 0.0)),
                   width=float(road_object.get('width', 0.0)), height=float(road_object.get('height', 0.0)),
                   radius=float(road_object.get('radius', 0.0)), outline=outline,
                   repeat=RepeatDefinition.from_dict(repeat) if repeat else None)

    @property
    def reference_line_relative_pose(self) -> Pose3D:
        """相对于参考线在s处的局部坐标系的位姿"""
        return Pose3D(Vector3D(0.0, self.t, self.z_offset),
                      Rotation3D(heading=self.hdg, pitch=self.pitch, roll=self.roll))

    def is_rectangle(self, tolerance: float) -> bool:
        return self.length > tolerance and self.width > tolerance and self.height <= tolerance

    def is_cuboid(self, tolerance: float) -> bool:
        return self.length > tolerance and self.width > tolerance and self.height > tolerance

    def is_circle(self, tolerance: float) -> bool:
        return self.radius > tolerance and self.height <= tolerance

    def is_cylinder(self, tolerance: float) -> bool:
        return self.radius > tolerance and self.height > tolerance

    def local_corners(self) -> List[Vector3D]:
        return list(self.outline)
