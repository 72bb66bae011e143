"""向量、旋转与位姿模块

提供二维/三维向量、旋转（航向角、俯仰角、横滚角）以及位姿的值对象。
所有对象构造后不可修改，运算返回新的实例。角度统一使用弧度，
逆时针（左转）为正。
"""

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np
from scipy.spatial.transform import Rotation as ScipyRotation

from .fuzzy import fuzzy_equals, is_finite_number, normalize_angle


@dataclass(frozen=True)
class Vector2D:
    """二维向量"""

    x: float
    y: float

    def __post_init__(self):
        if not (is_finite_number(self.x) and is_finite_number(self.y)):
            raise ValueError(f"向量坐标必须为有限数: ({self.x}, {self.y})")

    def __add__(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x - other.x, self.y - other.y)

    def __neg__(self) -> 'Vector2D':
        return Vector2D(-self.x, -self.y)

    def __mul__(self, factor: float) -> 'Vector2D':
        return Vector2D(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    @property
    def norm(self) -> float:
        return math.hypot(self.x, self.y)

    def dot(self, other: 'Vector2D') -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: 'Vector2D') -> float:
        """二维叉积（z分量）"""
        return self.x * other.y - self.y * other.x

    def normalized(self) -> 'Vector2D':
        norm = self.norm
        if norm == 0.0:
            raise ValueError("零向量无法归一化")
        return Vector2D(self.x / norm, self.y / norm)

    def angle(self) -> float:
        """相对于x轴的方向角 [0, 2π)"""
        return normalize_angle(math.atan2(self.y, self.x))

    def distance(self, other: 'Vector2D') -> float:
        return (self - other).norm

    def fuzzy_equals(self, other: 'Vector2D', tolerance: float) -> bool:
        return fuzzy_equals(self.x, other.x, tolerance) and fuzzy_equals(self.y, other.y, tolerance)

    def to_vector3d(self, z: float = 0.0) -> 'Vector3D':
        return Vector3D(self.x, self.y, z)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    def to_tuple(self) -> Tuple[float, float]:
        return self.x, self.y

    @classmethod
    def of(cls, values: Iterable[float]) -> 'Vector2D':
        x, y = (float(v) for v in values)
        return cls(x, y)


Vector2D.ZERO = Vector2D(0.0, 0.0)
Vector2D.X_AXIS = Vector2D(1.0, 0.0)
Vector2D.Y_AXIS = Vector2D(0.0, 1.0)


@dataclass(frozen=True)
class Vector3D:
    """三维向量"""

    x: float
    y: float
    z: float

    def __post_init__(self):
        if not (is_finite_number(self.x) and is_finite_number(self.y) and is_finite_number(self.z)):
            raise ValueError(f"向量坐标必须为有限数: ({self.x}, {self.y}, {self.z})")

    def __add__(self, other: 'Vector3D') -> 'Vector3D':
        return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: 'Vector3D') -> 'Vector3D':
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> 'Vector3D':
        return Vector3D(-self.x, -self.y, -self.z)

    def __mul__(self, factor: float) -> 'Vector3D':
        return Vector3D(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> 'Vector3D':
        return Vector3D(self.x / divisor, self.y / divisor, self.z / divisor)

    @property
    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def dot(self, other: 'Vector3D') -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: 'Vector3D') -> 'Vector3D':
        return Vector3D(self.y * other.z - self.z * other.y,
                        self.z * other.x - self.x * other.z,
                        self.x * other.y - self.y * other.x)

    def normalized(self) -> 'Vector3D':
        norm = self.norm
        if norm == 0.0:
            raise ValueError("零向量无法归一化")
        return self / norm

    def angle(self, other: 'Vector3D') -> float:
        """两个向量之间的夹角 [0, π]

        Raises:
            ValueError: 任一向量为零向量
        """
        norm_product = self.norm * other.norm
        if norm_product == 0.0:
            raise ValueError("零向量之间的夹角没有定义")
        cos_angle = self.dot(other) / norm_product
        return math.acos(max(-1.0, min(1.0, cos_angle)))

    def distance(self, other: 'Vector3D') -> float:
        return (self - other).norm

    def fuzzy_equals(self, other: 'Vector3D', tolerance: float) -> bool:
        return (fuzzy_equals(self.x, other.x, tolerance) and
                fuzzy_equals(self.y, other.y, tolerance) and
                fuzzy_equals(self.z, other.z, tolerance))

    def to_vector2d(self) -> Vector2D:
        return Vector2D(self.x, self.y)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def to_tuple(self) -> Tuple[float, float, float]:
        return self.x, self.y, self.z

    @classmethod
    def of(cls, values: Iterable[float]) -> 'Vector3D':
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)


Vector3D.ZERO = Vector3D(0.0, 0.0, 0.0)
Vector3D.X_AXIS = Vector3D(1.0, 0.0, 0.0)
Vector3D.Y_AXIS = Vector3D(0.0, 1.0, 0.0)
Vector3D.Z_AXIS = Vector3D(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Rotation2D:
    """二维旋转，angle为弧度"""

    angle: float

    def __add__(self, other: 'Rotation2D') -> 'Rotation2D':
        return Rotation2D(self.angle + other.angle)

    def __sub__(self, other: 'Rotation2D') -> 'Rotation2D':
        return Rotation2D(self.angle - other.angle)

    @property
    def normalized_angle(self) -> float:
        return normalize_angle(self.angle)

    def to_matrix(self) -> np.ndarray:
        c, s = math.cos(self.angle), math.sin(self.angle)
        return np.array([[c, -s], [s, c]], dtype=float)

    def to_rotation3d(self) -> 'Rotation3D':
        return Rotation3D(heading=self.angle)


@dataclass(frozen=True)
class Rotation3D:
    """三维旋转

    按航向角（绕z轴）、俯仰角（绕y轴）、横滚角（绕x轴）组合，
    矩阵为 Rz(heading) · Ry(pitch) · Rx(roll)。
    """

    heading: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0

    def to_matrix(self) -> np.ndarray:
        return ScipyRotation.from_euler('ZYX', [self.heading, self.pitch, self.roll]).as_matrix()

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> 'Rotation3D':
        heading, pitch, roll = ScipyRotation.from_matrix(matrix).as_euler('ZYX')
        return cls(float(heading), float(pitch), float(roll))


@dataclass(frozen=True)
class Pose2D:
    """二维位姿：位置 + 朝向"""

    point: Vector2D
    rotation: Rotation2D

    @property
    def heading(self) -> float:
        return self.rotation.angle

    @classmethod
    def of(cls, x: float, y: float, heading: float) -> 'Pose2D':
        return cls(Vector2D(x, y), Rotation2D(heading))


@dataclass(frozen=True)
class Pose3D:
    """三维位姿：位置 + 旋转"""

    point: Vector3D
    rotation: Rotation3D

    @classmethod
    def of_pose2d(cls, pose: Pose2D, z: float = 0.0) -> 'Pose3D':
        return cls(pose.point.to_vector3d(z), pose.rotation.to_rotation3d())
