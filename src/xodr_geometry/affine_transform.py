"""仿射变换模块

二维/三维齐次矩阵表示的仿射变换（平移、旋转、非均匀缩放）及其组合序列。

约定：
- A.append(B) 等于矩阵乘积 A·B，即B在A的局部坐标系中作用。
  因此先平移再按起点位姿放置的序列写作 of(平移, 位姿)。
- 分解（提取平移、缩放、旋转）假设矩阵不含剪切分量，含剪切时抛出ValueError。
"""

import math
from typing import List, Sequence

import numpy as np

from .errors import SingularTransformError
from .vectors import Pose2D, Pose3D, Rotation2D, Rotation3D, Vector2D, Vector3D

# 判断矩阵奇异以及是否含剪切时使用的数值阈值
SINGULARITY_THRESHOLD = 1e-12
SHEAR_THRESHOLD = 1e-9


class _AffineBase:
    """二维和三维仿射变换的公共实现"""

    dimension = 0

    def __init__(self, matrix: np.ndarray):
        size = self.dimension + 1
        matrix = np.array(matrix, dtype=float)
        if matrix.shape != (size, size):
            raise ValueError(f"仿射矩阵维度必须为 {size}x{size}，实际为 {matrix.shape}")
        if not np.all(np.isfinite(matrix)):
            raise ValueError("仿射矩阵包含非有限数")
        expected_last_row = np.zeros(size)
        expected_last_row[-1] = 1.0
        if not np.allclose(matrix[-1], expected_last_row):
            raise ValueError(f"仿射矩阵最后一行必须为 {expected_last_row.tolist()}")
        matrix[-1] = expected_last_row
        matrix.setflags(write=False)
        self._matrix = matrix

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and np.array_equal(self._matrix, other._matrix)

    def __hash__(self) -> int:
        return hash(self._matrix.tobytes())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._matrix.tolist()})"

    @classmethod
    def identity(cls):
        return cls(np.identity(cls.dimension + 1))

    @classmethod
    def of(cls, *affines):
        """按给定顺序组合多个仿射变换

        Args:
            affines: 仿射变换，结果为 affines[0]·affines[1]·...

        Returns:
            组合后的单个仿射变换；不传参数时为单位变换
        """
        result = np.identity(cls.dimension + 1)
        for affine in affines:
            if not isinstance(affine, cls):
                raise TypeError(f"只能组合 {cls.__name__} 类型: {type(affine).__name__}")
            result = result @ affine.matrix
        return cls(result)

    def append(self, other):
        """返回 self·other"""
        if not isinstance(other, type(self)):
            raise TypeError(f"只能追加 {type(self).__name__} 类型: {type(other).__name__}")
        return type(self)(self._matrix @ other.matrix)

    @property
    def determinant(self) -> float:
        return float(np.linalg.det(self._matrix[:-1, :-1]))

    def is_invertible(self) -> bool:
        return abs(self.determinant) > SINGULARITY_THRESHOLD

    def inverse(self):
        """求逆变换

        Raises:
            SingularTransformError: 矩阵不可逆
        """
        if not self.is_invertible():
            raise SingularTransformError(f"仿射变换不可逆（行列式为 {self.determinant}）")
        return type(self)(np.linalg.inv(self._matrix))

    def _transform_array(self, coordinates: np.ndarray) -> np.ndarray:
        homogeneous = np.append(coordinates, 1.0)
        return (self._matrix @ homogeneous)[:-1]

    def _inverse_transform_array(self, coordinates: np.ndarray) -> np.ndarray:
        if not self.is_invertible():
            raise SingularTransformError(f"仿射变换不可逆（行列式为 {self.determinant}）")
        linear = self._matrix[:-1, :-1]
        translation = self._matrix[:-1, -1]
        return np.linalg.solve(linear, coordinates - translation)

    def extract_translation_array(self) -> np.ndarray:
        return self._matrix[:-1, -1].copy()

    def extract_scaling_array(self) -> np.ndarray:
        """提取各轴缩放系数（线性部分各列的范数）"""
        self._require_shear_free()
        return np.linalg.norm(self._matrix[:-1, :-1], axis=0)

    def extract_rotation_matrix(self) -> np.ndarray:
        scaling = self.extract_scaling_array()
        if np.any(scaling <= SINGULARITY_THRESHOLD):
            raise SingularTransformError("缩放系数为零，无法提取旋转")
        return self._matrix[:-1, :-1] / scaling

    def _require_shear_free(self) -> None:
        linear = self._matrix[:-1, :-1]
        gram = linear.T @ linear
        off_diagonal = gram - np.diag(np.diag(gram))
        scale = max(1.0, float(np.max(np.abs(np.diag(gram)))))
        if np.max(np.abs(off_diagonal)) > SHEAR_THRESHOLD * scale:
            raise ValueError("仿射矩阵含剪切分量，无法分解为平移、旋转和缩放")

    def to_list(self) -> List[float]:
        """按行展开的矩阵元素"""
        return self._matrix.flatten().tolist()

    def to_array(self) -> np.ndarray:
        return self._matrix.copy()


class Affine2D(_AffineBase):
    """二维仿射变换（3x3齐次矩阵）"""

    dimension = 2

    @classmethod
    def of_translation(cls, translation: Vector2D) -> 'Affine2D':
        matrix = np.identity(3)
        matrix[:2, 2] = translation.to_array()
        return cls(matrix)

    @classmethod
    def of_rotation(cls, rotation: Rotation2D) -> 'Affine2D':
        matrix = np.identity(3)
        matrix[:2, :2] = rotation.to_matrix()
        return cls(matrix)

    @classmethod
    def of_scaling(cls, scale_x: float, scale_y: float) -> 'Affine2D':
        return cls(np.diag([scale_x, scale_y, 1.0]))

    @classmethod
    def of_pose(cls, pose: Pose2D) -> 'Affine2D':
        """位姿对应的变换：先旋转，再平移到位姿点"""
        return cls.of(cls.of_translation(pose.point), cls.of_rotation(pose.rotation))

    def transform(self, point: Vector2D) -> Vector2D:
        return Vector2D.of(self._transform_array(point.to_array()))

    def inverse_transform(self, point: Vector2D) -> Vector2D:
        return Vector2D.of(self._inverse_transform_array(point.to_array()))

    def transform_rotation(self, rotation: Rotation2D) -> Rotation2D:
        return rotation + self.extract_rotation()

    def transform_pose(self, pose: Pose2D) -> Pose2D:
        return Pose2D(self.transform(pose.point), self.transform_rotation(pose.rotation))

    def extract_translation(self) -> Vector2D:
        return Vector2D.of(self.extract_translation_array())

    def extract_scaling(self) -> Vector2D:
        return Vector2D.of(self.extract_scaling_array())

    def extract_rotation(self) -> Rotation2D:
        rotation_matrix = self.extract_rotation_matrix()
        return Rotation2D(math.atan2(rotation_matrix[1, 0], rotation_matrix[0, 0]))

    def extract_rotation_affine(self) -> 'Affine2D':
        matrix = np.identity(3)
        matrix[:2, :2] = self.extract_rotation_matrix()
        return Affine2D(matrix)

    def to_affine3d(self) -> 'Affine3D':
        """嵌入到三维（z轴保持不变）"""
        matrix = np.identity(4)
        matrix[:2, :2] = self._matrix[:2, :2]
        matrix[:2, 3] = self._matrix[:2, 2]
        return Affine3D(matrix)


class Affine3D(_AffineBase):
    """三维仿射变换（4x4齐次矩阵）"""

    dimension = 3

    @classmethod
    def of_translation(cls, translation: Vector3D) -> 'Affine3D':
        matrix = np.identity(4)
        matrix[:3, 3] = translation.to_array()
        return cls(matrix)

    @classmethod
    def of_rotation(cls, rotation: Rotation3D) -> 'Affine3D':
        matrix = np.identity(4)
        matrix[:3, :3] = rotation.to_matrix()
        return cls(matrix)

    @classmethod
    def of_scaling(cls, scale_x: float, scale_y: float, scale_z: float) -> 'Affine3D':
        return cls(np.diag([scale_x, scale_y, scale_z, 1.0]))

    @classmethod
    def of_pose(cls, pose: Pose3D) -> 'Affine3D':
        return cls.of(cls.of_translation(pose.point), cls.of_rotation(pose.rotation))

    @classmethod
    def of_basis(cls, basis_x: Vector3D, basis_y: Vector3D, basis_z: Vector3D) -> 'Affine3D':
        """构造将点变换为新基下坐标的仿射变换

        Args:
            basis_x, basis_y, basis_z: 新基向量（在当前坐标系下表示）

        Raises:
            SingularTransformError: 基向量线性相关
        """
        matrix = np.identity(4)
        matrix[:3, 0] = basis_x.to_array()
        matrix[:3, 1] = basis_y.to_array()
        matrix[:3, 2] = basis_z.to_array()
        return cls(matrix).inverse()

    def transform(self, point: Vector3D) -> Vector3D:
        return Vector3D.of(self._transform_array(point.to_array()))

    def inverse_transform(self, point: Vector3D) -> Vector3D:
        return Vector3D.of(self._inverse_transform_array(point.to_array()))

    def transform_all(self, points: Sequence[Vector3D]) -> List[Vector3D]:
        if not points:
            return []
        coordinates = np.array([p.to_tuple() for p in points], dtype=float)
        transformed = coordinates @ self._matrix[:3, :3].T + self._matrix[:3, 3]
        return [Vector3D.of(row) for row in transformed]

    def extract_translation(self) -> Vector3D:
        return Vector3D.of(self.extract_translation_array())

    def extract_scaling(self) -> Vector3D:
        return Vector3D.of(self.extract_scaling_array())

    def extract_rotation(self) -> Rotation3D:
        return Rotation3D.from_matrix(self.extract_rotation_matrix())

    def extract_rotation_affine(self) -> 'Affine3D':
        matrix = np.identity(4)
        matrix[:3, :3] = self.extract_rotation_matrix()
        return Affine3D(matrix)


class _AffineSequenceBase:
    """有序的仿射变换序列，按从左到右的顺序折叠append"""

    affine_type = _AffineBase

    def __init__(self, affines: Sequence = ()):
        for affine in affines:
            if not isinstance(affine, self.affine_type):
                raise TypeError(f"序列元素必须为 {self.affine_type.__name__}: {type(affine).__name__}")
        self._affines = tuple(affines)

    @classmethod
    def of(cls, *affines):
        return cls(affines)

    @classmethod
    def empty(cls):
        return cls(())

    @property
    def affines(self) -> tuple:
        return self._affines

    def __len__(self) -> int:
        return len(self._affines)

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self._affines == other._affines

    def __hash__(self) -> int:
        return hash(self._affines)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._affines)})"

    def append_affine(self, affine):
        return type(self)(self._affines + (affine,))

    def solve(self):
        """折叠得到单个仿射变换；空序列为单位变换"""
        result = self.affine_type.identity()
        for affine in self._affines:
            result = result.append(affine)
        return result


class AffineSequence2D(_AffineSequenceBase):
    affine_type = Affine2D


class AffineSequence3D(_AffineSequenceBase):
    affine_type = Affine3D
