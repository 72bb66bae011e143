#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
仿射变换模块测试

测试Affine2D、Affine3D和仿射变换序列的构造、组合、变换与分解。
"""

import math
import unittest
import sys
import os

import numpy as np

# 添加src目录到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from xodr_geometry.affine_transform import Affine2D, Affine3D, AffineSequence2D, AffineSequence3D
from xodr_geometry.errors import SingularTransformError
from xodr_geometry.vectors import Pose2D, Pose3D, Rotation3D, Vector2D, Vector3D


class TestAffine3D(unittest.TestCase):
    """三维仿射变换测试类"""

    def assertVectorAlmostEqual(self, actual, expected, places=9):
        for a, e in zip(actual.to_tuple(), expected.to_tuple()):
            self.assertAlmostEqual(a, e, places=places)

    def test_translation_last_entry(self):
        """测试平移矩阵的最后一个元素为1"""
        affine = Affine3D.of_translation(Vector3D(1.0, 2.0, 3.0))
        self.assertEqual(affine.matrix[3][3], 1.0)

    def test_invalid_last_row(self):
        matrix = np.identity(4)
        matrix[3, 0] = 1.0
        with self.assertRaises(ValueError):
            Affine3D(matrix)

    def test_extract_translation(self):
        """测试提取平移"""
        self.assertEqual(Affine3D.identity().extract_translation(), Vector3D.ZERO)
        matrix = np.array([[1.0, 0.0, 0.0, 0.0],
                           [0.0, 1.0, 0.0, 3.0],
                           [0.0, 0.0, 1.0, 2.0],
                           [0.0, 0.0, 0.0, 1.0]])
        self.assertEqual(Affine3D(matrix).extract_translation(), Vector3D(0.0, 3.0, 2.0))

    def test_extract_scaling(self):
        """测试提取缩放"""
        affine = Affine3D.of_scaling(3.0, 2.0, 1.0)
        self.assertEqual(affine.extract_scaling(), Vector3D(3.0, 2.0, 1.0))

    def test_extract_rotation_affine(self):
        """测试在缩放和平移存在时提取旋转"""
        heading = math.pi / 2
        affine = Affine3D.of(Affine3D.of_scaling(3.0, 2.0, 1.0),
                             Affine3D.of_translation(Vector3D(3.0, 2.0, 1.0)),
                             Affine3D.of_rotation(Rotation3D(heading)))
        expected = np.array([[math.cos(heading), -math.sin(heading), 0.0, 0.0],
                             [math.sin(heading), math.cos(heading), 0.0, 0.0],
                             [0.0, 0.0, 1.0, 0.0],
                             [0.0, 0.0, 0.0, 1.0]])
        np.testing.assert_allclose(affine.extract_rotation_affine().to_array(), expected, atol=1e-12)

    def test_decomposition_requires_shear_free_matrix(self):
        """测试含剪切分量的矩阵无法分解"""
        matrix = np.identity(4)
        matrix[0, 1] = 0.5
        with self.assertRaises(ValueError):
            Affine3D(matrix).extract_scaling()

    def test_append(self):
        """测试追加变换"""
        affine_a = Affine3D.of_translation(Vector3D(1.0, 2.0, 3.0))
        affine_b = Affine3D.of_scaling(2.0, 3.0, 4.0)
        expected = [2.0, 0.0, 0.0, 1.0,
                    0.0, 3.0, 0.0, 2.0,
                    0.0, 0.0, 4.0, 3.0,
                    0.0, 0.0, 0.0, 1.0]
        self.assertEqual(affine_a.append(affine_b).to_list(), expected)

    def test_append_associativity(self):
        """测试组合满足结合律"""
        a = Affine3D.of_pose(Pose3D(Vector3D(1.0, -2.0, 0.5), Rotation3D(0.3, 0.1, -0.2)))
        b = Affine3D.of_scaling(2.0, 0.5, 1.5)
        c = Affine3D.of_translation(Vector3D(-4.0, 1.0, 2.0))
        point = Vector3D(0.7, -1.3, 2.2)
        left = a.append(b).append(c).transform(point)
        right = a.append(b.append(c)).transform(point)
        self.assertVectorAlmostEqual(left, right)

    def test_round_trip(self):
        """测试正变换与逆变换互逆"""
        affine = Affine3D.of(Affine3D.of_translation(Vector3D(5.0, 1.0, -2.0)),
                             Affine3D.of_rotation(Rotation3D(1.2, -0.4, 0.3)),
                             Affine3D.of_scaling(2.0, 3.0, 0.5))
        for point in (Vector3D.ZERO, Vector3D(1.0, 2.0, 3.0), Vector3D(-7.5, 0.25, 11.0)):
            self.assertVectorAlmostEqual(affine.inverse_transform(affine.transform(point)), point)
            self.assertVectorAlmostEqual(affine.inverse().transform(affine.transform(point)), point)

    def test_translation(self):
        translation = Vector3D(1.0, 2.0, 3.0)
        affine = Affine3D.of_translation(translation)
        self.assertEqual(affine.transform(Vector3D.ZERO), translation)
        self.assertVectorAlmostEqual(affine.inverse_transform(Vector3D.ZERO), -translation)

    def test_singular_transform(self):
        """测试奇异矩阵求逆失败"""
        affine = Affine3D.of_scaling(1.0, 0.0, 1.0)
        self.assertFalse(affine.is_invertible())
        with self.assertRaises(SingularTransformError):
            affine.inverse()
        with self.assertRaises(SingularTransformError):
            affine.inverse_transform(Vector3D(1.0, 1.0, 1.0))

    def test_heading_rotation(self):
        """测试航向角旋转"""
        affine = Affine3D.of_rotation(Rotation3D(math.pi / 2, 0.0, 0.0))
        self.assertVectorAlmostEqual(affine.transform(Vector3D.X_AXIS), Vector3D(0.0, 1.0, 0.0))

    def test_pitch_rotation(self):
        """测试俯仰角旋转"""
        affine = Affine3D.of_rotation(Rotation3D(0.0, math.pi / 2, 0.0))
        self.assertVectorAlmostEqual(affine.transform(Vector3D.X_AXIS), Vector3D(0.0, 0.0, -1.0))

    def test_roll_rotation(self):
        affine = Affine3D.of_rotation(Rotation3D(0.0, 0.0, math.pi / 2))
        self.assertVectorAlmostEqual(affine.transform(Vector3D.Y_AXIS), Vector3D(0.0, 0.0, 1.0))

    def test_rotation_based_on_new_basis(self):
        """测试新基下的坐标"""
        affine = Affine3D.of_basis(Vector3D(-1.0, 1.0, 0.0), Vector3D(-1.0, 0.0, 1.0), Vector3D(1.0, 1.0, 1.0))
        self.assertVectorAlmostEqual(affine.transform(Vector3D.X_AXIS), Vector3D(-1.0 / 3.0, -1.0 / 3.0, 1.0 / 3.0))

    def test_extract_rotation(self):
        rotation = Rotation3D(0.4, -0.2, 0.1)
        extracted = Affine3D.of_pose(Pose3D(Vector3D(1.0, 2.0, 3.0), rotation)).extract_rotation()
        self.assertAlmostEqual(extracted.heading, rotation.heading)
        self.assertAlmostEqual(extracted.pitch, rotation.pitch)
        self.assertAlmostEqual(extracted.roll, rotation.roll)

    def test_to_list(self):
        """测试按行展开"""
        affine = Affine3D.of_translation(Vector3D(1.0, 2.0, 3.0))
        expected = [1.0, 0.0, 0.0, 1.0,
                    0.0, 1.0, 0.0, 2.0,
                    0.0, 0.0, 1.0, 3.0,
                    0.0, 0.0, 0.0, 1.0]
        self.assertEqual(affine.to_list(), expected)

    def test_transform_all(self):
        affine = Affine3D.of_translation(Vector3D(0.0, 0.0, 1.0))
        self.assertEqual(affine.transform_all([Vector3D.ZERO, Vector3D.X_AXIS]),
                         [Vector3D(0.0, 0.0, 1.0), Vector3D(1.0, 0.0, 1.0)])
        self.assertEqual(affine.transform_all([]), [])


class TestAffine2D(unittest.TestCase):
    """二维仿射变换测试类"""

    def test_pose(self):
        """测试位姿变换：先旋转再平移"""
        affine = Affine2D.of_pose(Pose2D.of(2.0, 1.0, math.pi / 2))
        point = affine.transform(Vector2D(1.0, 0.0))
        self.assertAlmostEqual(point.x, 2.0)
        self.assertAlmostEqual(point.y, 2.0)
        self.assertAlmostEqual(affine.extract_rotation().angle, math.pi / 2)

    def test_round_trip(self):
        affine = Affine2D.of(Affine2D.of_pose(Pose2D.of(-3.0, 4.0, 2.5)), Affine2D.of_scaling(2.0, 0.5))
        point = Vector2D(1.5, -2.0)
        result = affine.inverse_transform(affine.transform(point))
        self.assertAlmostEqual(result.x, point.x)
        self.assertAlmostEqual(result.y, point.y)

    def test_transform_pose(self):
        affine = Affine2D.of_pose(Pose2D.of(0.0, 0.0, 0.5))
        pose = affine.transform_pose(Pose2D.of(1.0, 0.0, 0.25))
        self.assertAlmostEqual(pose.heading, 0.75)
        self.assertAlmostEqual(pose.point.x, math.cos(0.5))

    def test_to_affine3d(self):
        affine = Affine2D.of_translation(Vector2D(1.0, 2.0)).to_affine3d()
        self.assertEqual(affine.transform(Vector3D(0.0, 0.0, 5.0)), Vector3D(1.0, 2.0, 5.0))


class TestAffineSequence(unittest.TestCase):
    """仿射变换序列测试类"""

    def test_empty_sequence_is_identity(self):
        self.assertEqual(AffineSequence3D.empty().solve(), Affine3D.identity())
        self.assertEqual(AffineSequence2D.of().solve(), Affine2D.identity())

    def test_solve_folds_left_to_right(self):
        """测试序列按从左到右的顺序组合"""
        offset = Affine2D.of_translation(Vector2D(100.0, 0.0))
        start_pose = Affine2D.of_pose(Pose2D.of(1.0, 1.0, math.pi))
        solved = AffineSequence2D.of(offset, start_pose).solve()
        self.assertEqual(solved, offset.append(start_pose))
        point = solved.transform(Vector2D(1.0, 0.0))
        self.assertAlmostEqual(point.x, 100.0)
        self.assertAlmostEqual(point.y, 1.0)

    def test_append_affine(self):
        sequence = AffineSequence3D.of(Affine3D.of_translation(Vector3D(1.0, 0.0, 0.0)))
        extended = sequence.append_affine(Affine3D.of_translation(Vector3D(0.0, 1.0, 0.0)))
        self.assertEqual(len(sequence), 1)
        self.assertEqual(len(extended), 2)
        self.assertEqual(extended.solve().extract_translation(), Vector3D(1.0, 1.0, 0.0))

    def test_type_check(self):
        with self.assertRaises(TypeError):
            AffineSequence3D.of(Affine2D.identity())


if __name__ == '__main__':
    unittest.main()
