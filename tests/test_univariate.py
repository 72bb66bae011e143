#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
一元函数模块测试
"""

import unittest
import sys
import os

# 添加src目录到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from xodr_geometry.errors import OutOfDomainError
from xodr_geometry.range_domain import Range
from xodr_geometry.univariate import (
    ConcatenatedFunction,
    ConstantFunction,
    LinearFunction,
    PolynomialFunction,
    SectionedUnivariateFunction,
    StackedFunction,
)

TOLERANCE = 1e-7


class TestUnivariateFunctions(unittest.TestCase):
    """一元函数测试类"""

    def test_linear_function(self):
        """测试线性函数"""
        function = LinearFunction.of_inclusive_intercept_and_point(1.0, 4.0, 3.0)
        self.assertEqual(function.domain, Range.closed(0.0, 4.0))
        self.assertAlmostEqual(function.value(2.0), 2.0)

        function = LinearFunction.of_inclusive_points(2.0, 1.0, 4.0, 5.0)
        self.assertEqual(function.domain, Range.closed(2.0, 4.0))
        self.assertAlmostEqual(function(3.0), 3.0)
        with self.assertRaises(ValueError):
            LinearFunction.of_inclusive_points(4.0, 1.0, 2.0, 5.0)

    def test_out_of_domain(self):
        """测试定义域外求值"""
        function = LinearFunction.of_inclusive_intercept_and_point(0.0, 4.0, 4.0)
        with self.assertRaises(OutOfDomainError):
            function.value(4.0 + 1e-9)
        self.assertAlmostEqual(function.value_fuzzy(4.0 + 1e-9, TOLERANCE), 4.0)
        with self.assertRaises(OutOfDomainError):
            function.value_fuzzy(4.1, TOLERANCE)

    def test_polynomial_function(self):
        function = PolynomialFunction([1.0, 2.0, 0.0, 1.0])
        self.assertAlmostEqual(function.value(2.0), 13.0)
        self.assertAlmostEqual(function.slope(2.0), 14.0)

    def test_concatenated_function(self):
        """测试分段函数以每段起点为局部原点"""
        function = ConcatenatedFunction.of_polynomials([0.0, 10.0], [[0.0, 0.1], [1.0, 0.0, 0.01]])
        self.assertAlmostEqual(function.value(5.0), 0.5)
        self.assertAlmostEqual(function.value(10.0), 1.0)
        self.assertAlmostEqual(function.value(20.0), 2.0)
        self.assertEqual(function.domain, Range.at_least(0.0))
        with self.assertRaises(OutOfDomainError):
            function.value(-1.0)
        with self.assertRaises(ValueError):
            ConcatenatedFunction.of_polynomials([0.0, 0.0], [[0.0], [1.0]])

    def test_stacked_function(self):
        """测试函数求和"""
        first = LinearFunction.of_inclusive_points(0.0, 0.0, 10.0, 10.0)
        second = LinearFunction.of_inclusive_points(5.0, 1.0, 15.0, 1.0)
        stacked = StackedFunction.of_sum(first, second)
        self.assertEqual(stacked.domain, Range.closed(5.0, 10.0))
        self.assertAlmostEqual(stacked.value(6.0), 7.0)

        with_default = StackedFunction.of_sum(first, second, default_value=0.0)
        self.assertEqual(with_default.domain, Range.closed(0.0, 15.0))
        self.assertAlmostEqual(with_default.value(2.0), 2.0)
        self.assertAlmostEqual(with_default.value(12.0), 1.0)

    def test_disjoint_stacked_function(self):
        first = LinearFunction.of_inclusive_points(0.0, 0.0, 1.0, 1.0)
        second = LinearFunction.of_inclusive_points(2.0, 0.0, 3.0, 1.0)
        with self.assertRaises(ValueError):
            StackedFunction.of_sum(first, second)

    def test_sectioned_function(self):
        """测试截取子区间后参数从0开始"""
        base = LinearFunction.of_inclusive_points(0.0, 0.0, 10.0, 20.0)
        sectioned = SectionedUnivariateFunction(base, Range.closed(2.0, 6.0), TOLERANCE)
        self.assertEqual(sectioned.domain, Range.closed(0.0, 4.0))
        self.assertAlmostEqual(sectioned.value(0.0), 4.0)
        self.assertAlmostEqual(sectioned.value(4.0), 12.0)
        with self.assertRaises(OutOfDomainError):
            SectionedUnivariateFunction(base, Range.closed(8.0, 12.0), TOLERANCE)

    def test_constant_function(self):
        self.assertEqual(ConstantFunction(2.5).value(-1e9), 2.5)


if __name__ == '__main__':
    unittest.main()
