#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
区间模块测试

测试容差比较工具、Range和RangeSet。
"""

import math
import unittest
import sys
import os

# 添加src目录到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from xodr_geometry.fuzzy import (
    clamp,
    fuzzy_contains,
    fuzzy_equals,
    fuzzy_greater_than_or_equals,
    fuzzy_less_than_or_equals,
    normalize_angle,
    require_positive_tolerance,
)
from xodr_geometry.range_domain import BoundType, Range, RangeSet


class TestFuzzy(unittest.TestCase):
    """容差比较测试类"""

    def test_fuzzy_equals(self):
        """测试容差相等"""
        self.assertTrue(fuzzy_equals(1.0, 1.0 + 1e-8, 1e-7))
        self.assertFalse(fuzzy_equals(1.0, 1.0 + 1e-6, 1e-7))

    def test_fuzzy_less_than_or_equals(self):
        self.assertTrue(fuzzy_less_than_or_equals(1.0 + 1e-8, 1.0, 1e-7))
        self.assertFalse(fuzzy_less_than_or_equals(1.1, 1.0, 1e-7))
        self.assertTrue(fuzzy_greater_than_or_equals(1.0, 1.0 + 1e-8, 1e-7))
        self.assertFalse(fuzzy_greater_than_or_equals(1.0, 1.1, 1e-7))

    def test_fuzzy_contains(self):
        self.assertTrue(fuzzy_contains([0.0, 2.0, 5.0], 2.0 + 1e-9, 1e-7))
        self.assertFalse(fuzzy_contains([0.0, 2.0, 5.0], 3.0, 1e-7))

    def test_clamp_and_normalize_angle(self):
        self.assertEqual(clamp(5.0, 0.0, 2.0), 2.0)
        self.assertEqual(clamp(-1.0, 0.0, 2.0), 0.0)
        self.assertAlmostEqual(normalize_angle(-math.pi / 2), 1.5 * math.pi)
        self.assertAlmostEqual(normalize_angle(5 * math.pi), math.pi)

    def test_invalid_tolerance(self):
        """测试非法容差"""
        for tolerance in (0.0, -1e-7, float('nan'), float('inf')):
            with self.assertRaises(ValueError):
                require_positive_tolerance(tolerance)


class TestRange(unittest.TestCase):
    """Range测试类"""

    def test_length(self):
        self.assertEqual(Range.closed(1.0, 4.0).length, 3.0)
        self.assertEqual(Range.closed_open(1.0, 4.0).length, 3.0)
        self.assertEqual(Range.closed(2.0, 2.0).length, 0.0)

    def test_empty_range_has_no_length(self):
        """测试空区间没有长度"""
        empty = Range.open(2.0, 2.0)
        self.assertTrue(empty.is_empty())
        with self.assertRaises(ValueError):
            _ = empty.length

    def test_unbounded_range_has_no_length(self):
        with self.assertRaises(ValueError):
            _ = Range.at_least(0.0).length

    def test_invalid_bounds(self):
        """测试非法端点"""
        with self.assertRaises(ValueError):
            Range.closed(2.0, 1.0)
        with self.assertRaises(ValueError):
            Range(0.0, math.inf, BoundType.CLOSED, BoundType.CLOSED)

    def test_contains(self):
        half_open = Range.closed_open(0.0, 1.0)
        self.assertIn(0.0, half_open)
        self.assertIn(0.5, half_open)
        self.assertNotIn(1.0, half_open)
        self.assertIn(1.0, Range.closed(0.0, 1.0))
        self.assertIn(1e12, Range.all())

    def test_fuzzy_encloses(self):
        """测试容差包含"""
        outer = Range.closed(0.0, 10.0)
        self.assertTrue(outer.fuzzy_encloses(Range.closed(0.0, 10.0 + 1e-8), 1e-7))
        self.assertTrue(outer.fuzzy_encloses(Range.closed(-1e-8, 5.0), 1e-7))
        self.assertFalse(outer.fuzzy_encloses(Range.closed(0.0, 10.1), 1e-7))
        self.assertFalse(outer.encloses(Range.closed(0.0, 10.0 + 1e-8)))

    def test_encloses_respects_bound_types(self):
        self.assertFalse(Range.closed_open(0.0, 1.0).encloses(Range.closed(0.0, 1.0)))
        self.assertTrue(Range.closed(0.0, 1.0).encloses(Range.closed_open(0.0, 1.0)))

    def test_is_connected(self):
        """测试区间相连"""
        self.assertTrue(Range.closed_open(0.0, 1.0).is_connected(Range.closed(1.0, 2.0)))
        self.assertFalse(Range.closed_open(0.0, 1.0).is_connected(Range.open(1.0, 2.0)))
        self.assertFalse(Range.closed(0.0, 1.0).is_connected(Range.closed(1.5, 2.0)))

    def test_intersection(self):
        intersection = Range.closed(0.0, 5.0).intersection(Range.closed_open(3.0, 8.0))
        self.assertEqual(intersection, Range.closed(3.0, 5.0))
        self.assertIsNone(Range.closed(0.0, 1.0).intersection(Range.closed(2.0, 3.0)))

    def test_intersects(self):
        """测试闭-闭接触相交、闭-开接触不相交"""
        self.assertTrue(Range.closed(1.0, 1.3).intersects(Range.closed(1.3, 2.0)))
        self.assertFalse(Range.closed_open(1.0, 1.3).intersects(Range.closed(1.3, 2.0)))

    def test_span_and_shift(self):
        self.assertEqual(Range.closed(0.0, 1.0).span(Range.closed_open(4.0, 5.0)), Range.closed_open(0.0, 5.0))
        self.assertEqual(Range.closed_open(1.0, 2.0).shift(3.0), Range.closed_open(4.0, 5.0))

    def test_str(self):
        self.assertEqual(str(Range.closed_open(0.0, 1.0)), "[0.0, 1.0)")


class TestRangeSet(unittest.TestCase):
    """RangeSet测试类"""

    def test_contains(self):
        """测试包含值"""
        range_set = RangeSet.of(Range.closed_open(1.0, 1.3), Range.closed_open(10.0, 12.0), Range.closed(1.3, 2.0))
        self.assertTrue(range_set.contains(1.3))
        self.assertFalse(range_set.contains(5.0))
        self.assertFalse(range_set.contains(12.0))

    def test_union_of_disconnected_sets(self):
        """测试不相连区间集合的并集"""
        range_a = Range.closed_open(1.0, 1.3)
        range_b = Range.closed(1.4, 2.0)
        union = RangeSet.of(range_a).union(RangeSet.of(range_b))
        self.assertEqual(union.as_ranges(), [range_a, range_b])

    def test_union_of_connected_sets(self):
        """测试相连区间集合的并集"""
        union = RangeSet.of(Range.closed_open(1.0, 1.3)).union(RangeSet.of(Range.closed(1.3, 2.0)))
        self.assertEqual(union.as_ranges(), [Range.closed(1.0, 2.0)])

    def test_union_is_exact(self):
        """测试合并不使用容差"""
        union = RangeSet.of(Range.closed_open(0.0, 1.0), Range.closed(1.0 + 1e-12, 2.0))
        self.assertEqual(len(union), 2)

    def test_disconnected_sets_do_not_intersect(self):
        range_set_a = RangeSet.of(Range.closed_open(1.0, 1.3))
        range_set_b = RangeSet.of(Range.closed(1.4, 2.0))
        self.assertFalse(range_set_a.intersects(range_set_b))

    def test_connected_half_open_sets_do_not_intersect(self):
        range_set_a = RangeSet.of(Range.closed_open(1.0, 1.3))
        range_set_b = RangeSet.of(Range.closed(1.3, 2.0))
        self.assertFalse(range_set_a.intersects(range_set_b))

    def test_connected_closed_sets_intersect(self):
        range_set_a = RangeSet.of(Range.closed(1.0, 1.3))
        range_set_b = RangeSet.of(Range.closed(1.3, 2.0))
        self.assertTrue(range_set_a.intersects(range_set_b))

    def test_intersection_and_span(self):
        range_set = RangeSet.of(Range.closed(0.0, 2.0), Range.closed(5.0, 7.0))
        intersection = range_set.intersection(RangeSet.of(Range.closed(1.0, 6.0)))
        self.assertEqual(intersection.as_ranges(), [Range.closed(1.0, 2.0), Range.closed(5.0, 6.0)])
        self.assertEqual(range_set.span(), Range.closed(0.0, 7.0))

    def test_empty_ranges_are_ignored(self):
        self.assertTrue(RangeSet.of(Range.open(1.0, 1.0)).is_empty())
        with self.assertRaises(ValueError):
            RangeSet.empty().span()


if __name__ == '__main__':
    unittest.main()
