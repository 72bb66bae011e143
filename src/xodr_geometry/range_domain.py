"""区间与定义域模块

实数区间（开、闭、半开）以及由互不相交的区间组成的区间集合。
曲线与函数的定义域、参考线上的子区间都用Range表示。
"""

import math
from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional


class BoundType(Enum):
    """区间端点类型"""
    OPEN = 'open'
    CLOSED = 'closed'


@dataclass(frozen=True)
class Range:
    """实数区间

    约束：lower <= upper；无穷端点必须为开端点。
    端点相等且任一侧为开端点时区间为空。
    """

    lower: float
    upper: float
    lower_bound_type: BoundType = BoundType.CLOSED
    upper_bound_type: BoundType = BoundType.CLOSED

    def __post_init__(self):
        if math.isnan(self.lower) or math.isnan(self.upper):
            raise ValueError("区间端点不能为NaN")
        if self.lower > self.upper:
            raise ValueError(f"区间下界大于上界: [{self.lower}, {self.upper}]")
        if math.isinf(self.lower) and self.lower_bound_type is BoundType.CLOSED:
            raise ValueError("无穷下界必须为开端点")
        if math.isinf(self.upper) and self.upper_bound_type is BoundType.CLOSED:
            raise ValueError("无穷上界必须为开端点")

    # 构造方法

    @classmethod
    def closed(cls, lower: float, upper: float) -> 'Range':
        return cls(lower, upper, BoundType.CLOSED, BoundType.CLOSED)

    @classmethod
    def open(cls, lower: float, upper: float) -> 'Range':
        return cls(lower, upper, BoundType.OPEN, BoundType.OPEN)

    @classmethod
    def closed_open(cls, lower: float, upper: float) -> 'Range':
        return cls(lower, upper, BoundType.CLOSED, BoundType.OPEN)

    @classmethod
    def open_closed(cls, lower: float, upper: float) -> 'Range':
        return cls(lower, upper, BoundType.OPEN, BoundType.CLOSED)

    @classmethod
    def closed_x(cls, lower: float, upper: float, upper_bound_type: BoundType) -> 'Range':
        """下界闭合、上界类型由调用方指定的区间"""
        return cls(lower, upper, BoundType.CLOSED, upper_bound_type)

    @classmethod
    def at_least(cls, lower: float) -> 'Range':
        return cls(lower, math.inf, BoundType.CLOSED, BoundType.OPEN)

    @classmethod
    def all(cls) -> 'Range':
        return cls(-math.inf, math.inf, BoundType.OPEN, BoundType.OPEN)

    # 属性

    def is_empty(self) -> bool:
        return self.lower == self.upper and (
            self.lower_bound_type is BoundType.OPEN or self.upper_bound_type is BoundType.OPEN)

    @property
    def length(self) -> float:
        """区间长度 upper - lower

        Raises:
            ValueError: 区间为空或无界
        """
        if self.is_empty():
            raise ValueError(f"空区间没有长度: {self}")
        if math.isinf(self.lower) or math.isinf(self.upper):
            raise ValueError(f"无界区间没有长度: {self}")
        return self.upper - self.lower

    def has_lower_bound(self) -> bool:
        return not math.isinf(self.lower)

    def has_upper_bound(self) -> bool:
        return not math.isinf(self.upper)

    # 包含关系

    def contains(self, value: float) -> bool:
        if value < self.lower or value > self.upper:
            return False
        if value == self.lower and self.lower_bound_type is BoundType.OPEN:
            return False
        if value == self.upper and self.upper_bound_type is BoundType.OPEN:
            return False
        return True

    def __contains__(self, value: float) -> bool:
        return self.contains(value)

    def encloses(self, other: 'Range') -> bool:
        """other是否完全位于本区间内"""
        if other.is_empty():
            return self.lower <= other.lower and other.upper <= self.upper
        if other.lower < self.lower or other.upper > self.upper:
            return False
        if (other.lower == self.lower and self.lower_bound_type is BoundType.OPEN
                and other.lower_bound_type is BoundType.CLOSED):
            return False
        if (other.upper == self.upper and self.upper_bound_type is BoundType.OPEN
                and other.upper_bound_type is BoundType.CLOSED):
            return False
        return True

    def widened(self, tolerance: float) -> 'Range':
        """两侧各放宽tolerance后的闭区间（无穷端点保持开端点）"""
        lower_type = BoundType.OPEN if math.isinf(self.lower) else BoundType.CLOSED
        upper_type = BoundType.OPEN if math.isinf(self.upper) else BoundType.CLOSED
        return Range(self.lower - tolerance, self.upper + tolerance, lower_type, upper_type)

    def fuzzy_contains(self, value: float, tolerance: float) -> bool:
        return self.widened(tolerance).contains(value)

    def fuzzy_encloses(self, other: 'Range', tolerance: float) -> bool:
        """other是否位于本区间两侧各放宽tolerance后的范围内"""
        return self.widened(tolerance).encloses(other)

    # 区间运算

    def is_connected(self, other: 'Range') -> bool:
        """两个区间是否相交或精确相邻（存在同时被二者包含的区间，可以为空）"""
        first, second = (self, other) if self.lower <= other.lower else (other, self)
        if first.upper > second.lower:
            return True
        if first.upper < second.lower:
            return False
        return (first.upper_bound_type is BoundType.CLOSED or
                second.lower_bound_type is BoundType.CLOSED)

    def intersection(self, other: 'Range') -> Optional['Range']:
        """两个区间的交集；不相连时返回None，相连但只接触时可能返回空区间"""
        if not self.is_connected(other):
            return None
        lower, lower_type = _max_lower(self, other)
        upper, upper_type = _min_upper(self, other)
        if lower > upper:
            return None
        return Range(lower, upper, lower_type, upper_type)

    def intersects(self, other: 'Range') -> bool:
        intersection = self.intersection(other)
        return intersection is not None and not intersection.is_empty()

    def span(self, other: 'Range') -> 'Range':
        """包含两个区间的最小区间"""
        lower, lower_type = _min_lower(self, other)
        upper, upper_type = _max_upper(self, other)
        return Range(lower, upper, lower_type, upper_type)

    def shift(self, value: float) -> 'Range':
        return Range(self.lower + value, self.upper + value, self.lower_bound_type, self.upper_bound_type)

    def __str__(self) -> str:
        left = '[' if self.lower_bound_type is BoundType.CLOSED else '('
        right = ']' if self.upper_bound_type is BoundType.CLOSED else ')'
        return f"{left}{self.lower}, {self.upper}{right}"


def _min_lower(a: Range, b: Range):
    if a.lower != b.lower:
        return (a.lower, a.lower_bound_type) if a.lower < b.lower else (b.lower, b.lower_bound_type)
    closed = BoundType.CLOSED in (a.lower_bound_type, b.lower_bound_type)
    return a.lower, BoundType.CLOSED if closed else BoundType.OPEN


def _max_lower(a: Range, b: Range):
    if a.lower != b.lower:
        return (a.lower, a.lower_bound_type) if a.lower > b.lower else (b.lower, b.lower_bound_type)
    both_closed = a.lower_bound_type is BoundType.CLOSED and b.lower_bound_type is BoundType.CLOSED
    return a.lower, BoundType.CLOSED if both_closed else BoundType.OPEN


def _min_upper(a: Range, b: Range):
    if a.upper != b.upper:
        return (a.upper, a.upper_bound_type) if a.upper < b.upper else (b.upper, b.upper_bound_type)
    both_closed = a.upper_bound_type is BoundType.CLOSED and b.upper_bound_type is BoundType.CLOSED
    return a.upper, BoundType.CLOSED if both_closed else BoundType.OPEN


def _max_upper(a: Range, b: Range):
    if a.upper != b.upper:
        return (a.upper, a.upper_bound_type) if a.upper > b.upper else (b.upper, b.upper_bound_type)
    closed = BoundType.CLOSED in (a.upper_bound_type, b.upper_bound_type)
    return a.upper, BoundType.CLOSED if closed else BoundType.OPEN


class RangeSet:
    """由互不相交、按升序排列的非空区间组成的集合

    添加区间时与精确相连（重叠或相邻）的区间合并，不使用容差。
    """

    def __init__(self, ranges: Iterable[Range] = ()):
        self._ranges: List[Range] = []
        for r in ranges:
            self._add(r)

    @classmethod
    def of(cls, *ranges: Range) -> 'RangeSet':
        return cls(ranges)

    @classmethod
    def empty(cls) -> 'RangeSet':
        return cls()

    def _add(self, new_range: Range) -> None:
        if new_range.is_empty():
            return
        merged = new_range
        remaining = []
        for existing in self._ranges:
            if existing.is_connected(merged):
                merged = existing.span(merged)
            else:
                remaining.append(existing)
        remaining.append(merged)
        remaining.sort(key=lambda r: (r.lower, r.lower_bound_type is BoundType.OPEN))
        self._ranges = remaining

    def as_ranges(self) -> List[Range]:
        return list(self._ranges)

    def __len__(self) -> int:
        return len(self._ranges)

    def __iter__(self):
        return iter(self._ranges)

    def __eq__(self, other) -> bool:
        return isinstance(other, RangeSet) and self._ranges == other._ranges

    def __repr__(self) -> str:
        return f"RangeSet({', '.join(str(r) for r in self._ranges)})"

    def is_empty(self) -> bool:
        return not self._ranges

    def contains(self, value: float) -> bool:
        index = bisect_right([r.lower for r in self._ranges], value) - 1
        return index >= 0 and self._ranges[index].contains(value)

    def union(self, other: 'RangeSet') -> 'RangeSet':
        return RangeSet(self._ranges + other.as_ranges())

    def intersection(self, other: 'RangeSet') -> 'RangeSet':
        intersections = []
        for a in self._ranges:
            for b in other:
                intersection = a.intersection(b)
                if intersection is not None and not intersection.is_empty():
                    intersections.append(intersection)
        return RangeSet(intersections)

    def intersects(self, other: 'RangeSet') -> bool:
        """是否存在非空交集（闭区间端点接触算相交，闭-开接触不算）"""
        return not self.intersection(other).is_empty()

    def span(self) -> Range:
        if not self._ranges:
            raise ValueError("空区间集合没有包络区间")
        return self._ranges[0].span(self._ranges[-1])
