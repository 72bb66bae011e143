"""容差比较工具

所有几何算法都通过调用方提供的容差进行比较，避免浮点数的直接相等判断。
"""

import math
from typing import Sequence

# 默认容差（米）
DEFAULT_TOLERANCE = 1e-7


def fuzzy_equals(a: float, b: float, tolerance: float) -> bool:
    """判断两个数在容差范围内是否相等

    Args:
        a: 第一个数
        b: 第二个数
        tolerance: 容差

    Returns:
        bool: |a - b| <= tolerance
    """
    if a == b:
        return True
    return abs(a - b) <= tolerance


def fuzzy_less_than_or_equals(a: float, b: float, tolerance: float) -> bool:
    """a <= b（允许容差）"""
    return a < b or fuzzy_equals(a, b, tolerance)


def fuzzy_greater_than_or_equals(a: float, b: float, tolerance: float) -> bool:
    """a >= b（允许容差）"""
    return a > b or fuzzy_equals(a, b, tolerance)


def fuzzy_is_zero(value: float, tolerance: float) -> bool:
    return abs(value) <= tolerance


def fuzzy_contains(values: Sequence[float], value: float, tolerance: float) -> bool:
    """判断序列中是否存在与value在容差内相等的元素"""
    return any(fuzzy_equals(v, value, tolerance) for v in values)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def normalize_angle(angle: float) -> float:
    """将角度归一化到 [0, 2π)"""
    normalized = math.fmod(angle, 2.0 * math.pi)
    if normalized < 0.0:
        normalized += 2.0 * math.pi
    return normalized


def is_finite_number(value: float) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def require_positive_tolerance(tolerance: float) -> None:
    """检查容差是否为正的有限数

    Raises:
        ValueError: 容差非法
    """
    if not is_finite_number(tolerance) or tolerance <= 0.0:
        raise ValueError(f"容差必须为正数: {tolerance}")
