"""一元函数模块

描述沿参考线参数s变化的量：高程剖面、横向偏移、对象宽度/高度等。
多项式系数按OpenDRIVE约定 f(ds) = a + b*ds + c*ds^2 + d*ds^3。
"""

from abc import ABC, abstractmethod
from bisect import bisect_right
from typing import List, Sequence

from numpy.polynomial import Polynomial

from .errors import OutOfDomainError
from .fuzzy import clamp
from .range_domain import Range


class UnivariateFunction(ABC):
    """定义在某个区间上的一元函数"""

    @property
    @abstractmethod
    def domain(self) -> Range:
        pass

    @abstractmethod
    def _value_unbounded(self, x: float) -> float:
        pass

    def value(self, x: float) -> float:
        """在x处求值

        Raises:
            OutOfDomainError: x不在定义域内
        """
        if not self.domain.contains(x):
            raise OutOfDomainError(f"参数 {x} 不在函数定义域 {self.domain} 内")
        return self._value_unbounded(x)

    def value_fuzzy(self, x: float, tolerance: float) -> float:
        """允许x在容差范围内超出定义域，超出部分按端点截断"""
        if not self.domain.fuzzy_contains(x, tolerance):
            raise OutOfDomainError(f"参数 {x} 不在函数定义域 {self.domain} 内（容差 {tolerance}）")
        return self._value_unbounded(clamp(x, self.domain.lower, self.domain.upper))

    def __call__(self, x: float) -> float:
        return self.value(x)


class ConstantFunction(UnivariateFunction):

    def __init__(self, constant: float, domain: Range = Range.all()):
        self.constant = float(constant)
        self._domain = domain

    @property
    def domain(self) -> Range:
        return self._domain

    def _value_unbounded(self, x: float) -> float:
        return self.constant


class LinearFunction(UnivariateFunction):
    """f(x) = slope * x + intercept"""

    def __init__(self, slope: float, intercept: float, domain: Range = Range.all()):
        self.slope = float(slope)
        self.intercept = float(intercept)
        self._domain = domain

    @classmethod
    def of_inclusive_intercept_and_point(cls, intercept: float, point_x: float, point_y: float) -> 'LinearFunction':
        """经过 (0, intercept) 和 (point_x, point_y) 的线性函数，定义域为 [0, point_x]

        Raises:
            ValueError: point_x 不为正
        """
        if point_x <= 0.0:
            raise ValueError(f"线性函数的终点横坐标必须为正: {point_x}")
        slope = (point_y - intercept) / point_x
        return cls(slope, intercept, Range.closed(0.0, point_x))

    @classmethod
    def of_inclusive_points(cls, x0: float, y0: float, x1: float, y1: float) -> 'LinearFunction':
        if x1 <= x0:
            raise ValueError(f"线性函数的两个端点必须满足 x0 < x1: {x0}, {x1}")
        slope = (y1 - y0) / (x1 - x0)
        return cls(slope, y0 - slope * x0, Range.closed(x0, x1))

    @property
    def domain(self) -> Range:
        return self._domain

    def _value_unbounded(self, x: float) -> float:
        return self.slope * x + self.intercept


class PolynomialFunction(UnivariateFunction):
    """多项式函数，coefficients按升幂排列（a, b, c, d）"""

    def __init__(self, coefficients: Sequence[float], domain: Range = Range.all()):
        if len(coefficients) == 0:
            raise ValueError("多项式系数不能为空")
        self.coefficients = tuple(float(c) for c in coefficients)
        self._polynomial = Polynomial(self.coefficients)
        self._domain = domain

    @property
    def domain(self) -> Range:
        return self._domain

    def _value_unbounded(self, x: float) -> float:
        return float(self._polynomial(x))

    def slope(self, x: float) -> float:
        return float(self._polynomial.deriv()(x))


class ConcatenatedFunction(UnivariateFunction):
    """分段函数：按起点升序排列的多个函数，每段以其起点为局部原点求值

    最后一段的定义域向右无限延伸，第一段之前的参数按定义域外处理。
    """

    def __init__(self, starts: Sequence[float], functions: Sequence[UnivariateFunction]):
        if len(starts) == 0 or len(starts) != len(functions):
            raise ValueError("分段函数的起点与函数数量必须一致且不为空")
        if any(b <= a for a, b in zip(starts, starts[1:])):
            raise ValueError(f"分段函数的起点必须严格递增: {list(starts)}")
        self.starts: List[float] = [float(s) for s in starts]
        self.functions = list(functions)
        self._domain = Range.at_least(self.starts[0])

    @classmethod
    def of_polynomials(cls, starts: Sequence[float], coefficients: Sequence[Sequence[float]]) -> 'ConcatenatedFunction':
        """由OpenDRIVE风格的 (s, a, b, c, d) 记录构造，例如高程剖面"""
        return cls(starts, [PolynomialFunction(c) for c in coefficients])

    @property
    def domain(self) -> Range:
        return self._domain

    def _value_unbounded(self, x: float) -> float:
        index = max(0, bisect_right(self.starts, x) - 1)
        return self.functions[index]._value_unbounded(x - self.starts[index])


class StackedFunction(UnivariateFunction):
    """多个函数按operation组合

    定义域为各函数定义域的交集；指定default_value时为包络区间，
    参数超出某个函数的定义域时该函数取default_value。
    """

    def __init__(self, functions: Sequence[UnivariateFunction], operation=sum, default_value: float = None):
        if len(functions) == 0:
            raise ValueError("组合函数至少需要一个函数")
        self.functions = list(functions)
        self.operation = operation
        self.default_value = default_value
        domain = self.functions[0].domain
        for function in self.functions[1:]:
            if default_value is not None:
                domain = domain.span(function.domain)
                continue
            intersection = domain.intersection(function.domain)
            if intersection is None:
                raise ValueError("组合函数的定义域没有交集")
            domain = intersection
        self._domain = domain

    @classmethod
    def of_sum(cls, *functions: UnivariateFunction, default_value: float = None) -> 'StackedFunction':
        return cls(functions, sum, default_value)

    @property
    def domain(self) -> Range:
        return self._domain

    def _value_unbounded(self, x: float) -> float:
        values = []
        for function in self.functions:
            try:
                values.append(function.value(x))
            except OutOfDomainError:
                if self.default_value is None:
                    raise
                values.append(self.default_value)
        return self.operation(values)


class SectionedUnivariateFunction(UnivariateFunction):
    """函数的子区间，参数 0 对应基础函数上的 section.lower"""

    def __init__(self, base_function: UnivariateFunction, section: Range, tolerance: float):
        if not base_function.domain.fuzzy_encloses(section, tolerance):
            raise OutOfDomainError(f"子区间 {section} 没有被函数定义域 {base_function.domain} 包含")
        self.base_function = base_function
        self.section = section
        self.tolerance = tolerance
        self._domain = Range.closed_x(0.0, section.length, section.upper_bound_type)

    @property
    def domain(self) -> Range:
        return self._domain

    def _value_unbounded(self, x: float) -> float:
        return self.base_function.value_fuzzy(self.section.lower + x, self.tolerance)
