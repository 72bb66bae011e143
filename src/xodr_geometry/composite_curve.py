"""组合曲线与派生曲线模块

- CompositeCurve2D: 将多个异构曲线段按弧长首尾拼接为一条连续曲线
- SectionedCurve2D: 截取曲线的一个子区间，局部参数从0开始
- LateralTranslatedCurve2D: 沿法向按横向偏移函数平移的曲线
"""

import logging
from bisect import bisect_right
from typing import List, Sequence

from .errors import CurveBuildError, DomainMismatchError
from .fuzzy import clamp
from .curve2d import AbstractCurve2D
from .range_domain import BoundType, Range
from .univariate import StackedFunction, UnivariateFunction
from .vectors import Pose2D, Vector2D

logger = logging.getLogger(__name__)


class CompositeCurve2D(AbstractCurve2D):
    """组合曲线

    由有序、互不重叠的 (曲线段, 绝对定义域) 组成。除最后一段外，
    各段定义域均为左闭右开，所有定义域恰好覆盖 [s_min, s_max]。
    曲线段自身携带全局放置，组合曲线不再额外变换。
    """

    def __init__(self, curve_members: Sequence[AbstractCurve2D], absolute_domains: Sequence[Range],
                 absolute_starts: Sequence[float], tolerance: float):
        super().__init__(tolerance)
        if len(curve_members) == 0:
            raise CurveBuildError("组合曲线至少需要一个曲线段")
        if not (len(curve_members) == len(absolute_domains) == len(absolute_starts)):
            raise CurveBuildError("曲线段、定义域和起点的数量不一致")

        for index, (domain, start) in enumerate(zip(absolute_domains, absolute_starts)):
            if domain.lower != start:
                raise CurveBuildError(f"第 {index} 段的定义域 {domain} 与起点 {start} 不一致")
        for previous, following in zip(absolute_domains, absolute_domains[1:]):
            if previous.upper != following.lower or previous.upper_bound_type is not BoundType.OPEN:
                raise CurveBuildError(f"定义域 {previous} 与 {following} 没有首尾相接")

        self.curve_members: List[AbstractCurve2D] = list(curve_members)
        self.absolute_domains: List[Range] = list(absolute_domains)
        self.absolute_starts: List[float] = [float(s) for s in absolute_starts]
        self._domain = Range.closed_x(self.absolute_domains[0].lower,
                                      self.absolute_domains[-1].upper,
                                      self.absolute_domains[-1].upper_bound_type)
        logger.debug(f"组合曲线包含 {len(self.curve_members)} 个曲线段，定义域 {self._domain}")

    @property
    def domain(self) -> Range:
        return self._domain

    def __len__(self) -> int:
        return len(self.curve_members)

    def member_index(self, curve_position: float) -> int:
        """查找包含curve_position的曲线段索引（按起点有序查找）"""
        index = bisect_right(self.absolute_starts, curve_position) - 1
        return int(clamp(index, 0, len(self.curve_members) - 1))

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        index = self.member_index(curve_position)
        local_position = curve_position - self.absolute_domains[index].lower
        return self.curve_members[index].calculate_pose_global_cs(local_position)


class SectionedCurve2D(AbstractCurve2D):
    """曲线的子区间，参数 0 对应基础曲线上的 section.lower"""

    def __init__(self, base_curve: AbstractCurve2D, section: Range):
        super().__init__(base_curve.tolerance)
        if not base_curve.domain.fuzzy_encloses(section, base_curve.tolerance):
            raise DomainMismatchError(
                f"子区间 {section} 没有被曲线定义域 {base_curve.domain} 包含（容差 {base_curve.tolerance}）")
        self.base_curve = base_curve
        self.section = section
        self._domain = Range.closed_x(0.0, section.length, section.upper_bound_type)

    @property
    def domain(self) -> Range:
        return self._domain

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        return self.base_curve.calculate_pose_global_cs(self.section.lower + curve_position)


class LateralTranslatedCurve2D(AbstractCurve2D):
    """沿基础曲线左法向平移的曲线，偏移量为正时向左"""

    def __init__(self, base_curve: AbstractCurve2D, lateral_translation_function: UnivariateFunction,
                 tolerance: float):
        super().__init__(tolerance)
        self.base_curve = base_curve
        self.lateral_translation_function = lateral_translation_function

    @property
    def domain(self) -> Range:
        return self.base_curve.domain

    def calculate_pose_local_cs(self, curve_position: float) -> Pose2D:
        base_pose = self.base_curve.calculate_pose_global_cs(curve_position)
        offset = self.lateral_translation_function.value_fuzzy(curve_position, self.tolerance)
        normal = Vector2D.of(base_pose.rotation.to_matrix() @ Vector2D.Y_AXIS.to_array())
        return Pose2D(base_pose.point + normal * offset, base_pose.rotation)

    def add_lateral_translation(self, function: UnivariateFunction, factor: float = 1.0) -> 'LateralTranslatedCurve2D':
        """叠加额外的横向偏移 factor * function(s)，返回新曲线"""
        combined = StackedFunction([self.lateral_translation_function, function],
                                   operation=lambda values: values[0] + factor * values[1])
        return LateralTranslatedCurve2D(self.base_curve, combined, self.tolerance)


def evaluate(curve: AbstractCurve2D, arc_length: float) -> Pose2D:
    """在弧长arc_length处求曲线的全局位姿

    Raises:
        OutOfDomainError: arc_length超出曲线定义域（含容差）
    """
    return curve.calculate_pose_global_cs(arc_length)
