#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
曲线构建器
由平面视图几何记录构建道路参考线的组合曲线，以及重复对象使用的横向平移曲线。

构建过程中发现的输入质量问题（零长度几何段、声明长度与起点不一致）不会导致失败，
而是作为警告信息返回，由调用方决定如何记录。

作者: xodr-geometry项目组
版本: 1.0.0
"""

from typing import Dict, List, Sequence, Tuple, Union

from .affine_transform import Affine2D, AffineSequence2D
from .composite_curve import CompositeCurve2D, LateralTranslatedCurve2D, SectionedCurve2D
from .curve2d import (
    AbstractCurve2D,
    Arc2D,
    CubicCurve2D,
    LineSegment2D,
    ParameterTransformedCurve2D,
    ParametricCubicCurve2D,
    SpiralSegment2D,
)
from .curve3d import Curve3D
from .errors import CurveBuildError, DomainMismatchError, EmptyCurveError
from .fuzzy import DEFAULT_TOLERANCE, fuzzy_equals, require_positive_tolerance
from .plan_view import GeometryKind, PlanViewGeometry, RepeatDefinition, select_geometry_kind
from .range_domain import BoundType, Range
from .univariate import LinearFunction
from .vectors import Vector2D


class Curve2DBuilder:
    """平面曲线构建器"""

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        require_positive_tolerance(tolerance)
        self.tolerance = tolerance

    def build_curve_from_plan_view(self, geometries: Sequence[Union[PlanViewGeometry, Dict]],
                                   offset: Vector2D = Vector2D.ZERO) -> Tuple[CompositeCurve2D, List[str]]:
        """由平面视图几何记录构建组合曲线

        Args:
            geometries: 按s升序排列的几何记录（PlanViewGeometry或解析器字典）
            offset: 施加在所有几何段上的平移

        Returns:
            (组合曲线, 警告信息列表)

        Raises:
            EmptyCurveError: 没有长度大于容差的几何记录
            CurveBuildError: 起点不是严格递增
        """
        warnings = []
        records = [g if isinstance(g, PlanViewGeometry) else PlanViewGeometry.from_dict(g) for g in geometries]
        if not records:
            raise EmptyCurveError("没有平面视图几何记录")

        valid_records = [r for r in records if r.length > self.tolerance]
        if len(valid_records) < len(records):
            warnings.append(f"平面视图包含 {len(records) - len(valid_records)} 个长度不大于容差的几何段，已忽略")
        if not valid_records:
            raise EmptyCurveError("过滤零长度几何段后没有有效的平面视图几何记录")

        absolute_starts = [r.s for r in valid_records]
        for previous, following in zip(absolute_starts, absolute_starts[1:]):
            if following <= previous:
                raise CurveBuildError(f"几何段起点必须严格递增: {previous} >= {following}")

        absolute_domains = [Range.closed_open(a, b) for a, b in zip(absolute_starts, absolute_starts[1:])]
        absolute_domains.append(Range.closed(absolute_starts[-1], absolute_starts[-1] + valid_records[-1].length))

        curve_members = []
        last_index = len(valid_records) - 1
        for index, (record, domain) in enumerate(zip(valid_records, absolute_domains)):
            end_bound_type = BoundType.CLOSED if index == last_index else BoundType.OPEN
            if not fuzzy_equals(record.length, domain.length, self.tolerance):
                warnings.append(f"几何段 (s={record.s}) 的长度 {record.length} 与下一段起点不一致，"
                                f"使用计算长度 {domain.length}")
            curve_members.append(self.build_plan_view_geometry(record, domain.length, end_bound_type, offset))

        curve = CompositeCurve2D(curve_members, absolute_domains, absolute_starts, self.tolerance)
        return curve, warnings

    def build_plan_view_geometry(self, geometry: PlanViewGeometry, length: float,
                                 end_bound_type: BoundType = BoundType.OPEN,
                                 offset: Vector2D = Vector2D.ZERO) -> AbstractCurve2D:
        """构建单个几何段，类型按select_geometry_kind()的优先级选择"""
        affine_sequence = AffineSequence2D.of(Affine2D.of_translation(offset), Affine2D.of_pose(geometry.start_pose))
        kind = select_geometry_kind(geometry)

        if kind is GeometryKind.SPIRAL:
            curvature_function = LinearFunction.of_inclusive_intercept_and_point(
                geometry.spiral.curv_start, length, geometry.spiral.curv_end)
            return SpiralSegment2D(curvature_function, self.tolerance, affine_sequence, end_bound_type)

        if kind is GeometryKind.ARC:
            return Arc2D(geometry.arc_curvature, length, self.tolerance, affine_sequence, end_bound_type)

        if kind is GeometryKind.POLY3:
            return CubicCurve2D(geometry.poly3, length, self.tolerance, affine_sequence, end_bound_type)

        if kind is GeometryKind.PARAM_POLY3_NORMALIZED:
            base_curve = ParametricCubicCurve2D(geometry.param_poly3.coefficients_u,
                                                geometry.param_poly3.coefficients_v,
                                                1.0, self.tolerance, affine_sequence, end_bound_type)
            return ParameterTransformedCurve2D(base_curve, lambda s: s / length,
                                               Range.closed_x(0.0, length, end_bound_type))

        if kind is GeometryKind.PARAM_POLY3_ARC_LENGTH:
            return ParametricCubicCurve2D(geometry.param_poly3.coefficients_u, geometry.param_poly3.coefficients_v,
                                          length, self.tolerance, affine_sequence, end_bound_type)

        return LineSegment2D(length, self.tolerance, affine_sequence, end_bound_type)

    def build_lateral_translated_curve(self, repeat: RepeatDefinition,
                                       reference_line: Curve3D) -> LateralTranslatedCurve2D:
        """构建重复对象沿参考线移动的曲线

        Raises:
            DomainMismatchError: 重复对象的区间没有被参考线定义域包含
        """
        section = repeat.reference_line_section
        if not reference_line.curve_xy.domain.fuzzy_encloses(section, self.tolerance):
            raise DomainMismatchError(
                f"重复对象的区间 {section} 没有被参考线定义域 {reference_line.curve_xy.domain} 包含")

        sectioned_curve = SectionedCurve2D(reference_line.curve_xy, section)
        return LateralTranslatedCurve2D(sectioned_curve, repeat.lateral_offset_function, self.tolerance)


def build_composite(geometries: Sequence[Union[PlanViewGeometry, Dict]], offset: Vector2D = Vector2D.ZERO,
                    tolerance: float = DEFAULT_TOLERANCE) -> Tuple[CompositeCurve2D, List[str]]:
    """由平面视图几何记录构建组合曲线

    Returns:
        Tuple[CompositeCurve2D, List[str]]: 组合曲线和警告信息（过滤的零长度几何段、长度不一致），
            警告由调用方记录

    Raises:
        CurveBuildError: 没有有效几何段或起点不递增
    """
    return Curve2DBuilder(tolerance).build_curve_from_plan_view(geometries, offset)
