"""道路几何转换模块

按道路批量构建几何：由平面视图和高程剖面构建参考线，再由道路对象记录构建曲面和实体。
每条道路独立构建，可以使用线程池并行处理；单条道路失败时跳过该道路并记录错误。
"""

import os
import math
import time
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .affine_transform import Affine3D
from .curve3d import Curve3D
from .curve_builder import Curve2DBuilder
from .errors import RecordFormatError
from .fuzzy import is_finite_number
from .plan_view import RoadObjectDefinition
from .polygon import Polygon3D
from .surface_builder import Solid3DBuilder, Surface3DBuilder
from .surfaces import AbstractGeometry3D
from .univariate import ConcatenatedFunction, ConstantFunction, UnivariateFunction
from .vectors import Vector2D

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(log_dir: Optional[str] = None, level: int = logging.INFO) -> None:
    """配置日志输出

    Args:
        log_dir: 日志目录，给定时写入该目录下的xodr_geometry.log，否则输出到控制台
        level: 日志级别
    """
    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(os.path.join(log_dir, 'xodr_geometry.log'), encoding='utf-8')
    else:
        handler = logging.StreamHandler()
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler])


@dataclass
class RoadGeometry:
    """单条道路的几何构建结果"""
    road_id: str
    reference_line: Curve3D
    geometries: List[AbstractGeometry3D] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def length(self) -> float:
        return self.reference_line.length

    def calculate_polygons_global_cs(self) -> List[Polygon3D]:
        return [polygon for geometry in self.geometries for polygon in geometry.calculate_polygons_global_cs()]


class RoadGeometryTransformer:
    """道路几何转换器

    协调曲线、曲面和实体构建器，完成从道路记录到几何对象的转换。
    """

    def __init__(self, config: Dict = None):
        """初始化转换器

        Args:
            config: 转换配置参数
        """
        # 默认配置
        self.config = {
            'tolerance': 1e-7,                      # 容差（米）
            'discretization_step_size': 0.3,        # 直纹面离散步长（米）
            'orientation_threshold': 0.75 * math.pi,  # 三角形朝向修正阈值（弧度）
            'circle_slices': 16,                    # 圆和圆柱的分段数
            'offset': (0.0, 0.0),                   # 平面视图的平移
            'concurrent_processing': True,          # 是否按道路并行处理
            'max_workers': None,                    # 线程数，None时由线程池决定
        }

        # 更新配置
        if config:
            self.config.update(config)

        tolerance = self.config['tolerance']
        self.curve_builder = Curve2DBuilder(tolerance)
        self.surface_builder = Surface3DBuilder(tolerance, self.config['discretization_step_size'],
                                                self.config['circle_slices'],
                                                self.config['orientation_threshold'])
        self.solid_builder = Solid3DBuilder(tolerance, self.config['circle_slices'])

        # 转换状态，每次transform()开始时重置
        self.conversion_stats = self._new_conversion_stats()

    @staticmethod
    def _new_conversion_stats() -> Dict:
        return {
            'input_roads': 0,
            'output_roads': 0,
            'total_length': 0,
            'conversion_time': 0,
            'errors': [],
            'warnings': []
        }

    def transform(self, roads: List[Dict]) -> List[RoadGeometry]:
        """转换所有道路

        Args:
            roads: 道路记录列表，格式与OpenDRIVE解析器输出一致
                （id、planView、elevationProfile，可选objects）

        Returns:
            List[RoadGeometry]: 成功构建的道路，保持输入顺序
        """
        start_time = time.time()
        logger.info(f"开始转换 {len(roads)} 条道路")
        self.conversion_stats = self._new_conversion_stats()
        self.conversion_stats['input_roads'] = len(roads)

        if self.config['concurrent_processing'] and len(roads) > 1:
            outcomes = self._transform_concurrently(roads)
        else:
            outcomes = [self._transform_road_safely(road) for road in roads]

        road_geometries = []
        for road_geometry, error in outcomes:
            if error is not None:
                self.conversion_stats['errors'].append(error)
                continue
            road_geometries.append(road_geometry)
            self.conversion_stats['total_length'] += road_geometry.length
            self.conversion_stats['warnings'].extend(
                f"道路 {road_geometry.road_id}: {message}" for message in road_geometry.warnings)

        self.conversion_stats['output_roads'] = len(road_geometries)
        self.conversion_stats['conversion_time'] = time.time() - start_time
        self._log_conversion_stats()
        return road_geometries

    def _transform_concurrently(self, roads: List[Dict]) -> List[Tuple[Optional[RoadGeometry], Optional[str]]]:
        outcomes: List[Tuple[Optional[RoadGeometry], Optional[str]]] = [(None, None)] * len(roads)
        with ThreadPoolExecutor(max_workers=self.config['max_workers']) as executor:
            futures = {executor.submit(self._transform_road_safely, road): index
                       for index, road in enumerate(roads)}
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()
        return outcomes

    def _transform_road_safely(self, road: Dict) -> Tuple[Optional[RoadGeometry], Optional[str]]:
        road_id = road.get('id', 'unknown') if isinstance(road, dict) else 'unknown'
        try:
            return self.transform_road(road), None
        except ValueError as e:
            logger.error(f"道路 {road_id} 几何构建失败，已跳过: {e}")
            return None, f"道路 {road_id}: {e}"

    def transform_road(self, road: Dict) -> RoadGeometry:
        """构建单条道路的几何

        单个道路对象构建失败时只跳过该对象并记录警告。对象的多边形在此处
        立即生成，剖分失败的对象同样被跳过。

        Raises:
            GeometryError: 参考线无法构建
            RecordFormatError: 道路记录缺少字段或字段类型错误
        """
        if not isinstance(road, dict):
            raise RecordFormatError(f"道路记录必须为字典: {type(road).__name__}")
        road_id = str(road.get('id', 'unknown'))
        try:
            reference_line, warnings = self.build_reference_line(road)
        except (KeyError, TypeError, AttributeError) as e:
            raise RecordFormatError(f"道路记录格式错误: {e!r}") from e
        for message in warnings:
            logger.warning(f"道路 {road_id}: {message}")

        road_geometry = RoadGeometry(road_id, reference_line, warnings=list(warnings))
        for object_record in road.get('objects') or []:
            object_id = object_record.get('id', 'unknown') if isinstance(object_record, dict) else 'unknown'
            try:
                road_object = RoadObjectDefinition.from_dict(object_record)
                object_geometries = self.build_object_geometries(road_object, reference_line)
                for geometry in object_geometries:
                    geometry.calculate_polygons_global_cs()
                road_geometry.geometries.extend(object_geometries)
            except ValueError as e:
                message = f"对象 {object_id} 构建失败，已跳过: {e}"
                logger.warning(f"道路 {road_id}: {message}")
                road_geometry.warnings.append(message)

        logger.debug(f"道路 {road_id} 构建完成，包含 {len(road_geometry.geometries)} 个几何对象")
        return road_geometry

    def build_reference_line(self, road: Dict) -> Tuple[Curve3D, List[str]]:
        """由平面视图和高程剖面构建三维参考线"""
        offset = Vector2D(*self.config['offset'])
        curve_xy, warnings = self.curve_builder.build_curve_from_plan_view(road.get('planView') or [], offset)
        return Curve3D(curve_xy, self.build_elevation_function(road)), warnings

    @staticmethod
    def build_elevation_function(road: Dict) -> UnivariateFunction:
        """由高程剖面记录 {'s', 'a', 'b', 'c', 'd'} 构建分段三次多项式，没有记录时高度为0

        Raises:
            RecordFormatError: 高程记录缺少s或系数不是有限数值
        """
        elevations = road.get('elevationProfile') or []
        for elevation in elevations:
            if not isinstance(elevation, dict) or not is_finite_number(elevation.get('s')):
                raise RecordFormatError(f"高程记录缺少有效的s: {elevation}")
            for key in ('a', 'b', 'c', 'd'):
                if not is_finite_number(elevation.get(key, 0.0)):
                    raise RecordFormatError(f"高程记录的系数 {key} 必须为有限数值: {elevation}")
        if not elevations:
            return ConstantFunction(0.0)
        elevations = sorted(elevations, key=lambda e: e['s'])
        return ConcatenatedFunction.of_polynomials(
            [e['s'] for e in elevations],
            [[e.get('a', 0.0), e.get('b', 0.0), e.get('c', 0.0), e.get('d', 0.0)] for e in elevations])

    def build_object_geometries(self, road_object: RoadObjectDefinition,
                                reference_line: Curve3D) -> List[AbstractGeometry3D]:
        geometries: List[AbstractGeometry3D] = []
        if road_object.repeat is not None:
            geometries += self.surface_builder.build_parametric_bounded_surfaces_by_horizontal_repeat(
                road_object.repeat, reference_line)
            geometries += self.surface_builder.build_parametric_bounded_surfaces_by_vertical_repeat(
                road_object.repeat, reference_line)
            return geometries

        curve_affine: Affine3D = reference_line.calculate_affine(road_object.s)
        geometries += self.surface_builder.build_rectangles(road_object, curve_affine)
        geometries += self.surface_builder.build_circles(road_object, curve_affine)
        geometries += self.surface_builder.build_linear_rings_by_local_corners(road_object, curve_affine)
        geometries += self.solid_builder.build_cuboids(road_object, curve_affine)
        geometries += self.solid_builder.build_cylinders(road_object, curve_affine)
        return geometries

    def _log_conversion_stats(self):
        """记录转换统计信息"""
        stats = self.conversion_stats

        logger.info("=== 转换统计 ===")
        logger.info(f"输入道路数: {stats['input_roads']}")
        logger.info(f"输出道路数: {stats['output_roads']}")
        logger.info(f"总长度: {stats['total_length']:.2f} 米")
        logger.info(f"转换时间: {stats['conversion_time']:.2f} 秒")

        if stats['warnings']:
            logger.info(f"警告数: {len(stats['warnings'])}")
        if stats['errors']:
            logger.info(f"错误数: {len(stats['errors'])}")
            for error in stats['errors']:
                logger.error(error)

    def get_conversion_stats(self) -> Dict:
        """获取转换统计信息

        Returns:
            Dict: 统计信息
        """
        return self.conversion_stats.copy()
