"""顶点列表处理工具

共线/共面判断、重复顶点和冗余顶点的去除、Newell法向量计算。
线性环构建和三角剖分都依赖这些函数。
"""

from typing import List, Sequence

import numpy as np

from .vectors import Vector3D


def _as_array(vertices: Sequence[Vector3D]) -> np.ndarray:
    return np.array([v.to_tuple() for v in vertices], dtype=float).reshape(-1, 3)


def distance_to_segment(point: Vector3D, segment_start: Vector3D, segment_end: Vector3D) -> float:
    """点到线段的最短距离"""
    direction = segment_end - segment_start
    squared_length = direction.dot(direction)
    if squared_length == 0.0:
        return point.distance(segment_start)
    t = max(0.0, min(1.0, (point - segment_start).dot(direction) / squared_length))
    return point.distance(segment_start + direction * t)


def distance_to_line(point: Vector3D, line_start: Vector3D, line_end: Vector3D) -> float:
    """点到直线（两点确定）的距离；两点重合时为到该点的距离"""
    direction = line_end - line_start
    norm = direction.norm
    if norm == 0.0:
        return point.distance(line_start)
    return (point - line_start).cross(direction).norm / norm


def is_colinear_triple(a: Vector3D, b: Vector3D, c: Vector3D, tolerance: float) -> bool:
    """三个点是否共线（任意顺序）

    取距离最远的两个点确定直线，判断剩余点到该直线的距离是否在容差内。
    """
    pairs = [(a, b, c), (b, c, a), (a, c, b)]
    start, end, remaining = max(pairs, key=lambda p: p[0].distance(p[1]))
    if start.distance(end) <= tolerance:
        return True
    return distance_to_line(remaining, start, end) <= tolerance


def is_colinear(vertices: Sequence[Vector3D], tolerance: float) -> bool:
    """顶点列表是否全部位于同一直线上（少于三个点时视为共线）"""
    if len(vertices) < 3:
        return True
    start = vertices[0]
    end = max(vertices, key=lambda v: v.distance(start))
    if start.distance(end) <= tolerance:
        return True
    return all(distance_to_line(v, start, end) <= tolerance for v in vertices)


def calculate_normal(vertices: Sequence[Vector3D]) -> Vector3D:
    """Newell方法计算多边形法向量（未归一化时长度为投影面积的两倍）

    Returns:
        单位法向量

    Raises:
        ValueError: 顶点共线或数量不足，法向量为零
    """
    points = _as_array(vertices)
    if len(points) < 3:
        raise ValueError("计算法向量至少需要三个顶点")
    following = np.roll(points, -1, axis=0)
    normal = np.array([
        np.sum((points[:, 1] - following[:, 1]) * (points[:, 2] + following[:, 2])),
        np.sum((points[:, 2] - following[:, 2]) * (points[:, 0] + following[:, 0])),
        np.sum((points[:, 0] - following[:, 0]) * (points[:, 1] + following[:, 1])),
    ])
    norm = np.linalg.norm(normal)
    if norm == 0.0:
        raise ValueError("顶点共线，法向量为零")
    return Vector3D.of(normal / norm)


def calculate_centroid(vertices: Sequence[Vector3D]) -> Vector3D:
    if not vertices:
        raise ValueError("空顶点列表没有中心点")
    return Vector3D.of(_as_array(vertices).mean(axis=0))


def is_planar(vertices: Sequence[Vector3D], tolerance: float) -> bool:
    """所有顶点到Newell平面（过中心点）的距离是否都在容差内"""
    if len(vertices) <= 3:
        return True
    try:
        normal = calculate_normal(vertices)
    except ValueError:
        return True
    centroid = calculate_centroid(vertices)
    return all(abs((v - centroid).dot(normal)) <= tolerance for v in vertices)


def remove_consecutive_side_duplicates(vertices: Sequence[Vector3D], tolerance: float) -> List[Vector3D]:
    """去除相邻的重复顶点（不考虑首尾闭合）"""
    result: List[Vector3D] = []
    for vertex in vertices:
        if result and result[-1].fuzzy_equals(vertex, tolerance):
            continue
        result.append(vertex)
    return result


def remove_closing_duplicates(vertices: Sequence[Vector3D], tolerance: float) -> List[Vector3D]:
    """去除与第一个顶点重复的末尾顶点（环的显式闭合点）"""
    result = list(vertices)
    while len(result) > 1 and result[-1].fuzzy_equals(result[0], tolerance):
        result.pop()
    return result


def remove_redundant_vertices_on_line_segments_enclosing(vertices: Sequence[Vector3D],
                                                        tolerance: float) -> List[Vector3D]:
    """去除环上的冗余顶点

    依次去除相邻重复顶点、末尾闭合顶点，然后反复去除位于前后相邻顶点
    所连线段上的顶点（环形相邻），直到没有可去除的顶点为止。
    结果再次调用本函数时保持不变。
    """
    result = remove_closing_duplicates(remove_consecutive_side_duplicates(vertices, tolerance), tolerance)

    removed = True
    while removed and len(result) >= 3:
        removed = False
        for index in range(len(result)):
            previous_vertex = result[index - 1]
            next_vertex = result[(index + 1) % len(result)]
            if distance_to_segment(result[index], previous_vertex, next_vertex) <= tolerance:
                del result[index]
                removed = True
                break
        result = remove_closing_duplicates(remove_consecutive_side_duplicates(result, tolerance), tolerance)

    return result
