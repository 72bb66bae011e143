"""几何异常模块

定义几何核心使用的所有异常类型。所有异常均继承自GeometryError，
调用方（例如按道路批量转换的流程）可以统一捕获并跳过出错的道路或对象。
"""


class GeometryError(ValueError):
    """几何构建失败的基类"""


class CurveBuildError(GeometryError):
    """组合曲线无法构建"""


class EmptyCurveError(CurveBuildError):
    """过滤零长度几何段后没有剩余的有效几何段"""


class DomainMismatchError(GeometryError):
    """定义域不一致，或子区间没有被参考曲线的定义域包含"""


class OutOfDomainError(GeometryError):
    """求值参数超出曲线或函数的定义域"""


class DegenerateRingError(GeometryError):
    """线性环顶点过少或全部共线"""


class DegenerateSurfaceError(GeometryError):
    """曲面长度不大于容差"""


class SingularTransformError(GeometryError):
    """仿射变换矩阵不可逆（行列式为零）"""


class TriangulationError(GeometryError):
    """三角剖分失败的基类"""


class ColinearTriangleError(TriangulationError):
    """剖分结果中存在三个顶点共线的三角形"""


class TriangulationFailure(TriangulationError):
    """底层三角剖分算法内部出错（包括递归深度耗尽）"""


class RecordFormatError(GeometryError):
    """解析器输出的原始记录缺少字段或字段类型错误"""
