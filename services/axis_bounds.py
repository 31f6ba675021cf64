"""
Y 軸範圍服務

規則：
- 回合內只擴張、不收縮
- 擴張時對齊 0.5 的格線（max 往上取、min 往下取）
- 回合開始時重設為 {0.5, 1.5}
"""
import math

from config import RoundConstants, DEFAULT_CONSTANTS
from models import AxisBounds


def default_bounds(constants: RoundConstants = DEFAULT_CONSTANTS) -> AxisBounds:
    return AxisBounds(min=constants.default_axis_min, max=constants.default_axis_max)


def snap_up(value: float, grid: float) -> float:
    return math.ceil(value / grid) * grid


def snap_down(value: float, grid: float) -> float:
    return math.floor(value / grid) * grid


def update_bounds(
    bounds: AxisBounds,
    value: float,
    constants: RoundConstants = DEFAULT_CONSTANTS
) -> AxisBounds:
    """
    把一個新值納入範圍（原地修改）

    範例（grid = 0.5）：
        {0.5, 1.5} + 10.0  -> {0.5, 10.0}
        {0.5, 1.5} + 1.74  -> {0.5, 2.0}
        {0.5, 1.5} + 0.26  -> {0.0, 1.5}
    """
    if value > bounds.max:
        bounds.max = snap_up(value, constants.bounds_grid)
    if value < bounds.min:
        bounds.min = snap_down(value, constants.bounds_grid)
    return bounds


def force_floor(bounds: AxisBounds, floor: float) -> AxisBounds:
    """Rug pull 時把下限壓到 floor（只會往下壓）"""
    if floor < bounds.min:
        bounds.min = floor
    return bounds


def contains(bounds: AxisBounds, value: float) -> bool:
    return bounds.min <= value <= bounds.max
