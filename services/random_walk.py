"""
隨機漫步服務：產生下一根 K 棒的目標值

純計算邏輯，不涉及狀態轉換
"""
import random
from typing import NamedTuple, Optional

from config import RoundConstants, DEFAULT_CONSTANTS


class WalkStep(NamedTuple):
    base: float
    target: float


def target_range(base: float, constants: RoundConstants = DEFAULT_CONSTANTS):
    """
    計算目標值可能的範圍

    規則：
    - 單步變動不超過 max_step_change（預設 5）
    - 不低於 value_floor（0），不高於 value_ceiling（100）

    範例：
        target_range(50) -> (45, 55)
        target_range(2)  -> (0, 7)
    """
    low = max(base - constants.max_step_change, constants.value_floor)
    high = min(base + constants.max_step_change, constants.value_ceiling)
    return low, high


def random_walk_step(
    prev_target: Optional[float],
    is_first_step: bool,
    rng: random.Random = None,
    constants: RoundConstants = DEFAULT_CONSTANTS
) -> WalkStep:
    """
    產生下一步的 base 與 target

    參數：
        prev_target: 上一根 K 棒的 target（第一根時忽略）
        is_first_step: 是否為回合的第一根
        rng: 亂數來源（測試時可注入固定 seed）
        constants: 回合常數

    返回：
        WalkStep(base, target)

    注意：
        - target 在範圍內均勻分布
        - 產生後再 clamp 一次到 [floor, ceiling]，超出範圍視為程式錯誤
    """
    rng = rng or random
    base = constants.initial_value if is_first_step else prev_target

    low, high = target_range(base, constants)
    target = low + rng.random() * (high - low)
    target = min(max(target, constants.value_floor), constants.value_ceiling)

    assert constants.value_floor <= target <= constants.value_ceiling, (
        f"random walk produced {target} outside "
        f"[{constants.value_floor}, {constants.value_ceiling}]"
    )
    return WalkStep(base=base, target=target)
