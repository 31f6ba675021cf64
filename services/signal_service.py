"""
訊號服務：從數值推導給前端用的事實

前端依這些訊號決定背景色、特效；核心只提供判斷結果，不管顏色
"""
from config import DEFAULT_CONSTANTS

TREND_UP = "up"
TREND_FLAT = "flat"
TREND_RUGGED = "rugged"


def detect_moonshot(base: float, target: float, threshold: float = DEFAULT_CONSTANTS.moonshot_threshold) -> bool:
    """
    單根 K 棒漲幅是否超過門檻（預設 5%）

    範例：
        detect_moonshot(10.0, 10.6) -> True
        detect_moonshot(10.0, 10.5) -> False
        detect_moonshot(0.0, 3.0)   -> True  （從 0 起漲一律算）
    """
    if base <= 0:
        return target > base
    return (target - base) / base > threshold


def classify_trend(start_value: float, current_value: float, rug_pulled: bool) -> str:
    if rug_pulled:
        return TREND_RUGGED
    if current_value > start_value:
        return TREND_UP
    return TREND_FLAT
