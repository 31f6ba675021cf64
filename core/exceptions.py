"""
自定義異常類別

集中管理所有核心邏輯異常，方便 API 層統一處理

注意：
    過期的計時器 callback（round token 不符）不是錯誤，直接忽略，不會拋出異常
"""


class RugChartException(Exception):
    """所有回合引擎異常的基類"""
    pass


# ============ 狀態轉換異常 ============

class InvalidStateTransition(RugChartException):
    """非法的狀態轉換"""
    def __init__(self, phase, event):
        self.phase = phase
        self.event = event
        super().__init__(f"Event {event.value} is not allowed in phase {phase.value}")


# ============ 不變量異常 ============

class InvariantViolation(RugChartException):
    """
    內部不變量被破壞（例如 K 棒的 base 不等於前一根的 target）

    屬於開發期的致命錯誤，不應出現在正常運作中
    """
    pass


# ============ Controller 相關異常 ============

class ControllerNotRunning(RugChartException):
    """回合引擎尚未啟動（lifespan 還沒建立 controller）"""
    pass
