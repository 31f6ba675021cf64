"""
Rug Pull 排程器

每次進入 GENERATING 階段時排程兩個計時器，先到者勝：
1. rug pull：在 [0, max_round_duration) 之間均勻隨機的時間點
2. ceiling：max_round_duration 的硬上限

勝出的一方觸發時，另一方的 handle 會在同一個 callback 內被取消，
所以同一回合不會同時出現兩個結束事件
"""
import logging
import random
from typing import Callable, Optional

from config import RoundConstants, DEFAULT_CONSTANTS
from core.exceptions import InvariantViolation
from core.timers import RoundToken, TimerRegistry

logger = logging.getLogger(__name__)

RUG_PULL_TIMER = "rug_pull"
CEILING_TIMER = "ceiling"


class RugPullScheduler:
    """rug pull 與 ceiling 的競賽"""

    def __init__(
        self,
        timers: TimerRegistry,
        token: RoundToken,
        rng: random.Random = None,
        constants: RoundConstants = DEFAULT_CONSTANTS
    ):
        self._timers = timers
        self._token = token
        self._rng = rng or random.Random()
        self._constants = constants
        self.armed_token: Optional[int] = None
        self.rug_pull_delay: Optional[float] = None

    def arm(self, on_rug_pull: Callable[[], None], on_ceiling: Callable[[], None]) -> float:
        """
        排程兩個計時器（每個 GENERATING 階段只能呼叫一次）

        參數：
            on_rug_pull: rug pull 觸發時呼叫
            on_ceiling: 到達上限時呼叫

        返回：
            rug pull 的延遲秒數

        異常：
            InvariantViolation: 同一回合重複 arm
        """
        if self.armed_token == self._token.value:
            raise InvariantViolation(f"Rug pull already armed for round token {self.armed_token}")

        max_duration = self._constants.max_round_duration
        self.rug_pull_delay = self._rng.random() * max_duration
        self.armed_token = self._token.value

        self._timers.schedule(
            RUG_PULL_TIMER,
            self.rug_pull_delay,
            self._token.guard(self._fire(CEILING_TIMER, on_rug_pull), RUG_PULL_TIMER)
        )
        self._timers.schedule(
            CEILING_TIMER,
            max_duration,
            self._token.guard(self._fire(RUG_PULL_TIMER, on_ceiling), CEILING_TIMER)
        )

        logger.info(
            f"Armed rug pull in {self.rug_pull_delay:.2f}s "
            f"(ceiling {max_duration:.1f}s, token {self.armed_token})"
        )
        return self.rug_pull_delay

    def _fire(self, loser: str, callback: Callable[[], None]) -> Callable[[], None]:
        def fire():
            self._timers.cancel(loser)
            callback()
        return fire

    def cancel(self) -> None:
        self._timers.cancel(RUG_PULL_TIMER)
        self._timers.cancel(CEILING_TIMER)

    def is_armed(self) -> bool:
        return self._timers.is_pending(RUG_PULL_TIMER) or self._timers.is_pending(CEILING_TIMER)
