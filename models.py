"""
資料模型

回合的所有狀態都只存在記憶體中，不做持久化：
- Enum：RoundPhase / RoundEvent / RoundOutcome
- Step：一根已完成的 K 棒（candle），完成後不可變
- AnimationState：目前正在動畫中的那一根（同時最多一根）
- AxisBounds：Y 軸範圍，回合內只會擴張
- RoundSnapshot：提供給前端的不可變快照
"""
import enum
from dataclasses import dataclass
from typing import Optional, Tuple


class RoundPhase(str, enum.Enum):
    COUNTDOWN = "COUNTDOWN"
    GENERATING = "GENERATING"
    RUG_PULLED = "RUG_PULLED"
    SHOWING_OUTCOME_MESSAGE = "SHOWING_OUTCOME_MESSAGE"


class RoundEvent(str, enum.Enum):
    COUNTDOWN_ELAPSED = "COUNTDOWN_ELAPSED"
    RUG_PULL_FIRED = "RUG_PULL_FIRED"
    PATH_COMPLETED = "PATH_COMPLETED"
    CEILING_REACHED = "CEILING_REACHED"
    OUTCOME_SHOWN = "OUTCOME_SHOWN"
    MESSAGE_EXPIRED = "MESSAGE_EXPIRED"
    RESET = "RESET"


class RoundOutcome(str, enum.Enum):
    """每回合唯一的結束事件"""
    COMPLETED = "COMPLETED"
    RUG_PULLED = "RUG_PULLED"


@dataclass(frozen=True)
class Step:
    index: int
    base: float
    target: float
    final_value: Optional[float] = None

    @property
    def value(self) -> float:
        return self.target if self.final_value is None else self.final_value


@dataclass
class AnimationState:
    step_index: int
    start_value: float
    target_value: float
    current_value: float
    base: float
    started_at: float


@dataclass
class AxisBounds:
    min: float = 0.5
    max: float = 1.5

    def copy(self) -> "AxisBounds":
        return AxisBounds(min=self.min, max=self.max)


@dataclass(frozen=True)
class ActiveStep:
    index: int
    base: float
    current_value: float


@dataclass(frozen=True)
class RoundSnapshot:
    version: int
    round_token: int
    phase: RoundPhase
    countdown_remaining: float
    completed_steps: Tuple[Optional[Step], ...]
    active_step: Optional[ActiveStep]
    axis_bounds: AxisBounds
    rug_pulled: bool
    outcome: Optional[RoundOutcome]
    moonshot: bool
    trend: str
