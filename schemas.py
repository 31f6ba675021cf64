"""
API 回應格式（Pydantic models）
"""
from typing import List, Optional

from pydantic import BaseModel

from models import RoundPhase, RoundOutcome, RoundSnapshot


class StepResponse(BaseModel):
    index: int
    base: float
    target: float


class ActiveStepResponse(BaseModel):
    index: int
    base: float
    current_value: float


class AxisBoundsResponse(BaseModel):
    min: float
    max: float


class RoundStateResponse(BaseModel):
    version: int
    round_token: int
    phase: RoundPhase
    countdown_remaining: float
    completed_steps: List[Optional[StepResponse]]
    active_step: Optional[ActiveStepResponse]
    axis_bounds: AxisBoundsResponse
    rug_pulled: bool
    outcome: Optional[RoundOutcome]
    moonshot: bool
    trend: str

    @classmethod
    def from_snapshot(cls, snapshot: RoundSnapshot) -> "RoundStateResponse":
        active = snapshot.active_step
        return cls(
            version=snapshot.version,
            round_token=snapshot.round_token,
            phase=snapshot.phase,
            countdown_remaining=snapshot.countdown_remaining,
            completed_steps=[
                StepResponse(index=step.index, base=step.base, target=step.target) if step else None
                for step in snapshot.completed_steps
            ],
            active_step=ActiveStepResponse(
                index=active.index,
                base=active.base,
                current_value=active.current_value
            ) if active else None,
            axis_bounds=AxisBoundsResponse(min=snapshot.axis_bounds.min, max=snapshot.axis_bounds.max),
            rug_pulled=snapshot.rug_pulled,
            outcome=snapshot.outcome,
            moonshot=snapshot.moonshot,
            trend=snapshot.trend
        )


class BarResponse(BaseModel):
    index: int
    low: float
    high: float
    direction: str


class MarkerResponse(BaseModel):
    value: float
    label: str


class ChartResponse(BaseModel):
    version: int
    phase: RoundPhase
    labels: List[str]
    bars: List[Optional[BarResponse]]
    y_min: float
    y_max: float
    marker: Optional[MarkerResponse]
    countdown_label: Optional[str]
    rug_pulled: bool
    moonshot: bool
    trend: str


class RoundConstantsResponse(BaseModel):
    step_count: int
    countdown_duration: float
    step_duration: float
    max_round_duration: float
    initial_value: float
    max_step_change: float
    value_floor: float
    value_ceiling: float
    completion_reset_delay: float
    outcome_message_duration: float
    settle_delay: float
    frame_interval: float
    noise_amplitude: float
    noise_cycles: int
    bounds_grid: float
    default_axis_min: float
    default_axis_max: float
    moonshot_threshold: float
