"""
回合狀態機：集中管理所有階段轉換

所有 phase 的變更都經過 RoundStateMachine.next_phase，
不在各處直接改 phase，避免「某個旗標觸發另一個旗標」的連鎖反應

轉換表：
    COUNTDOWN              --COUNTDOWN_ELAPSED--> GENERATING
    GENERATING             --RUG_PULL_FIRED-----> RUG_PULLED
    GENERATING             --PATH_COMPLETED-----> SHOWING_OUTCOME_MESSAGE
    GENERATING             --CEILING_REACHED----> SHOWING_OUTCOME_MESSAGE
    RUG_PULLED             --OUTCOME_SHOWN------> SHOWING_OUTCOME_MESSAGE
    SHOWING_OUTCOME_MESSAGE--MESSAGE_EXPIRED----> COUNTDOWN
    (任何階段)              --RESET--------------> COUNTDOWN
"""
from models import RoundPhase, RoundEvent
from core.exceptions import InvalidStateTransition


class RoundStateMachine:
    """回合階段狀態機"""

    TRANSITIONS = {
        (RoundPhase.COUNTDOWN, RoundEvent.COUNTDOWN_ELAPSED): RoundPhase.GENERATING,
        (RoundPhase.GENERATING, RoundEvent.RUG_PULL_FIRED): RoundPhase.RUG_PULLED,
        (RoundPhase.GENERATING, RoundEvent.PATH_COMPLETED): RoundPhase.SHOWING_OUTCOME_MESSAGE,
        (RoundPhase.GENERATING, RoundEvent.CEILING_REACHED): RoundPhase.SHOWING_OUTCOME_MESSAGE,
        (RoundPhase.RUG_PULLED, RoundEvent.OUTCOME_SHOWN): RoundPhase.SHOWING_OUTCOME_MESSAGE,
        (RoundPhase.SHOWING_OUTCOME_MESSAGE, RoundEvent.MESSAGE_EXPIRED): RoundPhase.COUNTDOWN,
    }

    @staticmethod
    def next_phase(phase: RoundPhase, event: RoundEvent) -> RoundPhase:
        """
        計算下一個階段

        參數：
            phase: 目前階段
            event: 發生的事件

        返回：
            下一個 RoundPhase

        異常：
            InvalidStateTransition: 此階段不接受該事件
        """
        if event == RoundEvent.RESET:
            return RoundPhase.COUNTDOWN

        next_phase = RoundStateMachine.TRANSITIONS.get((phase, event))
        if next_phase is None:
            raise InvalidStateTransition(phase, event)
        return next_phase

    @staticmethod
    def can_transition(phase: RoundPhase, event: RoundEvent) -> bool:
        return event == RoundEvent.RESET or (phase, event) in RoundStateMachine.TRANSITIONS
