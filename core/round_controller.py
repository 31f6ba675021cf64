"""
Round Controller：管理一個回合的完整生命週期

職責：
1. 倒數（COUNTDOWN）：以實際經過的時間遞減，不依賴 frame 頻率
2. 產生 K 棒（GENERATING）：每個 frame 推進目前這根的動畫，時間到就定案並開始下一根
3. Rug pull / 自然結束：兩者只會發生一個
4. 顯示結果（SHOWING_OUTCOME_MESSAGE）後完整重設，回到倒數

設計原則：
- 所有階段變更只經過 transition(event)，轉換規則集中在 RoundStateMachine
- 所有排程經過 TimerRegistry + RoundToken，重設時先取消所有 handle、再清空狀態
- 前端只拿到不可變的 RoundSnapshot，不會直接碰到內部狀態

loop 只需要提供 time() 與 call_later(delay, callback, *args)：
正式環境傳入 asyncio 的 running loop，測試傳入虛擬時間的 loop
"""
import logging
import random
from typing import Callable, List, Optional

from config import RoundConstants, DEFAULT_CONSTANTS
from models import (
    RoundPhase,
    RoundEvent,
    RoundOutcome,
    Step,
    AnimationState,
    ActiveStep,
    RoundSnapshot,
)
from core.exceptions import InvariantViolation
from core.rug_pull import RugPullScheduler
from core.state_machine import RoundStateMachine
from core.timers import RoundToken, TimerRegistry
from services.axis_bounds import default_bounds, update_bounds, force_floor, contains
from services.path_animator import step_progress, interpolate
from services.random_walk import random_walk_step
from services.signal_service import detect_moonshot, classify_trend

logger = logging.getLogger(__name__)

FRAME_TIMER = "frame"
SETTLE_TIMER = "settle"
MESSAGE_TIMER = "outcome_message"

SnapshotListener = Callable[[RoundSnapshot], None]


class RoundController:
    """回合引擎（單一實例擁有所有回合狀態與計時器）"""

    def __init__(
        self,
        loop,
        constants: RoundConstants = DEFAULT_CONSTANTS,
        rng: random.Random = None,
        step_generator=random_walk_step
    ):
        self._loop = loop
        self._constants = constants
        self._rng = rng or random.Random()
        self._step_generator = step_generator

        self._token = RoundToken()
        self._timers = TimerRegistry(loop)
        self._rug_pull = RugPullScheduler(self._timers, self._token, self._rng, constants)

        self._listeners: List[SnapshotListener] = []
        self._version = 0
        self._running = False

        self._phase = RoundPhase.COUNTDOWN
        self._clear_round()
        self._latest = self._build_snapshot()

    # ==================== 公開介面 ====================

    @property
    def phase(self) -> RoundPhase:
        return self._phase

    @property
    def round_token(self) -> int:
        return self._token.value

    @property
    def constants(self) -> RoundConstants:
        return self._constants

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """啟動引擎：第一次重設，settle 之後開始倒數"""
        if self._running:
            logger.warning("Round controller already running, ignoring start()")
            return
        self._running = True
        logger.info("Round controller started")
        self.reset()

    def stop(self) -> None:
        """停止引擎：取消所有計時器，之後任何舊 callback 都是 no-op"""
        self._running = False
        self._timers.cancel_all()
        self._token.advance()
        logger.info("Round controller stopped")

    def reset(self) -> RoundSnapshot:
        """
        完整重設回合（冪等）

        流程：
        1. 取消所有 pending 的 handle（frame、rug pull、ceiling、訊息、settle）
        2. 推進 round token，讓漏網的舊 callback 失效
        3. 清空所有狀態（K 棒、Y 軸範圍、倒數）
        4. 發布快照
        5. settle 延遲之後才開始倒數（避免同一個 tick 內重複重繪）

        返回：
            重設後的快照
        """
        return self._reset(RoundEvent.RESET)

    def snapshot(self) -> RoundSnapshot:
        return self._latest

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        訂閱快照（push 模式）

        返回：
            取消訂閱的函式
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def pending_timers(self) -> List[str]:
        return self._timers.pending()

    def transition(self, event: RoundEvent) -> RoundPhase:
        """
        唯一的階段轉換入口

        異常：
            InvalidStateTransition: 目前階段不接受此事件
        """
        next_phase = RoundStateMachine.next_phase(self._phase, event)
        logger.info(
            f"Round {self._token.value}: {self._phase.value} "
            f"--{event.value}--> {next_phase.value}"
        )
        self._phase = next_phase
        return next_phase

    # ==================== 重設 ====================

    def _clear_round(self) -> None:
        c = self._constants
        self._countdown_remaining = c.countdown_duration
        self._last_countdown_update: Optional[float] = None
        self._completed_steps: List[Optional[Step]] = [None] * c.step_count
        self._animation: Optional[AnimationState] = None
        self._bounds = default_bounds(c)
        self._round_started_at: Optional[float] = None
        self._rug_pulled = False
        self._outcome: Optional[RoundOutcome] = None
        self._moonshot = False

    def _reset(self, event: RoundEvent) -> RoundSnapshot:
        # 1. 先取消，再清空
        self._timers.cancel_all()
        token = self._token.advance()

        # 2. 驗證並轉換階段
        self.transition(event)

        # 3. 清空狀態
        self._clear_round()
        logger.info(f"Round reset (token {token})")

        snapshot = self._publish()

        if self._running:
            self._schedule(SETTLE_TIMER, self._constants.settle_delay, self._begin_countdown)
        return snapshot

    def _schedule(self, name: str, delay: float, callback: Callable[[], None]):
        return self._timers.schedule(name, delay, self._token.guard(callback, name))

    # ==================== 倒數 ====================

    def _begin_countdown(self) -> None:
        self._last_countdown_update = self._loop.time()
        logger.info(f"Countdown started with value: {self._countdown_remaining:.1f}")
        self._schedule(FRAME_TIMER, self._constants.frame_interval, self._on_countdown_frame)

    def _on_countdown_frame(self) -> None:
        now = self._loop.time()
        delta = now - self._last_countdown_update
        self._last_countdown_update = now
        self._countdown_remaining -= delta

        if self._countdown_remaining <= 0:
            self._countdown_remaining = 0.0
            self.transition(RoundEvent.COUNTDOWN_ELAPSED)
            self._enter_generating()
            return

        self._publish()
        self._schedule(FRAME_TIMER, self._constants.frame_interval, self._on_countdown_frame)

    # ==================== 產生 K 棒 ====================

    def _enter_generating(self) -> None:
        now = self._loop.time()
        self._round_started_at = now

        self._rug_pull.arm(self._on_rug_pull, self._on_ceiling)
        if not self._start_step(0, now):
            return

        self._publish()
        self._schedule(FRAME_TIMER, self._constants.frame_interval, self._on_frame)

    def _start_step(self, index: int, now: float) -> bool:
        """
        開始第 index 根 K 棒

        返回：
            False 如果已到達回合時間上限（回合已結束），True 否則

        異常：
            InvariantViolation: 前一根尚未定案，或 base 與前一根的 target 不一致
        """
        c = self._constants
        if now - self._round_started_at >= c.max_round_duration:
            self._finish_generation(RoundEvent.CEILING_REACHED)
            return False

        prev_target = None
        if index > 0:
            previous = self._completed_steps[index - 1]
            if previous is None:
                raise InvariantViolation(f"Step {index} started before step {index - 1} was finalized")
            prev_target = previous.target

        walk = self._step_generator(prev_target, index == 0, self._rng, c)
        if index > 0 and walk.base != prev_target:
            raise InvariantViolation(
                f"Step {index} base {walk.base} != previous target {prev_target}"
            )

        self._animation = AnimationState(
            step_index=index,
            start_value=walk.base,
            target_value=walk.target,
            current_value=walk.base,
            base=walk.base,
            started_at=now
        )
        update_bounds(self._bounds, walk.base, c)
        return True

    def _on_frame(self) -> None:
        c = self._constants
        anim = self._animation
        now = self._loop.time()
        progress = step_progress(now - anim.started_at, c.step_duration)

        if progress >= 1.0:
            if not self._finalize_step(now):
                return
        else:
            value = interpolate(
                progress,
                anim.start_value,
                anim.target_value,
                noisy=not self._rug_pulled,
                constants=c
            )
            # 先更新範圍，再讓新值出現在快照中
            update_bounds(self._bounds, value, c)
            anim.current_value = value

        self._publish()
        self._schedule(FRAME_TIMER, c.frame_interval, self._on_frame)

    def _finalize_step(self, now: float) -> bool:
        """
        定案目前這根 K 棒，並開始下一根

        返回：
            False 如果回合已結束（最後一根或到達上限），True 否則
        """
        c = self._constants
        anim = self._animation
        index = anim.step_index

        update_bounds(self._bounds, anim.target_value, c)
        anim.current_value = anim.target_value
        self._completed_steps[index] = Step(
            index=index,
            base=anim.base,
            target=anim.target_value,
            final_value=anim.target_value
        )

        self._moonshot = detect_moonshot(anim.base, anim.target_value, c.moonshot_threshold)
        if self._moonshot:
            logger.info(f"Moonshot on step {index}: {anim.base:.4f} -> {anim.target_value:.4f}")

        if index < c.step_count - 1:
            return self._start_step(index + 1, now)

        logger.info("Reached end of chart")
        self._finish_generation(RoundEvent.PATH_COMPLETED)
        return False

    def _finish_generation(self, event: RoundEvent) -> None:
        """自然結束或到達上限：停止產生，稍後重設"""
        self._timers.cancel(FRAME_TIMER)
        self._rug_pull.cancel()

        self.transition(event)
        self._outcome = RoundOutcome.COMPLETED
        self._publish()

        self._schedule(MESSAGE_TIMER, self._constants.completion_reset_delay, self._on_message_expired)

    def _on_ceiling(self) -> None:
        if self._phase != RoundPhase.GENERATING:
            logger.warning(f"Ceiling fired in phase {self._phase.value}, ignoring")
            return
        logger.info(f"Round {self._token.value} reached max duration")
        self._finish_generation(RoundEvent.CEILING_REACHED)

    # ==================== Rug Pull ====================

    def _on_rug_pull(self) -> None:
        """
        Rug pull 觸發

        流程：
        1. 停止動畫 frame 與 ceiling
        2. 以目前這根的 base（不是動畫中的值）作為 pull 前的參考值
        3. 目前值歸零，把這根定案為 {base, target=0}
        4. Y 軸下限壓到 0
        5. RUG_PULLED -> SHOWING_OUTCOME_MESSAGE，訊息時間到後重設
        """
        if self._phase != RoundPhase.GENERATING or self._animation is None:
            logger.warning(f"Rug pull fired in phase {self._phase.value}, ignoring")
            return

        c = self._constants
        self._timers.cancel(FRAME_TIMER)
        self._rug_pull.cancel()

        anim = self._animation
        captured_base = anim.base
        anim.start_value = captured_base
        anim.target_value = c.value_floor
        anim.current_value = c.value_floor

        force_floor(self._bounds, c.value_floor)
        self._completed_steps[anim.step_index] = Step(
            index=anim.step_index,
            base=captured_base,
            target=c.value_floor,
            final_value=c.value_floor
        )

        self._rug_pulled = True
        self._moonshot = False
        self._outcome = RoundOutcome.RUG_PULLED

        self.transition(RoundEvent.RUG_PULL_FIRED)
        logger.info(f"Rug pulled at step {anim.step_index} (base {captured_base:.4f})")
        self._publish()

        self.transition(RoundEvent.OUTCOME_SHOWN)
        self._publish()
        self._schedule(MESSAGE_TIMER, c.outcome_message_duration, self._on_message_expired)

    def _on_message_expired(self) -> None:
        self._reset(RoundEvent.MESSAGE_EXPIRED)

    # ==================== 快照 ====================

    def _build_snapshot(self) -> RoundSnapshot:
        anim = self._animation
        if anim is not None:
            active = ActiveStep(index=anim.step_index, base=anim.base, current_value=anim.current_value)
            trend = classify_trend(anim.start_value, anim.current_value, self._rug_pulled)
        else:
            active = None
            trend = classify_trend(0.0, 0.0, self._rug_pulled)

        return RoundSnapshot(
            version=self._version,
            round_token=self._token.value,
            phase=self._phase,
            countdown_remaining=self._countdown_remaining,
            completed_steps=tuple(self._completed_steps),
            active_step=active,
            axis_bounds=self._bounds.copy(),
            rug_pulled=self._rug_pulled,
            outcome=self._outcome,
            moonshot=self._moonshot,
            trend=trend
        )

    def _check_bounds(self) -> None:
        if self._animation is not None and not contains(self._bounds, self._animation.current_value):
            raise InvariantViolation(
                f"Value {self._animation.current_value} outside axis bounds "
                f"[{self._bounds.min}, {self._bounds.max}]"
            )

    def _publish(self) -> RoundSnapshot:
        self._check_bounds()
        self._version += 1
        snapshot = self._build_snapshot()
        self._latest = snapshot

        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Snapshot listener failed: {e}", exc_info=True)

        return snapshot
