"""
Round API Endpoints - 短輪詢版

重點：
1. 回合完全自主運作，API 只讀取最新快照，不改變任何狀態
2. version 每次發布快照都會遞增，前端可以跳過沒有變化的 frame
3. 不提供 WebSocket，前端靠 /state 或 /chart 輪詢
"""
from fastapi import APIRouter, Depends, HTTPException, Request

import logging

from core.exceptions import ControllerNotRunning
from core.round_controller import RoundController
from schemas import RoundStateResponse, ChartResponse, RoundConstantsResponse
from services.projection_service import project_chart

router = APIRouter(prefix="/api/round", tags=["round"])
logger = logging.getLogger(__name__)


def get_controller(request: Request) -> RoundController:
    """
    FastAPI dependency：取得 lifespan 建立的 RoundController

    異常：
        ControllerNotRunning: 引擎尚未啟動或已停止
    """
    controller = getattr(request.app.state, "controller", None)
    if controller is None or not controller.running:
        raise ControllerNotRunning("Round controller is not running")
    return controller


def _controller_or_503(request: Request) -> RoundController:
    try:
        return get_controller(request)
    except ControllerNotRunning as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/state", response_model=RoundStateResponse)
def get_round_state(controller: RoundController = Depends(_controller_or_503)):
    """
    取得目前回合的快照

    返回：
        - phase: COUNTDOWN / GENERATING / RUG_PULLED / SHOWING_OUTCOME_MESSAGE
        - countdown_remaining: 倒數剩餘秒數
        - completed_steps: 長度 N，尚未到達的位置為 null
        - active_step: 目前動畫中的 K 棒（index + current_value）
        - axis_bounds: Y 軸範圍
        - rug_pulled / outcome / moonshot / trend
    """
    try:
        return RoundStateResponse.from_snapshot(controller.snapshot())

    except Exception as e:
        logger.error(f"Failed to get round state: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/chart", response_model=ChartResponse)
def get_round_chart(controller: RoundController = Depends(_controller_or_503)):
    """
    取得給長條圖使用的 frame

    返回：
        - bars: 每個位置為 null 或 {low, high, direction}
        - y_min / y_max: Y 軸範圍
        - marker: 目前值的水平線（例如 1.2345x）
        - countdown_label: 倒數文字（例如 2.4s），倒數結束時為 null
    """
    try:
        return ChartResponse(**project_chart(controller.snapshot()))

    except Exception as e:
        logger.error(f"Failed to project chart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/constants", response_model=RoundConstantsResponse)
def get_round_constants(controller: RoundController = Depends(_controller_or_503)):
    """取得回合的固定常數（步數、各階段秒數）"""
    return RoundConstantsResponse(**controller.constants.as_dict())
