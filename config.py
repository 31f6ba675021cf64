"""
設定

兩種設定分開管理：
- Settings：伺服器層級（host、port、log level），可由環境變數或 .env 覆寫
- RoundConstants：回合行為的固定常數（步數、各階段時間），不開放外部設定
"""
from dataclasses import dataclass, asdict
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Rug Chart API"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        env_prefix = "RUGCHART_"


@lru_cache()
def get_settings():
    return Settings()


@dataclass(frozen=True)
class RoundConstants:
    """
    回合常數（單位：秒 / 價格單位）

    注意：
        - 預設 max_round_duration (30s) 小於 step_count * step_duration (90s)，
          rug pull 的觸發時間落在 [0, 30)，所以預設下每回合都會被 rug pull
        - 測試可以傳入較小的 step_count 來走到自然結束的路徑
    """
    step_count: int = 30
    countdown_duration: float = 3.0
    step_duration: float = 3.0
    max_round_duration: float = 30.0

    initial_value: float = 1.0
    max_step_change: float = 5.0
    value_floor: float = 0.0
    value_ceiling: float = 100.0

    completion_reset_delay: float = 1.0
    outcome_message_duration: float = 3.0
    settle_delay: float = 0.1
    frame_interval: float = 1 / 60

    noise_amplitude: float = 0.05
    noise_cycles: int = 4
    bounds_grid: float = 0.5
    default_axis_min: float = 0.5
    default_axis_max: float = 1.5

    moonshot_threshold: float = 0.05

    def as_dict(self) -> dict:
        return asdict(self)


DEFAULT_CONSTANTS = RoundConstants()
