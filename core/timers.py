"""
並發控制工具

回合引擎跑在單一 event loop 上，所有「等待」都是排程好的 callback。
主要風險是過期的 callback：回合已經重設，舊的計時器才觸發，改到新回合的資料。

兩層防護：
1. TimerRegistry：記錄所有已排程的 handle，階段切換或重設時全部取消
2. RoundToken：每個 callback 排程時記下當時的 token，觸發時 token 已變就直接 no-op
"""
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class RoundToken:
    """
    單調遞增的回合 token

    使用場景：
    - reset() 時呼叫 advance()，讓所有舊 callback 失效

    範例：
        token = RoundToken()
        callback = token.guard(do_something)
        token.advance()
        callback()  # no-op
    """

    def __init__(self):
        self.value = 0

    def advance(self) -> int:
        self.value += 1
        return self.value

    def is_current(self, token: int) -> bool:
        return token == self.value

    def guard(self, callback: Callable, name: str = None) -> Callable:
        """
        包裝 callback：token 不符時不執行

        參數：
            callback: 原本要執行的函式
            name: 記錄 log 用的名稱

        返回：
            包裝後的函式（接受與原函式相同的參數）
        """
        captured = self.value
        label = name or getattr(callback, "__name__", repr(callback))

        def guarded(*args):
            if not self.is_current(captured):
                logger.debug(
                    f"Ignoring stale callback {label} "
                    f"(token {captured}, current {self.value})"
                )
                return None
            return callback(*args)

        guarded.token = captured
        return guarded


class TimerRegistry:
    """
    已排程 handle 的登記簿

    loop 只需要提供 call_later(delay, callback, *args)，
    回傳的 handle 要有 cancel()（asyncio.TimerHandle 即符合）

    注意：
        - 同名重新排程時會先取消舊的 handle，同一用途最多只有一個 pending
    """

    def __init__(self, loop):
        self._loop = loop
        self._handles: Dict[str, object] = {}

    def schedule(self, name: str, delay: float, callback: Callable, *args):
        self.cancel(name)
        scheduled = []

        def run(*run_args):
            # 同名 handle 可能已被新的排程取代，只移除自己
            if scheduled and self._handles.get(name) is scheduled[0]:
                del self._handles[name]
            callback(*run_args)

        handle = self._loop.call_later(max(delay, 0.0), run, *args)
        scheduled.append(handle)
        self._handles[name] = handle
        return handle

    def cancel(self, name: str) -> bool:
        handle = self._handles.pop(name, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> List[str]:
        names = list(self._handles)
        for name in names:
            self.cancel(name)
        if names:
            logger.debug(f"Cancelled pending timers: {', '.join(names)}")
        return names

    def pending(self) -> List[str]:
        return sorted(self._handles)

    def is_pending(self, name: str) -> bool:
        return name in self._handles
