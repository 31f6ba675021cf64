"""
Chart projection service.

Turns a RoundSnapshot into the frame a bar-chart renderer draws: one slot per
step, the live candle overlaid on its slot, the y-axis range, and the
current-value marker line.
"""
from typing import Any, Dict, List, Optional

from models import RoundSnapshot

DIRECTION_UP = "up"
DIRECTION_DOWN = "down"


def _bar(index: int, base: float, value: float) -> Dict[str, Any]:
    return {
        "index": index,
        "low": base,
        "high": value,
        "direction": DIRECTION_UP if value >= base else DIRECTION_DOWN,
    }


def project_bars(snapshot: RoundSnapshot) -> List[Optional[Dict[str, Any]]]:
    bars: List[Optional[Dict[str, Any]]] = [
        _bar(step.index, step.base, step.value) if step else None
        for step in snapshot.completed_steps
    ]

    active = snapshot.active_step
    if active is not None and active.index < len(bars):
        bars[active.index] = _bar(active.index, active.base, active.current_value)

    return bars


def current_marker(snapshot: RoundSnapshot) -> Optional[Dict[str, Any]]:
    if snapshot.active_step is None:
        return None
    value = snapshot.active_step.current_value
    return {"value": value, "label": f"{value:.4f}x"}


def countdown_label(snapshot: RoundSnapshot) -> Optional[str]:
    if snapshot.countdown_remaining <= 0:
        return None
    return f"{snapshot.countdown_remaining:.1f}s"


def project_chart(snapshot: RoundSnapshot) -> Dict[str, Any]:
    """
    Build the renderer frame for a snapshot.

    The marker follows the live candle and stays on the rugged candle after a
    pull, so the 0.0000x label remains visible during the outcome message.
    """
    return {
        "version": snapshot.version,
        "phase": snapshot.phase,
        "labels": [str(i) for i in range(len(snapshot.completed_steps))],
        "bars": project_bars(snapshot),
        "y_min": snapshot.axis_bounds.min,
        "y_max": snapshot.axis_bounds.max,
        "marker": current_marker(snapshot),
        "countdown_label": countdown_label(snapshot),
        "rug_pulled": snapshot.rug_pulled,
        "moonshot": snapshot.moonshot,
        "trend": snapshot.trend,
    }
