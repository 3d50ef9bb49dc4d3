"""
Alertness classification and guidance

Maps the 5-minute rolling blink-rate average to an alertness state and the
static schedule plan shown for it.
"""

from typing import Optional

from ..core.config import HIGH_ALERTNESS_BPM, DROWSY_BPM, MIN_RECOMMENDATION_SAMPLES
from ..core.data_types import AlertnessState, Recommendation, SchedulePlan

STATE_LABELS = {
    AlertnessState.HIGH_ALERTNESS: "State: High Alertness",
    AlertnessState.NORMAL: "State: Normal",
    AlertnessState.DROWSY: "State: Drowsy",
}

SCHEDULE_PLANS = {
    AlertnessState.HIGH_ALERTNESS: SchedulePlan(
        title="Deep Work Schedule",
        items=[
            "Focus on complex, cognitively demanding tasks",
            "Schedule important meetings and decision-making activities",
            "Tackle challenging projects that require sustained attention",
            "Optimize this high-alertness window for peak productivity",
            "Maintain hydration and take brief movement breaks every 90 minutes",
        ],
    ),
    AlertnessState.NORMAL: SchedulePlan(
        title="Standard Work/Rest Schedule",
        items=[
            "Balance focused work with regular breaks",
            "Follow the 50-10 rule: 50 minutes work, 10 minutes rest",
            "Engage in moderate-intensity tasks and routine activities",
            "Stay hydrated and maintain good posture",
            "Plan for 7-8 hours of sleep tonight",
        ],
    ),
    AlertnessState.DROWSY: SchedulePlan(
        title="Immediate Rest Schedule",
        items=[
            "Take a 20-minute Nap immediately to restore alertness",
            "Find a quiet, comfortable space to rest",
            "Set an alarm to avoid oversleeping",
            "After nap: light stretching and hydration",
            "Avoid driving or operating machinery until fully alert",
            "Consider earlier bedtime tonight for recovery",
        ],
    ),
}


def classify_alertness(rolling_average: float) -> AlertnessState:
    """
    Derive the alertness state from the 5-minute rolling average

    - average > 18        -> HIGH_ALERTNESS
    - 10 <= average <= 18 -> NORMAL
    - average < 10        -> DROWSY
    """
    if rolling_average > HIGH_ALERTNESS_BPM:
        return AlertnessState.HIGH_ALERTNESS
    if rolling_average >= DROWSY_BPM:
        return AlertnessState.NORMAL
    return AlertnessState.DROWSY


def get_schedule_plan(state: AlertnessState) -> SchedulePlan:
    plan = SCHEDULE_PLANS[AlertnessState(state)]
    return SchedulePlan(title=plan.title, items=list(plan.items))


def recommend(rolling_average: Optional[float], sample_count: int,
              min_samples: int = MIN_RECOMMENDATION_SAMPLES) -> Optional[Recommendation]:
    """
    Build a recommendation once enough recent data exists

    Args:
        rolling_average: 5-minute average, None when the window is empty
        sample_count: Samples currently inside the 5-minute window
        min_samples: Minimum samples before a single noisy reading is trusted

    Returns:
        Recommendation, or None without recent data or enough samples
    """
    if rolling_average is None or sample_count < min_samples:
        return None
    state = classify_alertness(rolling_average)
    return Recommendation(
        state=state,
        label=STATE_LABELS[state],
        plan=get_schedule_plan(state),
        rolling_average=rolling_average,
        sample_count=sample_count,
    )
