# time_estimator.py
#
# Description:
# Computes how long the batch-cooking schedule takes and whether it fits in
# the time the user has. Steps marked parallel overlap with each other: each
# contiguous run of parallel steps costs as much as its longest step, and
# every other step adds its full duration.

from dataclasses import dataclass
from typing import Optional

from config import TIME_MARGIN
from models import MealPlan


@dataclass
class TimeEstimate:
    total_plan_time: float
    time_fits: Optional[bool]


def schedule_duration(plan: MealPlan) -> float:
    """Total minutes of the prep schedule; falls back to the dishes' prep times when there is no schedule."""
    if not plan.prep_schedule:
        return float(sum(dish.prep_time for dish in plan.dishes))

    total = 0.0
    parallel_block = 0.0
    for step in sorted(plan.prep_schedule, key=lambda s: s.order):
        if step.parallel:
            parallel_block = max(parallel_block, step.duration)
            continue
        total += parallel_block + step.duration
        parallel_block = 0.0
    return total + parallel_block


def estimate_time(plan: MealPlan, available_time: Optional[float] = None) -> TimeEstimate:
    """
    Args:
        plan: The plan whose schedule is measured.
        available_time: Hours the user has to cook, if given.

    Returns:
        The total time in minutes and, when available_time is set, whether
        the plan fits in it.
    """
    total = schedule_duration(plan)
    if available_time is None:
        return TimeEstimate(total, None)
    return TimeEstimate(total, total <= available_time * 60 * TIME_MARGIN)


def time_message(estimate: TimeEstimate, available_time: float) -> str:
    return (
        f"O preparo estimado leva {estimate.total_plan_time:g} minutos, mais do que o tempo "
        f"disponível de {available_time * 60:g} minutos."
    )
