"""Requirements engine and adjustment rules."""

from wellness_plan_solver.rules.engine import (
    AdjustmentRule,
    RequirementsEngine,
    Targets,
    compile_rule,
    compute_requirements,
)

__all__ = [
    "AdjustmentRule",
    "RequirementsEngine",
    "Targets",
    "compile_rule",
    "compute_requirements",
]
