"""Diet core, exercise core, and the plan validator/relaxer."""

from wellness_plan_solver.solver.diet import DietPreferences, DietSolver, solve_diet, solve_diet_days
from wellness_plan_solver.solver.exercise import ExerciseAllocator, solve_week
from wellness_plan_solver.solver.validator import PlanRelaxer, restriction_leaks, validate

__all__ = [
    "DietPreferences",
    "DietSolver",
    "ExerciseAllocator",
    "PlanRelaxer",
    "restriction_leaks",
    "solve_diet",
    "solve_diet_days",
    "solve_week",
    "validate",
]
