"""Solver exception hierarchy. Deviations from target are not errors; the relaxer reports them."""


class PlanSolverError(Exception):
    """
    Base class for solver failures surfaced to callers.

    Attributes:
        message: Human-readable error message.
        detail: Machine-friendly context (failing field, slot, category).
    """

    def __init__(self, message: str, detail: dict | None = None) -> None:
        self.message = message
        self.detail = detail or {}
        super().__init__(message)


class InvalidProfile(PlanSolverError):
    """Required biometric input is missing or outside physiological range."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        super().__init__(f"Invalid profile field '{field}': {reason}", {"field": field})


class NoFeasibleMeal(PlanSolverError):
    """No catalog meal can fill a slot, even with the variety window fully relaxed."""

    def __init__(self, slot: str) -> None:
        self.slot = slot
        super().__init__(f"No feasible meal for slot '{slot}'", {"slot": slot})


class NoFeasibleActivity(PlanSolverError):
    """A category has a nonzero target but no eligible activity."""

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(
            f"No feasible activity for category '{category}'",
            {"category": category},
        )


class RestrictionViolation(PlanSolverError):
    """A chosen item carries a tag from the profile's hard restriction set."""

    def __init__(self, item_ids: list[str], restrictions: list[str]) -> None:
        self.item_ids = item_ids
        self.restrictions = restrictions
        super().__init__(
            f"Items {item_ids} violate restrictions {restrictions}",
            {"item_ids": item_ids, "restrictions": restrictions},
        )


class SolveTimeout(PlanSolverError):
    """The caller's deadline passed between core invocations."""

    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"Solve deadline exceeded before {stage}", {"stage": stage})
