"""Domain-specific errors for the plan engine.

Only structural problems surface as exceptions. Content problems inside a
plan (bad segment tokens, odd day strings) are logged and recovered from.
"""


class PlanEngineError(Exception):
    """Base exception for all plan engine errors."""

    pass


class MalformedPlanError(PlanEngineError):
    """Raised when a plan payload lacks one of its root sections.

    Attributes:
        missing: Names of the root keys that were absent
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Plan payload is missing required section(s): {', '.join(missing)}")


class PlanUpdateError(PlanEngineError):
    """Raised when a day update targets a week or day that does not exist."""

    pass
