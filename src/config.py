"""Engine configuration."""

import math
import os
from dataclasses import dataclass

from .errors import ValidationError

# Allowed increase of the Variant C installment over the current installment
DEFAULT_INSTALLMENT_TOLERANCE = 30.0
DEFAULT_MIN_TERM_MONTHS = 12
DEFAULT_ITERATION_MARGIN = 12
DEFAULT_ROUNDING_TOLERANCE = 0.01

ENV_INSTALLMENT_TOLERANCE = "MORTGAGE_INSTALLMENT_TOLERANCE"
ENV_MIN_TERM_MONTHS = "MORTGAGE_MIN_TERM_MONTHS"
ENV_ITERATION_MARGIN = "MORTGAGE_ITERATION_MARGIN"


@dataclass(frozen=True)
class EngineSettings:
    """Tunable constants of the amortization and refinance engines."""

    installment_tolerance: float = DEFAULT_INSTALLMENT_TOLERANCE
    min_term_months: int = DEFAULT_MIN_TERM_MONTHS
    iteration_margin: int = DEFAULT_ITERATION_MARGIN  # extra loop iterations allowed past the term
    rounding_tolerance: float = DEFAULT_ROUNDING_TOLERANCE

    def __post_init__(self):
        if math.isnan(self.installment_tolerance) or self.installment_tolerance < 0:
            raise ValidationError(
                "Installment tolerance must be a non-negative number",
                context={"installment_tolerance": self.installment_tolerance},
            )
        if self.min_term_months < 1:
            raise ValidationError(
                "Minimum term must be at least one month",
                context={"min_term_months": self.min_term_months},
            )
        if self.iteration_margin < 0:
            raise ValidationError(
                "Iteration margin cannot be negative",
                context={"iteration_margin": self.iteration_margin},
            )
        if math.isnan(self.rounding_tolerance) or self.rounding_tolerance < 0:
            raise ValidationError(
                "Rounding tolerance must be a non-negative number",
                context={"rounding_tolerance": self.rounding_tolerance},
            )

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Build settings from MORTGAGE_* environment variables."""
        return cls(
            installment_tolerance=_read_env(ENV_INSTALLMENT_TOLERANCE, float, DEFAULT_INSTALLMENT_TOLERANCE),
            min_term_months=_read_env(ENV_MIN_TERM_MONTHS, int, DEFAULT_MIN_TERM_MONTHS),
            iteration_margin=_read_env(ENV_ITERATION_MARGIN, int, DEFAULT_ITERATION_MARGIN),
        )


def _read_env(name: str, cast, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValidationError(
            f"Invalid value for {name}", context={"value": raw}
        ) from e
