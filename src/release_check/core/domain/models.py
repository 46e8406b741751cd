"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Valida el payload remoto en el borde (solo nos importa `releaseNumber`).
- Sustituye los mensajes "etiquetados" por texto por un resultado tipado:
  el veredicto se calcula con `outcome`, nunca buscando substrings.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class StatusResponse(BaseModel):
    """Subset of the instance status payload that we actually read."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    release_number: str = Field(
        ...,
        alias="releaseNumber",
        description="Release version currently reported by the instance.",
    )


class CheckOutcome(str, Enum):
    """Category of a single instance check."""

    MATCHED = "matched"
    MISMATCHED = "mismatched"
    FETCH_FAILED = "fetch_failed"


class CheckResult(BaseModel):
    """Outcome of checking one instance against the expected version."""

    model_config = ConfigDict(frozen=True)

    instance: str = Field(..., min_length=1, description="Instance that was checked.")
    outcome: CheckOutcome
    expected: str = Field(..., description="Version the instance should report.")
    actual: str | None = Field(
        default=None,
        description="Version reported by the instance (only when the fetch succeeded).",
    )
    reason: str | None = Field(
        default=None,
        description="Error text when the status could not be fetched.",
    )

    @classmethod
    def from_version(cls, *, instance: str, expected: str, actual: str) -> "CheckResult":
        outcome = CheckOutcome.MATCHED if actual == expected else CheckOutcome.MISMATCHED
        return cls(instance=instance, outcome=outcome, expected=expected, actual=actual)

    @classmethod
    def failed(cls, *, instance: str, expected: str, reason: str) -> "CheckResult":
        return cls(
            instance=instance,
            outcome=CheckOutcome.FETCH_FAILED,
            expected=expected,
            reason=reason,
        )

    @property
    def message(self) -> str:
        """Human readable line used for logging."""

        if self.outcome is CheckOutcome.FETCH_FAILED:
            return f"Error fetching status for instance {self.instance}: {self.reason}"
        if self.outcome is CheckOutcome.MISMATCHED:
            return (
                f"Release number mismatch for instance {self.instance}: "
                f"expected {self.expected}, got {self.actual}"
            )
        return f"Release number matches for instance {self.instance}: {self.actual}"


class CheckSummary(BaseModel):
    """Aggregated view of one run."""

    total: int = Field(default=0, ge=0)
    matched: int = Field(default=0, ge=0)
    mismatched: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    healthy: bool = Field(
        default=True,
        description="False when any mismatch (or, if configured, fetch failure) was seen.",
    )
