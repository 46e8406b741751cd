"""Excepciones del Core.

Por qué una jerarquía propia:
- La CLI solo necesita distinguir "invocación inválida" de "fallo por instancia".
- Los adaptadores traducen errores de httpx/pydantic a estos tipos, así el
  Core no depende de librerías de I/O.
"""

from __future__ import annotations


class ReleaseCheckError(Exception):
    """Base exception for release-check."""


class InvalidArgumentsError(ReleaseCheckError):
    """Missing/empty flags or an instance list with no usable entries."""


class StatusFetchError(ReleaseCheckError):
    """The status of one instance could not be retrieved or decoded."""

    def __init__(self, message: str, *, instance: str) -> None:
        self.instance = instance
        super().__init__(message)
