"""Contrato del fetcher de estado.

Por qué Protocol:
- El servicio de comparación solo necesita `fetch(instance) -> versión`.
- Permite sustituir el adaptador HTTP por un fake en tests sin herencia.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StatusFetcher(Protocol):
    """Contrato mínimo para obtener la versión publicada por una instancia.

    Reglas de diseño:
    - `fetch` es asíncrono porque hace I/O (HTTP).
    - Ante cualquier fallo lanza `StatusFetchError`; nunca devuelve None.
    """

    async def fetch(self, instance: str) -> str:
        """Return the release version reported by `instance`."""

        ...
