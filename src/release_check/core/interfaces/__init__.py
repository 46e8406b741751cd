"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el Core depende de abstracciones.
"""

from release_check.core.interfaces.fetcher import StatusFetcher

__all__ = ["StatusFetcher"]
