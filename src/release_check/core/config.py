"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- `CheckConfig` reemplaza el estado global de flags: se construye una vez en
  el arranque y se pasa explícitamente al dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from release_check import __version__
from release_check.core.domain.instances import parse_instances
from release_check.core.errors import InvalidArgumentsError

DEFAULT_STATUS_URL_TEMPLATE = (
    "https://status.salesforce.com/api/instances/{instance}/status/preview?locale={locale}"
)


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Sin variables de entorno el comportamiento es el por defecto: endpoint de
    Salesforce, sin timeout y sin límite de concurrencia.
    """

    model_config = SettingsConfigDict(
        env_prefix="RELEASE_CHECK_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    status_url_template: str = Field(
        default=DEFAULT_STATUS_URL_TEMPLATE,
        min_length=8,
        description="URL template with `{instance}` and `{locale}` placeholders.",
    )
    locale: str = Field(
        default="en",
        min_length=1,
        description="Locale requested from the status API.",
    )
    http_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout por request (segundos). None = esperar indefinidamente.",
    )
    user_agent: str = Field(
        default=f"release-check/{__version__}",
        min_length=1,
        description="User-Agent para las peticiones al status API.",
    )
    max_concurrency: int | None = Field(
        default=None,
        ge=1,
        le=1000,
        description="Máximo de peticiones simultáneas. None = una por instancia.",
    )
    fail_on_error: bool = Field(
        default=False,
        description="Contar los errores de fetch como resultado no sano.",
    )


@dataclass(frozen=True)
class CheckConfig:
    """Parameters of a single check run."""

    instances: tuple[str, ...]
    expected_version: str
    settings: AppSettings = field(default_factory=AppSettings)

    @classmethod
    def from_raw(
        cls,
        raw_instances: str | None,
        expected_version: str | None,
        settings: AppSettings | None = None,
    ) -> "CheckConfig":
        """Validate raw CLI input and build the run configuration."""

        if not raw_instances or not expected_version:
            raise InvalidArgumentsError("Instance and version flags are required")

        instances = parse_instances(raw_instances)
        if not instances:
            raise InvalidArgumentsError("No valid instances provided")

        return cls(
            instances=tuple(instances),
            expected_version=expected_version,
            settings=settings or AppSettings(),
        )
