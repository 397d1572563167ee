"""Application settings.

Settings are read once at startup from the environment (and a project-level
``.env`` file, when one exists) and handed to the components that need them.
Nothing here is mutated after construction.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_AUTH_SECRET = "change-me"


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    database_url: str = "sqlite:///./nepify.db"

    auth_secret_key: str = DEFAULT_AUTH_SECRET
    auth_algorithm: str = "HS256"
    auth_issuer: str | None = None

    payment_gateway: str = "fake"
    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None
    frontend_url: str = "http://localhost:5173"
    currency: str = "npr"

    cors_origins: tuple[str, ...] = field(default=("*",))

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        """Build settings from environment variables.

        A ``.env`` file is loaded first if present; real environment variables
        take precedence over it.
        """
        env_path = env_file or PROJECT_ROOT / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)

        return cls(
            environment=os.getenv("ENVIRONMENT", "development").lower(),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./nepify.db"),
            auth_secret_key=os.getenv("AUTH_SECRET_KEY", DEFAULT_AUTH_SECRET),
            auth_algorithm=os.getenv("AUTH_ALGORITHM", "HS256"),
            auth_issuer=os.getenv("AUTH_ISSUER") or None,
            payment_gateway=os.getenv("PAYMENT_GATEWAY", "fake").lower(),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY") or None,
            stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET") or None,
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/"),
            currency=os.getenv("CURRENCY", "npr").lower(),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")),
        )

    @property
    def is_production(self) -> bool:
        return self.environment in ("production", "prod")

    @property
    def expose_error_details(self) -> bool:
        """Whether internal error details may be attached to error responses."""
        return self.environment not in ("production", "prod", "staging")

    def validate(self) -> None:
        """Reject configurations that must never reach production."""
        if not self.is_production:
            return

        if self.auth_secret_key == DEFAULT_AUTH_SECRET:
            raise ValueError("AUTH_SECRET_KEY must be set in production")
        if self.payment_gateway == "fake":
            raise ValueError("PAYMENT_GATEWAY=fake is not allowed in production")
        if self.payment_gateway == "stripe" and not (self.stripe_secret_key and self.stripe_webhook_secret):
            raise ValueError("STRIPE_SECRET_KEY and STRIPE_WEBHOOK_SECRET are required for the stripe gateway")
