import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None
    port: int = 3000
    database_url: str = "sqlite:///./orders.db"
    currency: str = "dkk"
    allowed_countries: list[str] = field(default_factory=lambda: ["DK"])
    success_url: str = "https://www.forlaget-umbra.dk/success.html?session_id={CHECKOUT_SESSION_ID}"
    cancel_url: str = "https://www.forlaget-umbra.dk/cancel.html"
    cors_origins: list[str] = field(
        default_factory=lambda: ["https://AdaArdor.github.io", "https://www.forlaget-umbra.dk"]
    )
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(dotenv_path=ENV_PATH)
        defaults = cls()
        return cls(
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY") or None,
            stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET") or None,
            port=int(os.getenv("PORT", defaults.port)),
            database_url=os.getenv("DATABASE_URL") or defaults.database_url,
            currency=os.getenv("CHECKOUT_CURRENCY", defaults.currency).lower(),
            allowed_countries=_split(os.getenv("ALLOWED_COUNTRIES", "")) or defaults.allowed_countries,
            success_url=os.getenv("SUCCESS_URL", defaults.success_url),
            cancel_url=os.getenv("CANCEL_URL", defaults.cancel_url),
            cors_origins=_split(os.getenv("CORS_ORIGINS", "")) or defaults.cors_origins,
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )
