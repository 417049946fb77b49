# =============================================================================
# core/config.py  —  Runtime settings from the environment
# =============================================================================
#
# All knobs are environment variables.  main.py calls load_dotenv() first,
# so a local .env file works too.  Values are read once, at startup, into a
# frozen Settings object that is then passed around explicitly.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from core.errors import ConfigError

CATALOG_BACKENDS = ("memory", "mongo", "rest")
DISPATCH_BACKENDS = ("nats", "rest")


@dataclass(frozen=True)
class Settings:
    catalog_backend: str = "mongo"
    dispatch_backend: str = "nats"

    nats_url: str = "nats://localhost:4222"
    nats_deploy_subject: str = "deploy"
    nats_delete_subject: str = "delete"

    mongo_url: str = "mongodb://localhost:27017/tarxan"
    mongo_collection: str = "templates"

    api_base_url: Optional[str] = None
    api_token: Optional[str] = None
    api_timeout: float = 10.0

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build Settings from `env` (defaults to os.environ).

        Raises:
            ConfigError: unknown backend name, bad timeout, or a REST
                backend selected without API_BASE_URL.
        """
        env = os.environ if env is None else env
        defaults = cls()

        def get(key: str, default):
            value = env.get(key)
            return default if value is None or value.strip() == "" else value.strip()

        catalog_backend = get("CATALOG_BACKEND", defaults.catalog_backend).lower()
        if catalog_backend not in CATALOG_BACKENDS:
            raise ConfigError(
                f"CATALOG_BACKEND must be one of {', '.join(CATALOG_BACKENDS)}; "
                f"got {catalog_backend!r}"
            )

        dispatch_backend = get("DISPATCH_BACKEND", defaults.dispatch_backend).lower()
        if dispatch_backend not in DISPATCH_BACKENDS:
            raise ConfigError(
                f"DISPATCH_BACKEND must be one of {', '.join(DISPATCH_BACKENDS)}; "
                f"got {dispatch_backend!r}"
            )

        raw_timeout = get("API_TIMEOUT", str(defaults.api_timeout))
        try:
            api_timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"API_TIMEOUT must be a number; got {raw_timeout!r}") from None
        if api_timeout <= 0:
            raise ConfigError(f"API_TIMEOUT must be positive; got {api_timeout}")

        api_base_url = get("API_BASE_URL", None)
        if "rest" in (catalog_backend, dispatch_backend) and not api_base_url:
            raise ConfigError("API_BASE_URL is required when a REST backend is selected")

        return cls(
            catalog_backend=catalog_backend,
            dispatch_backend=dispatch_backend,
            nats_url=get("NATS_URL", defaults.nats_url),
            nats_deploy_subject=get("NATS_DEPLOY_SUBJECT", defaults.nats_deploy_subject),
            nats_delete_subject=get("NATS_DELETE_SUBJECT", defaults.nats_delete_subject),
            mongo_url=get("MONGO_URL", defaults.mongo_url),
            mongo_collection=get("MONGO_COLLECTION", defaults.mongo_collection),
            api_base_url=api_base_url.rstrip("/") if api_base_url else None,
            api_token=get("API_TOKEN", None),
            api_timeout=api_timeout,
            log_level=get("LOG_LEVEL", defaults.log_level).upper(),
        )
