import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "dev-secret-key"


def _env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(key)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


def _env_int(key: str, default: int) -> int:
    v = _env_str(key)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_list(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    v = _env_str(key)
    if v is None:
        return default
    return tuple(item.strip() for item in v.split(",") if item.strip())


@dataclass
class Settings:
    env: str = "prod"
    secret_key: str = DEFAULT_SECRET_KEY
    storage_backend: str = "file"
    data_dir: str = "data"
    database_url: str = "sqlite:///data/forms.db"
    timezone: str = "America/Sao_Paulo"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    auth_timeout: int = 10
    allowed_roles: Tuple[str, ...] = field(default_factory=lambda: ("admin", "manager", "coordinator"))
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Lê as variáveis de ambiente (e o .env, se existir)."""
    defaults = Settings()
    return Settings(
        env=(_env_str("ENV", defaults.env) or defaults.env).lower(),
        secret_key=_env_str("SECRET_KEY", defaults.secret_key),
        storage_backend=(_env_str("STORAGE_BACKEND", defaults.storage_backend)).lower(),
        data_dir=_env_str("DATA_DIR", defaults.data_dir),
        database_url=_env_str("DATABASE_URL", defaults.database_url),
        timezone=_env_str("TIMEZONE", defaults.timezone),
        supabase_url=_env_str("SUPABASE_URL", defaults.supabase_url),
        supabase_anon_key=_env_str("SUPABASE_ANON_KEY", defaults.supabase_anon_key),
        auth_timeout=_env_int("AUTH_TIMEOUT", defaults.auth_timeout),
        allowed_roles=_env_list("ALLOWED_ROLES", defaults.allowed_roles),
        log_level=_env_str("LOG_LEVEL", defaults.log_level).upper(),
    )


def setup_logging(level: str = "INFO") -> None:
    # Configure root logging once.
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s"
    ))
    root.addHandler(handler)


def check_settings(settings: Settings) -> bool:
    """Avisa quando um ambiente fora de dev roda com a SECRET_KEY padrão."""
    if settings.env != "dev" and settings.secret_key == DEFAULT_SECRET_KEY:
        logger.warning(
            f"SECRET_KEY padrão em uso no ambiente '{settings.env}'; "
            "defina SECRET_KEY para que as sessões não possam ser forjadas."
        )
        return False
    return True
