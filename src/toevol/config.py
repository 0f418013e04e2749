import os


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    PROJECT_NAME: str = "toevol"
    DEBUG: bool = _env_flag("DEBUG")
    LOG_DIR: str = os.environ.get("LOG_DIR", "log")
    LOG_FILE: str = os.environ.get("LOG_FILE", "toevol.log")
    LOG_TO_DB: bool = _env_flag("LOG_TO_DB")
    DB_DIR: str = os.environ.get("DB_DIR", "db")
    DB_FILE: str = os.environ.get("DB_FILE", "toevol.db")
    DB_TIMEOUT_SECONDS: float = float(os.environ.get("DB_TIMEOUT_SECONDS", "5"))
    VOCAB_DIR: str = os.environ.get("VOCAB_DIR", "vocabulary")
    SEED_VOCABULARY: bool = _env_flag("SEED_VOCABULARY", "1")
    REVIEW_HISTORY_LIMIT: int = 50
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")

    @property
    def database_path(self) -> str:
        return os.path.join(self.DB_DIR, self.DB_FILE)


REQUIRED_SETTINGS = ("DB_DIR", "DB_FILE", "LOG_DIR", "LOG_FILE")


def check_settings(config: Settings) -> None:
    """Raise at startup when a required value is blank or the timeout is unusable."""
    missing = [
        name for name in REQUIRED_SETTINGS if not str(getattr(config, name, "")).strip()
    ]
    if missing:
        raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")
    if config.DB_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("DB_TIMEOUT_SECONDS must be positive")


settings = Settings()
