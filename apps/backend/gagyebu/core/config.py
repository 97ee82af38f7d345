from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "Gagyebu Backend"
    ENV: str = "dev"

    # 기본 SQLite 파일 DB
    # apps/backend/db.sqlite3를 절대경로로 지정하여 CWD에 따른 경로 문제 방지
    _default_db_path = Path(__file__).resolve().parents[2] / "db.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str | None = None

    BCRYPT_ROUNDS: int = 10

    DEFAULT_PAGE_LIMIT: int = 20
    MAX_PAGE_LIMIT: int = 100
    # 개별 거래 최대 금액 (1000억)
    MAX_TRANSACTION_AMOUNT: int = 100_000_000_000
    STATS_TRAILING_DAYS: int = 7

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="GAGYEBU_", case_sensitive=False)

    @property
    def effective_log_level(self) -> str:
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        return "WARNING" if self.ENV == "prod" else "DEBUG"


settings = Settings()
