from typing import List, Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Настройки базы данных
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = ""
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_NAME: str = "hwplug"
    # Полный URL (например, sqlite) имеет приоритет над отдельными полями
    DATABASE_URL_OVERRIDE: Optional[str] = None

    # Настройки JWT токенов
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30 # 30 дней
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Stripe
    STRIPE_SECRET_KEY: str
    CURRENCY: str = "gbp"
    # Минимальная сумма, которую Stripe готов списать
    MIN_CHARGE_AMOUNT: float = 0.50
    FRONTEND_URL: str

    # Почта (Resend)
    RESEND_API_KEY: str
    EMAIL_FROM: str
    OPERATOR_EMAIL: str
    NOTIFY_INCLUDE_CREDENTIALS: bool = False

    # Ключ Fernet для шифрования данных домашних аккаунтов
    CREDENTIALS_ENCRYPTION_KEY: str

    # Администратор
    ADMIN_EMAIL: str
    ADMIN_PASSWORD: str
    ADMIN_HEADER_AUTH_ENABLED: bool = False

    # Реферальная программа
    REFERRAL_WELCOME_CREDIT: float = 1
    REFERRER_REWARD: float = 2

    # От какой суммы считается скидка: после списания кредитов или до
    DISCOUNT_BASE: Literal["post_credit", "pre_credit"] = "post_credit"

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    STATS_CACHE_TTL_SECONDS: int = 60

    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT: str = "5/minute"
    RATE_LIMIT_STORAGE_URI: Optional[str] = None

    PORT: int = 3001
    CORS_ORIGINS_STR: str = Field(default="", alias="CORS_ORIGINS")

    @property
    def CORS_ORIGINS(self) -> List[str]:
        origins = [origin.strip() for origin in self.CORS_ORIGINS_STR.split(',') if origin.strip()]
        if self.FRONTEND_URL not in origins:
            origins.append(self.FRONTEND_URL)
        return origins

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}"

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+psycopg2://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"

    model_config = SettingsConfigDict(env_file=".env", populate_by_name=True)

settings = Settings()
