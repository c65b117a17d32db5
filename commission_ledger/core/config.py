from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Commission Ledger"
    version: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    APP_DATABASE_DSN: str = "sqlite:////tmp/commission_ledger.db"

    # Bearer tokens issued by the back-office identity provider
    JWT_SECRET: str = "change-me-commission-ledger-secret"
    JWT_ALGORITHM: str = "HS256"

    # Comma-separated ISO 4217 codes accepted on ledger entries and closings
    SUPPORTED_CURRENCIES: str = "USD,EUR,BRL,ARS,CLP,GBP,PEN,COP,MXN,UYU"

    # Invoice header
    COMPANY_NAME: str = "Travel Agency"
    COMPANY_ADDRESS: str = ""
    COMPANY_EMAIL: str = ""

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def supported_currencies(self) -> list[str]:
        return [c.strip().upper() for c in self.SUPPORTED_CURRENCIES.split(",") if c.strip()]


settings = Settings()
