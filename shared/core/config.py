import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    # Supabase Postgres
    DATABASE_URL: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASS: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: Optional[str] = "5432"
    DB_NAME: Optional[str] = "postgres"

    # Clerk (identity provider)
    CLERK_JWT_KEY: Optional[str] = None
    CLERK_JWT_ALGORITHM: str = "RS256"
    CLERK_AUTHORIZED_PARTIES: Optional[str] = None
    CLERK_SECRET_KEY: Optional[str] = None
    CLERK_API_URL: str = "https://api.clerk.com/v1"
    CLERK_WEBHOOK_SECRET: Optional[str] = None

    # Tipalti (payment provider)
    TIPALTI_API_KEY: str = ""
    TIPALTI_PAYER_NAME: str = "SkyYield"
    TIPALTI_HMAC_SECRET: str = ""
    TIPALTI_SANDBOX: bool = True
    TIPALTI_WEBHOOK_SECRET: Optional[str] = None

    # DocuSeal (e-signature)
    DOCUSEAL_WEBHOOK_SECRET: Optional[str] = None

    # CoinGecko (market data)
    COINGECKO_API_URL: str = "https://api.coingecko.com/api/v3"
    COINGECKO_API_KEY: Optional[str] = None
    PRICE_CACHE_SECONDS: int = 300

    HTTP_TIMEOUT_SECONDS: float = 15.0
    ALLOWED_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # run_services.py
    SERVICE_HOST: str = "0.0.0.0"
    IDENTITY_SERVICE_PORT: int = 8001
    PORTAL_SERVICE_PORT: int = 8002
    RELOAD: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def authorized_parties(self) -> List[str]:
        return [p.strip() for p in (self.CLERK_AUTHORIZED_PARTIES or "").split(",") if p.strip()]

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def tipalti_base_url(self) -> str:
        if self.TIPALTI_SANDBOX:
            return "https://api-sandbox.tipalti.com"
        return "https://api.tipalti.com"


settings = Settings()

DATABASE_URL = settings.DATABASE_URL or (
    f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}?sslmode=require"
)
