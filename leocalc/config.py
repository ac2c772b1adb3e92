from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./leocalc.db"
    COMPANY_NAME: str = "Leopack"
    COMPANY_EMAIL: str = "sales@leopack.in"
    COMPANY_PHONE: str = ""
    COMPANY_ADDRESS: str = ""
    LOGO_PATH: str = ""  # PNG for the schedule PDF header; company name is drawn when empty
    DEFAULT_INTEREST_RATE: float = 12.0

    # Auth
    JWT_SECRET: str = ""  # REQUIRED in production — fail loudly if missing at auth time
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_EXPIRE_DAYS: int = 30

    # Magic link sign-in
    MAGIC_LINK_EXPIRE_MINUTES: int = 15
    MAGIC_LINK_COOLDOWN_SECONDS: int = 60
    MAGIC_LINK_BASE_URL: str = "http://localhost:8000"

    # Access policy — who may sign in. Empty allow-list means nobody.
    # Lists are JSON in the environment: AUTHORIZED_EMAILS='["ops@leopack.in"]'
    AUTHORIZED_EMAILS: List[str] = []
    # bcrypt hashes of shared access codes. Weak gate: a code grants a session without email proof.
    ACCESS_CODE_HASHES: List[str] = []

    class Config:
        env_file = ".env"


settings = Settings()
