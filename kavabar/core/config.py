from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    env: str = "dev"
    secret_key: str = "change_me_super_secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12
    refresh_token_expire_minutes: int = 60 * 24 * 7
    database_url: str = "sqlite:///./database/kava-bar.db"
    backend_cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"
    alembic_ini: str = "alembic.ini"

    # Passlib bcrypt cost; tests lower it
    bcrypt_rounds: int = 12

    # Seeded when the users table is empty
    admin_username: str = "admin"
    admin_password: str = "admin123"

    # Price of one packet of powder; a cup is 1/8 of it
    packet_cost: float = 63.0

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        origins = self.backend_cors_origins
        return [origin.strip() for origin in origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
