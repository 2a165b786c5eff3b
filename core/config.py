import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Settings:
    def __init__(self):
        self.database_url: str = os.getenv("DATABASE_URL", "sqlite:///./scoresheets.db")
        self.debug: bool = os.getenv("DEBUG", "False").lower() == "true"
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.cors_origins: List[str] = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ]

        # JWT
        # The token issuer lives outside this service; only the shared secret is needed here.
        # "fallback-secret" is for local development only.
        self.jwt_secret_key: str = os.getenv("JWT_SECRET_KEY", "fallback-secret")
        self.jwt_algorithm: str = "HS256"
        self.jwt_expire_minutes: int = int(os.getenv("JWT_EXPIRE_MINUTES", 60 * 24 * 3))  # 3 days by default

        # Generic ("simple scores") sessions
        self.generic_min_players: int = 2
        self.generic_max_players: int = 8

        # Belote is conventionally played to 501, sessions may override it
        self.belote_default_target: int = int(os.getenv("BELOTE_DEFAULT_TARGET", 501))

        self.recent_sessions_limit: int = 10

settings = Settings()
