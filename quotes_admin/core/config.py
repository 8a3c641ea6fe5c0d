# quotes_admin/core/config.py

import os
from dotenv import load_dotenv

# Caminho da raiz do projeto (onde está o main.py e o .env)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
ENV_PATH = os.path.join(BASE_DIR, ".env")

# Carrega variáveis do arquivo .env, se existir
if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH)

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"


class Settings:
    def __init__(self) -> None:
        # SQLite por padrão se não houver .env
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            "sqlite:///./quotes_admin.db",
        )
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        self.CORS_ORIGINS: list[str] = [o.strip() for o in origins.split(",") if o.strip()]


settings = Settings()
