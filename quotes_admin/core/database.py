# quotes_admin/core/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from quotes_admin.core.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


# Para SQLite, é importante usar connect_args={"check_same_thread": False}
if _is_memory_sqlite(SQLALCHEMY_DATABASE_URL):
    # banco em memória: uma única conexão compartilhada, senão cada sessão vê um banco vazio
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
        future=True,
    )
elif SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=False,
        future=True,
    )
else:
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        echo=False,
        future=True,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Dependência para usar em endpoints
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
