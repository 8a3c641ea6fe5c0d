import os

# banco em memória para os testes; precisa vir antes de importar o pacote
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from quotes_admin.core.database import Base, SessionLocal, engine
from quotes_admin.models.factory import Factory  # noqa: F401
from quotes_admin.models.quote import Quote  # noqa: F401
from quotes_admin.models.container import Container  # noqa: F401
from quotes_admin.models.quote_import import QuoteImport  # noqa: F401


@pytest.fixture()
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    from main import app

    with TestClient(app) as c:
        yield c
