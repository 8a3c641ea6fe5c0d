# main.py

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from quotes_admin.core.config import settings
from quotes_admin.core.database import engine, Base
from quotes_admin.core.logging_config import setup_logging

# Importa os models para registrá-los no Base.metadata
from quotes_admin.models.factory import Factory  # noqa: F401
from quotes_admin.models.quote import Quote  # noqa: F401
from quotes_admin.models.container import Container  # noqa: F401
from quotes_admin.models.quote_import import QuoteImport  # noqa: F401

from quotes_admin.api.factories import router as factories_router
from quotes_admin.api.quotes import router as quotes_router
from quotes_admin.api.containers import router as containers_router

setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title="Factory Quotes Admin API",
    version="0.1.0",
)

# === CORS: liberar acesso do painel (front em localhost) ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)


app.include_router(factories_router)
app.include_router(quotes_router)
app.include_router(containers_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
