# quotes_admin/models/container.py

from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, DateTime
from quotes_admin.core.database import Base


class Container(Base):
    __tablename__ = "containers"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(255), nullable=False)
    numero = Column(String(100), nullable=True)
    ref_container = Column("refContainer", String(100), nullable=True)
    capacidade_cbm = Column("capacidadeCBM", Float, nullable=False, default=0)

    # fabricacao | embarcado | em_liberacao | nacionalizado (rótulo livre, sem workflow)
    status = Column(String(20), nullable=False, default="fabricacao")

    created_at = Column("createdAt", DateTime, default=datetime.utcnow)
    updated_at = Column(
        "updatedAt",
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
