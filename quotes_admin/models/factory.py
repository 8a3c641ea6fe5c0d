# quotes_admin/models/factory.py

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime
from quotes_admin.core.database import Base


class Factory(Base):
    __tablename__ = "factories"

    id = Column(Integer, primary_key=True, index=True)
    nome_fabrica = Column("nomeFabrica", String(255), nullable=False)
    localizacao = Column(String(255), nullable=True)
    segmento = Column(String(100), nullable=True)  # Ex.: "Utilidades domésticas"

    contato_principal = Column("contatoPrincipal", String(255), nullable=True)
    email_contato = Column("emailContato", String(255), nullable=True)
    telefone_contato = Column("telefoneContato", String(50), nullable=True)
    observacoes = Column(Text, nullable=True)

    # ativa | inativa | manutencao
    status = Column(String(20), nullable=False, default="ativa")

    created_at = Column("createdAt", DateTime, default=datetime.utcnow)
    updated_at = Column(
        "updatedAt",
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
