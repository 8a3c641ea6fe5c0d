# quotes_admin/models/quote.py

from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Float,
    DateTime,
)
from quotes_admin.core.database import Base


class Quote(Base):
    """
    Linha de cotação importada da planilha do fornecedor.

    Os nomes das colunas seguem o schema dos documentos
    (`ctns`, `unitCtn`, `unitPrice`, ...). `factoryId` e `containerId`
    são referências fracas: sem FK e sem cascade.
    """

    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)

    factory_id = Column("factoryId", Integer, nullable=True, index=True)
    container_id = Column("containerId", Integer, nullable=True, index=True)

    # Identificação
    ref = Column(String(100), nullable=True)
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    ncm = Column(String(20), nullable=True)
    remark = Column(Text, nullable=True)
    quote_name = Column("quoteName", String(255), nullable=True)
    import_name = Column("importName", String(255), nullable=True)

    # Quantidades e preço
    ctns = Column(Float, nullable=True)          # caixas
    unit_ctn = Column("unitCtn", Float, nullable=True)  # unidades por caixa
    qty = Column(Float, nullable=True)           # ctns * unitCtn
    unit_price = Column("unitPrice", Float, nullable=True)
    amount = Column(Float, nullable=True)        # qty * unitPrice

    # Dados físicos (por caixa)
    length = Column(Float, nullable=True)
    width = Column(Float, nullable=True)
    height = Column(Float, nullable=True)
    cbm = Column(Float, nullable=True)
    cbm_total = Column("cbmTotal", Float, nullable=True)  # cbm * ctns
    gross_weight = Column("grossWeight", Float, nullable=True)
    net_weight = Column("netWeight", Float, nullable=True)
    total_gross_weight = Column("totalGrossWeight", Float, nullable=True)
    total_net_weight = Column("totalNetWeight", Float, nullable=True)

    # Pedido / embarque
    selected_for_order = Column("selectedForOrder", Boolean, default=False, nullable=False)
    order_status = Column("orderStatus", String(20), nullable=True)  # selected | pending
    order_date = Column("orderDate", DateTime, nullable=True)
    status = Column(String(20), nullable=True)  # fabricacao | embarcado | em_liberacao | nacionalizado

    created_at = Column("createdAt", DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(
        "updatedAt",
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
