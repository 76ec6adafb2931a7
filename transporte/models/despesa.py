from sqlalchemy import Column, String, DateTime, Text, Numeric, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from transporte.db.session import Base, new_id


class Despesa(Base):
    __tablename__ = "despesas"

    id = Column(String(36), primary_key=True, default=new_id)
    viagem_id = Column(String(36), ForeignKey("viagens.id"), nullable=False, index=True)
    valor = Column(Numeric(12, 2), nullable=False)
    descricao = Column(Text, nullable=False)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
    atualizado_em = Column(DateTime(timezone=True), onupdate=func.now())

    viagem = relationship("Viagem", back_populates="despesas")
