from sqlalchemy import Column, String, DateTime, Numeric, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from transporte.db.session import Base, new_id


class Acerto(Base):
    __tablename__ = "acertos"

    id = Column(String(36), primary_key=True, default=new_id)
    # one settlement per trip
    viagem_id = Column(String(36), ForeignKey("viagens.id"), unique=True, nullable=False)
    valor = Column(Numeric(12, 2), nullable=False, default=0)
    pago = Column(Boolean, nullable=False, default=False)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
    atualizado_em = Column(DateTime(timezone=True), onupdate=func.now())

    viagem = relationship("Viagem", back_populates="acerto")
