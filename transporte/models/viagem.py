from sqlalchemy import Column, String, DateTime, Text, Enum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from transporte.db.session import Base, new_id
import enum


class StatusViagem(str, enum.Enum):
    PLANEJADA = "PLANEJADA"
    EM_ANDAMENTO = "EM_ANDAMENTO"
    FINALIZADA = "FINALIZADA"
    CANCELADA = "CANCELADA"


# allowed next states for each status; terminal states map to nothing
TRANSICOES_VIAGEM = {
    StatusViagem.PLANEJADA: {StatusViagem.EM_ANDAMENTO, StatusViagem.CANCELADA},
    StatusViagem.EM_ANDAMENTO: {StatusViagem.FINALIZADA, StatusViagem.CANCELADA},
    StatusViagem.FINALIZADA: set(),
    StatusViagem.CANCELADA: set(),
}


class Viagem(Base):
    __tablename__ = "viagens"

    id = Column(String(36), primary_key=True, default=new_id)
    descricao = Column(Text, nullable=False)
    # stored as naive UTC
    data_inicio = Column(DateTime, nullable=False)
    data_fim = Column(DateTime, nullable=True)
    status = Column(Enum(StatusViagem), nullable=False, default=StatusViagem.PLANEJADA)
    transportadora_id = Column(String(36), ForeignKey("transportadoras.id"), nullable=False, index=True)
    motorista_id = Column(String(36), ForeignKey("motoristas.id"), nullable=False, index=True)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
    atualizado_em = Column(DateTime(timezone=True), onupdate=func.now())

    transportadora = relationship("Transportadora", back_populates="viagens", lazy="joined")
    motorista = relationship("Motorista", back_populates="viagens", lazy="joined")
    receitas = relationship("Receita", back_populates="viagem", lazy="selectin", order_by="Receita.criado_em")
    despesas = relationship("Despesa", back_populates="viagem", lazy="selectin", order_by="Despesa.criado_em")
    acerto = relationship("Acerto", back_populates="viagem", uselist=False, lazy="selectin")
