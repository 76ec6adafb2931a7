from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from transporte.db.session import Base, new_id


class Motorista(Base):
    __tablename__ = "motoristas"

    id = Column(String(36), primary_key=True, default=new_id)
    nome = Column(String(255), nullable=False)
    cpf = Column(String(14), unique=True, index=True, nullable=False)
    # license number (CNH); optional but unique when present
    cnh = Column(String(20), unique=True, nullable=True)
    telefone = Column(String(50), nullable=True)
    transportadora_id = Column(String(36), ForeignKey("transportadoras.id"), nullable=False, index=True)
    # code handed out by the company so the driver can claim a login
    codigo_validacao = Column(String(6), nullable=True)
    validado = Column(Boolean, nullable=False, default=False)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
    atualizado_em = Column(DateTime(timezone=True), onupdate=func.now())

    transportadora = relationship("Transportadora", back_populates="motoristas", lazy="joined")
    viagens = relationship("Viagem", back_populates="motorista", lazy="select")
