from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from transporte.db.session import Base, new_id


class Transportadora(Base):
    __tablename__ = "transportadoras"

    id = Column(String(36), primary_key=True, default=new_id)
    nome = Column(String(255), nullable=False)
    # CNPJ is the tenant's tax id
    cnpj = Column(String(18), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    telefone = Column(String(50), nullable=True)
    endereco = Column(String(500), nullable=True)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
    atualizado_em = Column(DateTime(timezone=True), onupdate=func.now())

    motoristas = relationship("Motorista", back_populates="transportadora", lazy="select")
    viagens = relationship("Viagem", back_populates="transportadora", lazy="select")
