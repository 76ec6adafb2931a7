from sqlalchemy import Column, String, DateTime, Enum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from transporte.db.session import Base, new_id
import enum


class RoleEnum(str, enum.Enum):
    ADMIN_TRANSPORTADORA = "ADMIN_TRANSPORTADORA"
    MOTORISTA = "MOTORISTA"


class Usuario(Base):
    __tablename__ = "usuarios"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    senha_hash = Column(String(255), nullable=False)
    papel = Column(Enum(RoleEnum), nullable=False)
    # admins link to their company, drivers to their Motorista row
    transportadora_id = Column(String(36), ForeignKey("transportadoras.id"), nullable=True)
    motorista_id = Column(String(36), ForeignKey("motoristas.id"), unique=True, nullable=True)
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
    atualizado_em = Column(DateTime(timezone=True), onupdate=func.now())

    transportadora = relationship("Transportadora", lazy="joined")
    motorista = relationship("Motorista", lazy="joined")
