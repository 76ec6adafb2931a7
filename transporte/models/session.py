from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from transporte.db.session import Base, new_id


class Session(Base):
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=new_id)
    jti = Column(String(128), unique=True, index=True, nullable=False)
    usuario_id = Column(String(36), ForeignKey("usuarios.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
    revoked = Column(Boolean, default=False, nullable=False)
