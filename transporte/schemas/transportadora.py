from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from transporte.schemas.common import Atualizacao, ORMModel, TextoObrigatorio

class TransportadoraCreate(BaseModel):
    nome: TextoObrigatorio
    cnpj: str = Field(min_length=14, max_length=18)
    email: Optional[EmailStr] = None
    telefone: Optional[str] = None
    endereco: Optional[str] = None

class TransportadoraUpdate(Atualizacao):
    nome: TextoObrigatorio = None
    cnpj: str = Field(default=None, min_length=14, max_length=18)
    email: Optional[EmailStr] = None
    telefone: Optional[str] = None
    endereco: Optional[str] = None

class TransportadoraRead(ORMModel):
    id: str
    nome: str
    cnpj: str
    email: Optional[str] = None
    telefone: Optional[str] = None
    endereco: Optional[str] = None
    criado_em: Optional[datetime] = None
