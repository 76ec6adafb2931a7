from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from transporte.schemas.common import Atualizacao, ORMModel, TextoObrigatorio, TransportadoraResumo
from transporte.schemas.viagem import ViagemRead


class MotoristaCreate(BaseModel):
    nome: TextoObrigatorio
    cpf: str = Field(min_length=11, max_length=14)
    cnh: Optional[str] = None
    telefone: Optional[str] = None
    # admins may omit it; their own company is used
    transportadora_id: Optional[str] = None


class MotoristaUpdate(Atualizacao):
    nome: TextoObrigatorio = None
    cpf: str = Field(default=None, min_length=11, max_length=14)
    cnh: Optional[str] = None
    telefone: Optional[str] = None
    transportadora_id: str = None


class MotoristaRead(ORMModel):
    id: str
    nome: str
    cpf: str
    cnh: Optional[str] = None
    telefone: Optional[str] = None
    transportadora_id: str
    codigo_validacao: Optional[str] = None
    validado: bool = False
    criado_em: Optional[datetime] = None
    transportadora: Optional[TransportadoraResumo] = None


class MotoristaDetalhe(MotoristaRead):
    viagens: List[ViagemRead] = []
