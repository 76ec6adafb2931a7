from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal

from transporte.schemas.common import Atualizacao, ORMModel, TextoObrigatorio, Valor, ViagemResumo


class DespesaCreate(BaseModel):
    viagem_id: str
    valor: Valor
    descricao: TextoObrigatorio


class DespesaUpdate(Atualizacao):
    viagem_id: str = None
    valor: Valor = None
    descricao: TextoObrigatorio = None


class DespesaRead(ORMModel):
    id: str
    viagem_id: str
    valor: Decimal
    descricao: str
    criado_em: Optional[datetime] = None
    atualizado_em: Optional[datetime] = None
    viagem: Optional[ViagemResumo] = None
