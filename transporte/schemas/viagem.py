from pydantic import BaseModel, computed_field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from transporte.core.timezone_utils import local_to_utc_naive
from transporte.models.viagem import StatusViagem
from transporte.schemas.common import (
    AcertoItem,
    Atualizacao,
    LancamentoItem,
    MotoristaResumo,
    ORMModel,
    TextoObrigatorio,
    TransportadoraResumo,
    como_utc,
)
from transporte.services.acerto import somar, totais_viagem


class ViagemCreate(BaseModel):
    descricao: TextoObrigatorio
    data_inicio: datetime
    data_fim: Optional[datetime] = None
    status: StatusViagem = StatusViagem.PLANEJADA
    # drivers create trips for themselves; admins must name the driver
    motorista_id: Optional[str] = None
    transportadora_id: Optional[str] = None

    @model_validator(mode="after")
    def validar_datas(self):
        if self.data_fim is not None and local_to_utc_naive(self.data_fim) <= local_to_utc_naive(self.data_inicio):
            raise ValueError("Data de fim deve ser posterior à data de início")
        return self


class ViagemUpdate(Atualizacao):
    descricao: TextoObrigatorio = None
    data_inicio: datetime = None
    data_fim: Optional[datetime] = None
    status: StatusViagem = None
    motorista_id: str = None
    transportadora_id: str = None


class ViagemRead(ORMModel):
    id: str
    descricao: str
    data_inicio: datetime
    data_fim: Optional[datetime] = None
    status: StatusViagem
    transportadora_id: str
    motorista_id: str
    transportadora: Optional[TransportadoraResumo] = None
    motorista: Optional[MotoristaResumo] = None
    receitas: List[LancamentoItem] = []
    despesas: List[LancamentoItem] = []
    acerto: Optional[AcertoItem] = None
    criado_em: Optional[datetime] = None

    @field_validator("data_inicio", "data_fim")
    @classmethod
    def normalizar_utc(cls, value):
        return como_utc(value)

    @computed_field
    @property
    def total_receitas(self) -> Decimal:
        return somar(self.receitas)

    @computed_field
    @property
    def total_despesas(self) -> Decimal:
        return somar(self.despesas)

    @computed_field
    @property
    def lucro(self) -> Decimal:
        return totais_viagem(self)["lucro"]
