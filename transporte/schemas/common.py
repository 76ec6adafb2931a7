from datetime import datetime, timezone
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator
from typing_extensions import Annotated

T = TypeVar("T")

# required text: surrounding blanks are dropped and the result may not be empty
TextoObrigatorio = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Valor = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


def como_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC; expose them with an explicit offset."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class Atualizacao(BaseModel):
    """Partial update body: at least one field has to be sent."""

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def exigir_alteracao(self):
        if not self.model_fields_set:
            raise ValueError("Pelo menos um campo deve ser fornecido para atualização")
        return self

    def alteracoes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Resposta(BaseModel, Generic[T]):
    success: bool = True
    data: T
    message: Optional[str] = None


class RespostaLista(BaseModel, Generic[T]):
    success: bool = True
    data: List[T]
    total: int


class Mensagem(BaseModel):
    success: bool = True
    message: str


class TransportadoraResumo(ORMModel):
    id: str
    nome: str


class MotoristaResumo(ORMModel):
    id: str
    nome: str


class ViagemResumo(ORMModel):
    id: str
    descricao: str
    transportadora: Optional[TransportadoraResumo] = None
    motorista: Optional[MotoristaResumo] = None


class LancamentoItem(ORMModel):
    id: str
    valor: Decimal
    descricao: str
    criado_em: Optional[datetime] = None


class AcertoItem(ORMModel):
    id: str
    valor: Decimal
    pago: bool
    criado_em: Optional[datetime] = None
