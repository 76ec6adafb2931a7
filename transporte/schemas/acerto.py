from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from typing_extensions import Annotated

from transporte.schemas.common import Atualizacao, ORMModel, ViagemResumo

# a settlement may be negative when expenses exceed revenues
ValorAcerto = Annotated[Decimal, Field(max_digits=12, decimal_places=2)]


class AcertoCreate(BaseModel):
    viagem_id: str
    # omitted: derived from the trip's revenues and expenses
    valor: Optional[ValorAcerto] = None
    pago: bool = False


class AcertoUpdate(Atualizacao):
    viagem_id: str = None
    valor: ValorAcerto = None
    pago: bool = None


class AcertoRead(ORMModel):
    id: str
    viagem_id: str
    valor: Decimal
    pago: bool
    criado_em: Optional[datetime] = None
    atualizado_em: Optional[datetime] = None
    viagem: Optional[ViagemResumo] = None
