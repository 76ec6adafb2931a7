"""Settlement (acerto) calculation.

The net value of a trip's settlement is the sum of its revenues minus the sum
of its expenses. The arithmetic is kept apart from persistence so it can be
exercised without a database.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from sqlalchemy.orm import Session

from transporte.core.errors import NotFound
from transporte.models.acerto import Acerto
from transporte.models.viagem import Viagem

logger = logging.getLogger("transporte.acerto")

CENTAVOS = Decimal("0.01")


def _valor(item) -> Decimal:
    raw = getattr(item, "valor", item)
    if raw is None:
        return Decimal("0")
    if isinstance(raw, Decimal):
        return raw
    # str() keeps floats from leaking binary noise into the total
    return Decimal(str(raw))


def somar(itens: Iterable) -> Decimal:
    total = sum((_valor(i) for i in itens), Decimal("0"))
    return total.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def calcular_valor_acerto(receitas: Iterable, despesas: Iterable) -> Decimal:
    """Return ``sum(receitas) - sum(despesas)`` rounded to cents.

    Items may be plain amounts (Decimal, int, str, float) or objects exposing
    a ``valor`` attribute, such as Receita and Despesa rows.
    """
    return (somar(receitas) - somar(despesas)).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def totais_viagem(viagem) -> dict:
    total_receitas = somar(viagem.receitas or [])
    total_despesas = somar(viagem.despesas or [])
    return {
        "total_receitas": total_receitas,
        "total_despesas": total_despesas,
        "lucro": total_receitas - total_despesas,
    }


def valor_para_viagem(db: Session, viagem_id: str) -> Decimal:
    viagem = db.query(Viagem).filter(Viagem.id == viagem_id).first()
    if not viagem:
        raise NotFound("Viagem não encontrada")
    return calcular_valor_acerto(viagem.receitas, viagem.despesas)


def recalcular_acerto(db: Session, acerto: Acerto) -> Acerto:
    """Overwrite the stored value from the trip's current revenues and expenses.

    The paid flag is left untouched. The caller owns the commit.
    """
    if acerto is None:
        raise NotFound("Acerto não encontrado")
    novo_valor = valor_para_viagem(db, acerto.viagem_id)
    if acerto.valor is not None and Decimal(acerto.valor) != novo_valor:
        logger.info(f"Acerto {acerto.id} recalculado: {acerto.valor} -> {novo_valor}")
    acerto.valor = novo_valor
    db.add(acerto)
    return acerto
