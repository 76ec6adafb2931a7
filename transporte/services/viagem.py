import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from transporte.core.errors import NotFound, ValidationError
from transporte.core.timezone_utils import agora, as_utc_naive
from transporte.models.motorista import Motorista
from transporte.models.viagem import TRANSICOES_VIAGEM, StatusViagem, Viagem
from transporte.services.access import (
    Autorizacao,
    escopo_motorista,
    escopo_viagem,
    exigir,
    exigir_visivel,
)

logger = logging.getLogger("transporte.viagem")


def buscar_viagem_visivel(db: Session, autorizacao: Autorizacao, viagem_id: str) -> Viagem:
    """Trip addressed by the path: absent and invisible both read as 404."""
    viagem = db.query(Viagem).filter(Viagem.id == viagem_id).first()
    if not viagem:
        raise NotFound("Viagem não encontrada")
    exigir_visivel(autorizacao, escopo_viagem(viagem), "Viagem não encontrada")
    return viagem


def viagem_para_vinculo(db: Session, autorizacao: Autorizacao, viagem_id: str) -> Viagem:
    """Trip named in a request body: absent is 404, out of scope is 403."""
    viagem = db.query(Viagem).filter(Viagem.id == viagem_id).first()
    if not viagem:
        raise NotFound("Viagem não encontrada")
    exigir(autorizacao, escopo_viagem(viagem), "Você não tem permissão para usar esta viagem")
    return viagem


def motorista_para_viagem(db: Session, autorizacao: Autorizacao, motorista_id: str, transportadora_id: str) -> Motorista:
    motorista = db.query(Motorista).filter(Motorista.id == motorista_id).first()
    if not motorista:
        raise NotFound("Motorista não encontrado")
    exigir(autorizacao, escopo_motorista(motorista), "Você não tem permissão para usar este motorista")
    if motorista.transportadora_id != transportadora_id:
        raise ValidationError("Motorista não pertence à transportadora da viagem")
    return motorista


def validar_periodo(data_inicio, data_fim) -> None:
    if data_inicio is not None and data_fim is not None and as_utc_naive(data_fim) <= as_utc_naive(data_inicio):
        raise ValidationError("Data de fim deve ser posterior à data de início")


def mudar_status(viagem: Viagem, novo: StatusViagem, fim: Optional[datetime] = None) -> Viagem:
    """Apply a caller-driven status change; finalizing stamps the end time.

    The stamp is ``fim`` when given, otherwise now. It must still come after
    ``data_inicio``, so a trip that has not begun cannot be finalized.
    """
    atual = StatusViagem(viagem.status)
    if novo == atual:
        return viagem
    if novo not in TRANSICOES_VIAGEM[atual]:
        raise ValidationError(f"Transição de status inválida: {atual.value} -> {novo.value}")
    if novo == StatusViagem.FINALIZADA:
        fim = as_utc_naive(fim or agora())
        validar_periodo(viagem.data_inicio, fim)
        viagem.data_fim = fim
    viagem.status = novo
    logger.info(f"Viagem {viagem.id}: {atual.value} -> {novo.value}")
    return viagem
