from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
import logging

from transporte.core.errors import Conflict, NotFound
from transporte.db.session import commit_or_conflict, get_db
from transporte.models.acerto import Acerto as AcertoModel
from transporte.models.viagem import Viagem as ViagemModel
from transporte.schemas.acerto import AcertoCreate, AcertoRead, AcertoUpdate
from transporte.schemas.common import Mensagem, Resposta, RespostaLista
from transporte.services.access import Autorizacao, escopo_empresa, escopo_viagem, exigir, exigir_visivel
from transporte.services.acerto import calcular_valor_acerto, recalcular_acerto
from transporte.services.auth import get_autorizacao
from transporte.services.viagem import viagem_para_vinculo

router = APIRouter(prefix="/acertos", tags=["Acertos"])
logger = logging.getLogger("transporte.routes.acertos")

_SO_EMPRESA_PAGA = "Apenas a transportadora pode marcar um acerto como pago"


def _buscar(db: Session, autorizacao: Autorizacao, acerto_id: str) -> AcertoModel:
    a = db.query(AcertoModel).filter(AcertoModel.id == acerto_id).first()
    if not a:
        raise NotFound("Acerto não encontrado")
    exigir_visivel(autorizacao, escopo_viagem(a.viagem), "Acerto não encontrado")
    return a


def _viagem_sem_acerto(db: Session, viagem_id: str, ignorar_id: Optional[str] = None) -> None:
    q = db.query(AcertoModel).filter(AcertoModel.viagem_id == viagem_id)
    if ignorar_id:
        q = q.filter(AcertoModel.id != ignorar_id)
    if q.first():
        raise Conflict("Já existe um acerto para esta viagem")


@router.get("", response_model=RespostaLista[AcertoRead])
@router.get("/", response_model=RespostaLista[AcertoRead])
def list_acertos(
    viagem_id: Optional[str] = None,
    pago: Optional[bool] = None,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    q = db.query(AcertoModel).join(ViagemModel, AcertoModel.viagem_id == ViagemModel.id)
    q = autorizacao.restringir(q, ViagemModel.transportadora_id, ViagemModel.motorista_id)
    if viagem_id:
        q = q.filter(AcertoModel.viagem_id == viagem_id)
    if pago is not None:
        q = q.filter(AcertoModel.pago.is_(pago))
    rows = q.order_by(AcertoModel.criado_em.desc()).all()
    data = [AcertoRead.model_validate(r) for r in rows]
    return {"success": True, "data": data, "total": len(data)}


@router.post("", response_model=Resposta[AcertoRead], status_code=201)
@router.post("/", response_model=Resposta[AcertoRead], status_code=201)
def create_acerto(
    payload: AcertoCreate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    viagem = viagem_para_vinculo(db, autorizacao, payload.viagem_id)
    if payload.pago:
        exigir(autorizacao, escopo_empresa(escopo_viagem(viagem)), _SO_EMPRESA_PAGA)
    _viagem_sem_acerto(db, viagem.id)
    valor = payload.valor
    if valor is None:
        valor = calcular_valor_acerto(viagem.receitas, viagem.despesas)
    a = AcertoModel(viagem_id=viagem.id, valor=valor, pago=payload.pago)
    db.add(a)
    commit_or_conflict(db, "Já existe um acerto para esta viagem")
    db.refresh(a)
    logger.info(f"Acerto {a.id} criado para a viagem {viagem.id}: {a.valor}")
    return {"success": True, "data": AcertoRead.model_validate(a), "message": "Acerto criado com sucesso"}


@router.get("/{acerto_id}", response_model=Resposta[AcertoRead])
def get_acerto(
    acerto_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    a = _buscar(db, autorizacao, acerto_id)
    return {"success": True, "data": AcertoRead.model_validate(a)}


@router.put("/{acerto_id}", response_model=Resposta[AcertoRead])
@router.patch("/{acerto_id}", response_model=Resposta[AcertoRead])
def update_acerto(
    acerto_id: str,
    payload: AcertoUpdate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    a = _buscar(db, autorizacao, acerto_id)
    data = payload.alteracoes()

    if data.get("viagem_id") and data["viagem_id"] != a.viagem_id:
        nova = viagem_para_vinculo(db, autorizacao, data["viagem_id"])
        _viagem_sem_acerto(db, nova.id, ignorar_id=a.id)
        data["viagem_id"] = nova.id

    if "pago" in data and data["pago"] != a.pago:
        exigir(autorizacao, escopo_empresa(escopo_viagem(a.viagem)), _SO_EMPRESA_PAGA)

    for key, value in data.items():
        setattr(a, key, value)
    db.add(a)
    commit_or_conflict(db, "Já existe um acerto para esta viagem")
    db.refresh(a)
    return {"success": True, "data": AcertoRead.model_validate(a), "message": "Acerto atualizado com sucesso"}


@router.post("/{acerto_id}/recalcular", response_model=Resposta[AcertoRead])
def recalcular(
    acerto_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    a = _buscar(db, autorizacao, acerto_id)
    recalcular_acerto(db, a)
    db.commit()
    db.refresh(a)
    return {"success": True, "data": AcertoRead.model_validate(a), "message": "Acerto recalculado"}


@router.delete("/{acerto_id}", response_model=Mensagem)
def delete_acerto(
    acerto_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    a = _buscar(db, autorizacao, acerto_id)
    db.delete(a)
    db.commit()
    logger.info(f"Acerto {acerto_id} excluído")
    return {"success": True, "message": "Acerto excluído com sucesso"}
