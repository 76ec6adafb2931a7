from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
import logging

from transporte.core.errors import Conflict, Forbidden, ValidationError
from transporte.core.timezone_utils import local_day_range_to_utc, local_to_utc_naive
from transporte.db.session import get_db, new_id
from transporte.models.acerto import Acerto as AcertoModel
from transporte.models.despesa import Despesa as DespesaModel
from transporte.models.receita import Receita as ReceitaModel
from transporte.models.usuario import RoleEnum
from transporte.models.viagem import StatusViagem, Viagem as ViagemModel
from transporte.schemas.common import Mensagem, Resposta, RespostaLista
from transporte.schemas.viagem import ViagemCreate, ViagemRead, ViagemUpdate
from transporte.services.access import Autorizacao
from transporte.services.auth import get_autorizacao
from transporte.services.viagem import (
    buscar_viagem_visivel,
    motorista_para_viagem,
    mudar_status,
    validar_periodo,
)

router = APIRouter(prefix="/viagens", tags=["Viagens"])
logger = logging.getLogger("transporte.routes.viagens")


def _limite_dia(valor: str, campo: str):
    inicio, fim = local_day_range_to_utc(valor)
    if inicio is None:
        raise ValidationError(f"Data inválida em '{campo}': use AAAA-MM-DD")
    return inicio, fim


@router.get("", response_model=RespostaLista[ViagemRead])
@router.get("/", response_model=RespostaLista[ViagemRead])
def list_viagens(
    status: Optional[StatusViagem] = None,
    motorista_id: Optional[str] = None,
    inicio: Optional[str] = None,
    fim: Optional[str] = None,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    q = autorizacao.restringir(db.query(ViagemModel), ViagemModel.transportadora_id, ViagemModel.motorista_id)
    if status:
        q = q.filter(ViagemModel.status == status)
    if motorista_id:
        q = q.filter(ViagemModel.motorista_id == motorista_id)
    # inicio/fim are local calendar days compared against the start date
    if inicio:
        q = q.filter(ViagemModel.data_inicio >= _limite_dia(inicio, "inicio")[0])
    if fim:
        q = q.filter(ViagemModel.data_inicio <= _limite_dia(fim, "fim")[1])
    rows = q.order_by(ViagemModel.data_inicio.desc()).all()
    data = [ViagemRead.model_validate(r) for r in rows]
    return {"success": True, "data": data, "total": len(data)}


@router.post("", response_model=Resposta[ViagemRead], status_code=201)
@router.post("/", response_model=Resposta[ViagemRead], status_code=201)
def create_viagem(
    payload: ViagemCreate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    transportadora_id = autorizacao.transportadora_id
    if not transportadora_id:
        raise ValidationError("Usuário não está vinculado a uma transportadora")
    if payload.transportadora_id and payload.transportadora_id != transportadora_id:
        raise Forbidden("Você não tem permissão para criar viagens nesta transportadora")

    if autorizacao.papel == RoleEnum.MOTORISTA:
        # a driver only ever books trips for itself
        if payload.motorista_id and payload.motorista_id != autorizacao.motorista_id:
            raise Forbidden("Motoristas só podem criar viagens para si mesmos")
        motorista_id = autorizacao.motorista_id
    else:
        if not payload.motorista_id:
            raise ValidationError("Motorista é obrigatório")
        motorista_id = motorista_para_viagem(db, autorizacao, payload.motorista_id, transportadora_id).id

    v = ViagemModel(
        id=new_id(),
        descricao=payload.descricao,
        data_inicio=local_to_utc_naive(payload.data_inicio),
        data_fim=local_to_utc_naive(payload.data_fim),
        status=StatusViagem.PLANEJADA,
        transportadora_id=transportadora_id,
        motorista_id=motorista_id,
    )
    # every trip starts planned; a requested status must be reachable from there
    mudar_status(v, payload.status)
    db.add(v)
    db.commit()
    db.refresh(v)
    logger.info(f"Viagem {v.id} criada para o motorista {motorista_id}")
    return {"success": True, "data": ViagemRead.model_validate(v), "message": "Viagem criada com sucesso"}


@router.get("/{viagem_id}", response_model=Resposta[ViagemRead])
def get_viagem(
    viagem_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    v = buscar_viagem_visivel(db, autorizacao, viagem_id)
    return {"success": True, "data": ViagemRead.model_validate(v)}


@router.put("/{viagem_id}", response_model=Resposta[ViagemRead])
@router.patch("/{viagem_id}", response_model=Resposta[ViagemRead])
def update_viagem(
    viagem_id: str,
    payload: ViagemUpdate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    v = buscar_viagem_visivel(db, autorizacao, viagem_id)
    data = payload.alteracoes()
    novo_status = data.pop("status", None)

    novo_tid = data.pop("transportadora_id", None)
    if novo_tid and novo_tid != v.transportadora_id:
        raise ValidationError("Uma viagem não pode mudar de transportadora")

    novo_mid = data.pop("motorista_id", None)
    if novo_mid and novo_mid != v.motorista_id:
        v.motorista_id = motorista_para_viagem(db, autorizacao, novo_mid, v.transportadora_id).id

    for key, value in data.items():
        if key in ("data_inicio", "data_fim"):
            value = local_to_utc_naive(value)
        setattr(v, key, value)
    if novo_status is not None:
        # a data_fim sent alongside FINALIZADA replaces the stamp
        mudar_status(v, novo_status, fim=v.data_fim if "data_fim" in data else None)
    validar_periodo(v.data_inicio, v.data_fim)
    db.add(v)
    db.commit()
    db.refresh(v)
    return {"success": True, "data": ViagemRead.model_validate(v), "message": "Viagem atualizada com sucesso"}


@router.delete("/{viagem_id}", response_model=Mensagem)
def delete_viagem(
    viagem_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    v = buscar_viagem_visivel(db, autorizacao, viagem_id)
    receitas = db.query(ReceitaModel).filter(ReceitaModel.viagem_id == v.id).count()
    despesas = db.query(DespesaModel).filter(DespesaModel.viagem_id == v.id).count()
    acertos = db.query(AcertoModel).filter(AcertoModel.viagem_id == v.id).count()
    if receitas or despesas or acertos:
        raise Conflict("Não é possível excluir viagem com receitas, despesas ou acerto vinculados")
    db.delete(v)
    db.commit()
    logger.info(f"Viagem {viagem_id} excluída")
    return {"success": True, "message": "Viagem excluída com sucesso"}


def _transicionar(db: Session, autorizacao: Autorizacao, viagem_id: str, novo: StatusViagem, message: str) -> dict:
    v = buscar_viagem_visivel(db, autorizacao, viagem_id)
    mudar_status(v, novo)
    db.add(v)
    db.commit()
    db.refresh(v)
    return {"success": True, "data": ViagemRead.model_validate(v), "message": message}


@router.post("/{viagem_id}/iniciar", response_model=Resposta[ViagemRead])
def iniciar_viagem(viagem_id: str, db: Session = Depends(get_db), autorizacao: Autorizacao = Depends(get_autorizacao)):
    return _transicionar(db, autorizacao, viagem_id, StatusViagem.EM_ANDAMENTO, "Viagem iniciada")


@router.post("/{viagem_id}/finalizar", response_model=Resposta[ViagemRead])
def finalizar_viagem(viagem_id: str, db: Session = Depends(get_db), autorizacao: Autorizacao = Depends(get_autorizacao)):
    return _transicionar(db, autorizacao, viagem_id, StatusViagem.FINALIZADA, "Viagem finalizada")


@router.post("/{viagem_id}/cancelar", response_model=Resposta[ViagemRead])
def cancelar_viagem(viagem_id: str, db: Session = Depends(get_db), autorizacao: Autorizacao = Depends(get_autorizacao)):
    return _transicionar(db, autorizacao, viagem_id, StatusViagem.CANCELADA, "Viagem cancelada")
