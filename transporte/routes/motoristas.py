from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
import logging

from transporte.core.errors import Conflict, NotFound, ValidationError
from transporte.db.session import commit_or_conflict, get_db
from transporte.models.motorista import Motorista as MotoristaModel
from transporte.models.transportadora import Transportadora as TransportadoraModel
from transporte.models.usuario import Usuario as UsuarioModel
from transporte.models.viagem import Viagem as ViagemModel

from transporte.schemas.common import Mensagem, Resposta, RespostaLista
from transporte.schemas.motorista import MotoristaCreate, MotoristaDetalhe, MotoristaRead, MotoristaUpdate
from transporte.services.access import (
    Autorizacao,
    Escopo,
    escopo_empresa,
    escopo_motorista,
    exigir,
    exigir_visivel,
)
from transporte.services.auth import gerar_codigo_validacao, get_autorizacao

router = APIRouter(prefix="/motoristas", tags=["Motoristas"])
logger = logging.getLogger("transporte.routes.motoristas")


def _buscar(db: Session, autorizacao: Autorizacao, motorista_id: str) -> MotoristaModel:
    m = db.query(MotoristaModel).filter(MotoristaModel.id == motorista_id).first()
    if not m:
        raise NotFound("Motorista não encontrado")
    exigir_visivel(autorizacao, escopo_motorista(m), "Motorista não encontrado")
    return m


def _documentos_livres(db: Session, cpf: Optional[str], cnh: Optional[str], ignorar_id: Optional[str] = None) -> None:
    if cpf:
        q = db.query(MotoristaModel).filter(MotoristaModel.cpf == cpf)
        if ignorar_id:
            q = q.filter(MotoristaModel.id != ignorar_id)
        if q.first():
            raise Conflict("CPF já cadastrado")
    if cnh:
        q = db.query(MotoristaModel).filter(MotoristaModel.cnh == cnh)
        if ignorar_id:
            q = q.filter(MotoristaModel.id != ignorar_id)
        if q.first():
            raise Conflict("CNH já cadastrada")


@router.get("", response_model=RespostaLista[MotoristaRead])
@router.get("/", response_model=RespostaLista[MotoristaRead])
def list_motoristas(
    transportadora_id: Optional[str] = None,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    q = autorizacao.restringir(db.query(MotoristaModel), MotoristaModel.transportadora_id, MotoristaModel.id)
    if transportadora_id:
        q = q.filter(MotoristaModel.transportadora_id == transportadora_id)
    rows = q.order_by(MotoristaModel.nome.asc()).all()
    data = [MotoristaRead.model_validate(r) for r in rows]
    return {"success": True, "data": data, "total": len(data)}


@router.post("", response_model=Resposta[MotoristaRead], status_code=201)
@router.post("/", response_model=Resposta[MotoristaRead], status_code=201)
def create_motorista(
    payload: MotoristaCreate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    transportadora_id = payload.transportadora_id or autorizacao.transportadora_id
    if not transportadora_id:
        raise ValidationError("Transportadora é obrigatória")
    transportadora = db.query(TransportadoraModel).filter(TransportadoraModel.id == transportadora_id).first()
    if not transportadora:
        raise NotFound("Transportadora não encontrada")
    # registering drivers is a company-level action
    exigir(autorizacao, Escopo(transportadora_id=transportadora.id), "Você não tem permissão para cadastrar motoristas nesta transportadora")
    _documentos_livres(db, payload.cpf, payload.cnh)
    m = MotoristaModel(
        nome=payload.nome,
        cpf=payload.cpf,
        cnh=payload.cnh or None,
        telefone=payload.telefone or None,
        transportadora_id=transportadora.id,
        codigo_validacao=gerar_codigo_validacao(),
        validado=False,
    )
    db.add(m)
    commit_or_conflict(db, "CPF ou CNH já cadastrado")
    db.refresh(m)
    logger.info(f"Motorista {m.id} cadastrado na transportadora {transportadora.id}")
    return {"success": True, "data": MotoristaRead.model_validate(m), "message": "Motorista criado com sucesso"}


@router.get("/{motorista_id}", response_model=Resposta[MotoristaDetalhe])
def get_motorista(
    motorista_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    m = _buscar(db, autorizacao, motorista_id)
    return {"success": True, "data": MotoristaDetalhe.model_validate(m)}


@router.put("/{motorista_id}", response_model=Resposta[MotoristaRead])
@router.patch("/{motorista_id}", response_model=Resposta[MotoristaRead])
def update_motorista(
    motorista_id: str,
    payload: MotoristaUpdate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    m = _buscar(db, autorizacao, motorista_id)
    data = payload.alteracoes()

    novo_tid = data.get("transportadora_id")
    if novo_tid and novo_tid != m.transportadora_id:
        if not db.query(TransportadoraModel).filter(TransportadoraModel.id == novo_tid).first():
            raise NotFound("Transportadora não encontrada")
        exigir(autorizacao, Escopo(transportadora_id=novo_tid), "Você não tem permissão para transferir o motorista para esta transportadora")
        if db.query(ViagemModel).filter(ViagemModel.motorista_id == m.id).count():
            raise Conflict("Motorista com viagens vinculadas não pode mudar de transportadora")

    _documentos_livres(db, data.get("cpf"), data.get("cnh"), ignorar_id=m.id)
    for key, value in data.items():
        setattr(m, key, value)
    db.add(m)
    commit_or_conflict(db, "CPF ou CNH já cadastrado para outro motorista")
    db.refresh(m)
    return {"success": True, "data": MotoristaRead.model_validate(m), "message": "Motorista atualizado com sucesso"}


@router.delete("/{motorista_id}", response_model=Mensagem)
def delete_motorista(
    motorista_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    m = _buscar(db, autorizacao, motorista_id)
    exigir(autorizacao, escopo_empresa(escopo_motorista(m)), "Apenas a transportadora pode excluir motoristas")
    if db.query(ViagemModel).filter(ViagemModel.motorista_id == m.id).count():
        raise Conflict("Não é possível excluir motorista com viagens vinculadas")
    db.query(UsuarioModel).filter(UsuarioModel.motorista_id == m.id).update({"motorista_id": None})
    db.delete(m)
    db.commit()
    logger.info(f"Motorista {motorista_id} excluído")
    return {"success": True, "message": "Motorista excluído com sucesso"}
