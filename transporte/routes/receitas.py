from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
import logging

from transporte.core.errors import NotFound
from transporte.db.session import get_db
from transporte.models.receita import Receita as ReceitaModel
from transporte.models.viagem import Viagem as ViagemModel
from transporte.schemas.common import Mensagem, Resposta, RespostaLista
from transporte.schemas.receita import ReceitaCreate, ReceitaRead, ReceitaUpdate
from transporte.services.access import Autorizacao, escopo_viagem, exigir_visivel
from transporte.services.auth import get_autorizacao
from transporte.services.viagem import viagem_para_vinculo

router = APIRouter(prefix="/receitas", tags=["Receitas"])
logger = logging.getLogger("transporte.routes.receitas")


def _buscar(db: Session, autorizacao: Autorizacao, receita_id: str) -> ReceitaModel:
    r = db.query(ReceitaModel).filter(ReceitaModel.id == receita_id).first()
    if not r:
        raise NotFound("Receita não encontrada")
    exigir_visivel(autorizacao, escopo_viagem(r.viagem), "Receita não encontrada")
    return r


@router.get("", response_model=RespostaLista[ReceitaRead])
@router.get("/", response_model=RespostaLista[ReceitaRead])
def list_receitas(
    viagem_id: Optional[str] = None,
    motorista_id: Optional[str] = None,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    q = db.query(ReceitaModel).join(ViagemModel, ReceitaModel.viagem_id == ViagemModel.id)
    q = autorizacao.restringir(q, ViagemModel.transportadora_id, ViagemModel.motorista_id)
    if viagem_id:
        q = q.filter(ReceitaModel.viagem_id == viagem_id)
    if motorista_id:
        q = q.filter(ViagemModel.motorista_id == motorista_id)
    rows = q.order_by(ReceitaModel.criado_em.desc()).all()
    data = [ReceitaRead.model_validate(r) for r in rows]
    return {"success": True, "data": data, "total": len(data)}


@router.post("", response_model=Resposta[ReceitaRead], status_code=201)
@router.post("/", response_model=Resposta[ReceitaRead], status_code=201)
def create_receita(
    payload: ReceitaCreate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    viagem = viagem_para_vinculo(db, autorizacao, payload.viagem_id)
    r = ReceitaModel(viagem_id=viagem.id, valor=payload.valor, descricao=payload.descricao)
    db.add(r)
    db.commit()
    db.refresh(r)
    logger.info(f"Receita {r.id} de {r.valor} lançada na viagem {viagem.id}")
    return {"success": True, "data": ReceitaRead.model_validate(r), "message": "Receita criada com sucesso"}


@router.get("/{receita_id}", response_model=Resposta[ReceitaRead])
def get_receita(
    receita_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    r = _buscar(db, autorizacao, receita_id)
    return {"success": True, "data": ReceitaRead.model_validate(r)}


@router.put("/{receita_id}", response_model=Resposta[ReceitaRead])
@router.patch("/{receita_id}", response_model=Resposta[ReceitaRead])
def update_receita(
    receita_id: str,
    payload: ReceitaUpdate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    r = _buscar(db, autorizacao, receita_id)
    data = payload.alteracoes()
    if data.get("viagem_id") and data["viagem_id"] != r.viagem_id:
        data["viagem_id"] = viagem_para_vinculo(db, autorizacao, data["viagem_id"]).id
    for key, value in data.items():
        setattr(r, key, value)
    db.add(r)
    db.commit()
    db.refresh(r)
    return {"success": True, "data": ReceitaRead.model_validate(r), "message": "Receita atualizada com sucesso"}


@router.delete("/{receita_id}", response_model=Mensagem)
def delete_receita(
    receita_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    r = _buscar(db, autorizacao, receita_id)
    db.delete(r)
    db.commit()
    logger.info(f"Receita {receita_id} excluída")
    return {"success": True, "message": "Receita excluída com sucesso"}
