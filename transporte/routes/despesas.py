from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
import logging

from transporte.core.errors import NotFound
from transporte.db.session import get_db
from transporte.models.despesa import Despesa as DespesaModel
from transporte.models.viagem import Viagem as ViagemModel
from transporte.schemas.common import Mensagem, Resposta, RespostaLista
from transporte.schemas.despesa import DespesaCreate, DespesaRead, DespesaUpdate
from transporte.services.access import Autorizacao, escopo_viagem, exigir_visivel
from transporte.services.auth import get_autorizacao
from transporte.services.viagem import viagem_para_vinculo

router = APIRouter(prefix="/despesas", tags=["Despesas"])
logger = logging.getLogger("transporte.routes.despesas")


def _buscar(db: Session, autorizacao: Autorizacao, despesa_id: str) -> DespesaModel:
    d = db.query(DespesaModel).filter(DespesaModel.id == despesa_id).first()
    if not d:
        raise NotFound("Despesa não encontrada")
    exigir_visivel(autorizacao, escopo_viagem(d.viagem), "Despesa não encontrada")
    return d


@router.post("", response_model=Resposta[DespesaRead], status_code=201)
@router.post("/", response_model=Resposta[DespesaRead], status_code=201)
def create_despesa(
    payload: DespesaCreate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    viagem = viagem_para_vinculo(db, autorizacao, payload.viagem_id)
    d = DespesaModel(
        viagem_id=viagem.id,
        valor=payload.valor,
        descricao=payload.descricao,
    )
    db.add(d)
    db.commit()
    db.refresh(d)
    logger.info(f"Despesa {d.id} de {d.valor} lançada na viagem {viagem.id}")
    return {"success": True, "data": DespesaRead.model_validate(d), "message": "Despesa criada com sucesso"}


@router.get("", response_model=RespostaLista[DespesaRead])
@router.get("/", response_model=RespostaLista[DespesaRead])
def list_despesas(
    viagem_id: Optional[str] = None,
    motorista_id: Optional[str] = None,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    q = db.query(DespesaModel).join(ViagemModel, DespesaModel.viagem_id == ViagemModel.id)
    q = autorizacao.restringir(q, ViagemModel.transportadora_id, ViagemModel.motorista_id)
    if viagem_id:
        q = q.filter(DespesaModel.viagem_id == viagem_id)
    if motorista_id:
        q = q.filter(ViagemModel.motorista_id == motorista_id)
    items = q.order_by(DespesaModel.criado_em.desc()).all()
    data = [DespesaRead.model_validate(d) for d in items]
    return {"success": True, "data": data, "total": len(data)}


@router.get("/{despesa_id}", response_model=Resposta[DespesaRead])
def get_despesa(
    despesa_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    d = _buscar(db, autorizacao, despesa_id)
    return {"success": True, "data": DespesaRead.model_validate(d)}


@router.put("/{despesa_id}", response_model=Resposta[DespesaRead])
@router.patch("/{despesa_id}", response_model=Resposta[DespesaRead])
def update_despesa(
    despesa_id: str,
    payload: DespesaUpdate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    d = _buscar(db, autorizacao, despesa_id)
    data = payload.alteracoes()
    # moving an expense to another trip needs that trip in scope too
    if data.get("viagem_id") and data["viagem_id"] != d.viagem_id:
        data["viagem_id"] = viagem_para_vinculo(db, autorizacao, data["viagem_id"]).id
    for key, value in data.items():
        setattr(d, key, value)
    db.add(d)
    db.commit()
    db.refresh(d)
    return {"success": True, "data": DespesaRead.model_validate(d), "message": "Despesa atualizada com sucesso"}


@router.delete("/{despesa_id}", response_model=Mensagem)
def delete_despesa(
    despesa_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    d = _buscar(db, autorizacao, despesa_id)
    db.delete(d)
    db.commit()
    logger.info(f"Despesa {despesa_id} excluída")
    return {"success": True, "message": "Despesa excluída com sucesso"}
