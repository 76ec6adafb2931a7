from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from transporte.core.errors import Conflict, NotFound
from transporte.db.session import commit_or_conflict, get_db
from transporte.models.motorista import Motorista as MotoristaModel
from transporte.models.transportadora import Transportadora as TransportadoraModel
from transporte.models.usuario import RoleEnum, Usuario as UsuarioModel
from transporte.models.viagem import Viagem as ViagemModel
from transporte.schemas.common import Mensagem, Resposta, RespostaLista, TransportadoraResumo
from transporte.schemas.transportadora import TransportadoraCreate, TransportadoraRead, TransportadoraUpdate
from transporte.services.access import Autorizacao, escopo_transportadora, exigir_visivel
from transporte.services.auth import get_autorizacao, require_roles

router = APIRouter(prefix="/transportadoras", tags=["Transportadoras"])
logger = logging.getLogger("transporte.routes.transportadoras")


def _buscar(db: Session, autorizacao: Autorizacao, transportadora_id: str) -> TransportadoraModel:
    t = db.query(TransportadoraModel).filter(TransportadoraModel.id == transportadora_id).first()
    if not t:
        raise NotFound("Transportadora não encontrada")
    exigir_visivel(autorizacao, escopo_transportadora(t), "Transportadora não encontrada")
    return t


# Public: feeds the company dropdown of the registration pages.
@router.get("", response_model=RespostaLista[TransportadoraResumo])
@router.get("/", response_model=RespostaLista[TransportadoraResumo])
def list_transportadoras(db: Session = Depends(get_db)):
    rows = db.query(TransportadoraModel).order_by(TransportadoraModel.nome.asc()).all()
    data = [TransportadoraResumo.model_validate(r) for r in rows]
    return {"success": True, "data": data, "total": len(data)}


@router.post("", response_model=Resposta[TransportadoraRead], status_code=201)
@router.post("/", response_model=Resposta[TransportadoraRead], status_code=201)
def create_transportadora(
    payload: TransportadoraCreate,
    db: Session = Depends(get_db),
    current_user: UsuarioModel = Depends(require_roles(RoleEnum.ADMIN_TRANSPORTADORA.value)),
):
    # an admin manages exactly one company
    if current_user.transportadora_id:
        raise Conflict("Usuário já está vinculado a uma transportadora")
    if db.query(TransportadoraModel).filter(TransportadoraModel.cnpj == payload.cnpj).first():
        raise Conflict("CNPJ já cadastrado")
    t = TransportadoraModel(**payload.model_dump())
    db.add(t)
    db.flush()
    current_user.transportadora_id = t.id
    db.add(current_user)
    commit_or_conflict(db, "CNPJ já cadastrado")
    db.refresh(t)
    logger.info(f"Transportadora {t.id} criada pelo usuário {current_user.id}")
    return {"success": True, "data": TransportadoraRead.model_validate(t), "message": "Transportadora criada com sucesso"}


@router.get("/{transportadora_id}", response_model=Resposta[TransportadoraRead])
def get_transportadora(
    transportadora_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    t = _buscar(db, autorizacao, transportadora_id)
    return {"success": True, "data": TransportadoraRead.model_validate(t)}


@router.put("/{transportadora_id}", response_model=Resposta[TransportadoraRead])
@router.patch("/{transportadora_id}", response_model=Resposta[TransportadoraRead])
def update_transportadora(
    transportadora_id: str,
    payload: TransportadoraUpdate,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    t = _buscar(db, autorizacao, transportadora_id)
    data = payload.alteracoes()
    if data.get("cnpj"):
        exists = (
            db.query(TransportadoraModel)
            .filter(TransportadoraModel.cnpj == data["cnpj"], TransportadoraModel.id != t.id)
            .first()
        )
        if exists:
            raise Conflict("CNPJ já cadastrado para outra transportadora")
    for key, value in data.items():
        setattr(t, key, value)
    db.add(t)
    commit_or_conflict(db, "CNPJ já cadastrado para outra transportadora")
    db.refresh(t)
    return {"success": True, "data": TransportadoraRead.model_validate(t), "message": "Transportadora atualizada com sucesso"}


@router.delete("/{transportadora_id}", response_model=Mensagem)
def delete_transportadora(
    transportadora_id: str,
    db: Session = Depends(get_db),
    autorizacao: Autorizacao = Depends(get_autorizacao),
):
    t = _buscar(db, autorizacao, transportadora_id)
    motoristas = db.query(MotoristaModel).filter(MotoristaModel.transportadora_id == t.id).count()
    viagens = db.query(ViagemModel).filter(ViagemModel.transportadora_id == t.id).count()
    if motoristas or viagens:
        raise Conflict("Não é possível excluir transportadora com motoristas ou viagens vinculados")
    db.query(UsuarioModel).filter(UsuarioModel.transportadora_id == t.id).update({"transportadora_id": None})
    db.delete(t)
    db.commit()
    logger.info(f"Transportadora {transportadora_id} excluída")
    return {"success": True, "message": "Transportadora excluída com sucesso"}
