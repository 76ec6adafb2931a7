from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from sqlalchemy.orm import Session
import logging

from transporte.core.errors import Conflict, NotFound, Unauthenticated, ValidationError
from transporte.db.session import commit_or_conflict, get_db
from transporte.models.motorista import Motorista as MotoristaModel
from transporte.models.session import Session as SessionModel
from transporte.models.transportadora import Transportadora as TransportadoraModel
from transporte.models.usuario import RoleEnum, Usuario as UsuarioModel
from transporte.schemas.common import Mensagem
from transporte.schemas.usuario import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterMotoristaRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SessaoResposta,
    UsuarioAtual,
    UsuarioRead,
)
from transporte.services import auth as auth_service
from transporte.utils.email import send_reset_email_sync

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("transporte.auth")


def _abrir_sessao(request: Request, response: Response, db: Session, usuario: UsuarioModel) -> dict:
    settings = auth_service.get_settings(request)
    token = auth_service.start_session(settings, db, usuario)
    db.commit()
    db.refresh(usuario)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )
    return {"success": True, "user": UsuarioRead.model_validate(usuario), "access_token": token}


def _email_livre(db: Session, email: str) -> None:
    if db.query(UsuarioModel).filter(UsuarioModel.email == email).first():
        raise Conflict("Email já cadastrado")


@router.post("/register", response_model=SessaoResposta, status_code=201)
def register(payload: RegisterRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    email = payload.email.lower()
    _email_livre(db, email)
    senha_hash = auth_service.get_password_hash(payload.senha)

    if payload.type == "TRANSPORTADORA":
        if not payload.cnpj:
            raise ValidationError("CNPJ é obrigatório para transportadoras")
        if db.query(TransportadoraModel).filter(TransportadoraModel.cnpj == payload.cnpj).first():
            raise Conflict("CNPJ já cadastrado")
        transportadora = TransportadoraModel(
            nome=payload.nome,
            cnpj=payload.cnpj,
            email=email,
            telefone=payload.telefone,
            endereco=payload.endereco,
        )
        db.add(transportadora)
        db.flush()
        usuario = UsuarioModel(
            email=email,
            senha_hash=senha_hash,
            papel=RoleEnum.ADMIN_TRANSPORTADORA,
            transportadora_id=transportadora.id,
        )
    else:
        if not payload.transportadora_id:
            raise ValidationError("ID da transportadora é obrigatório para motoristas")
        if not payload.cpf:
            raise ValidationError("CPF é obrigatório para motoristas")
        transportadora = db.query(TransportadoraModel).filter(TransportadoraModel.id == payload.transportadora_id).first()
        if not transportadora:
            raise NotFound("Transportadora não encontrada")
        if db.query(MotoristaModel).filter(MotoristaModel.cpf == payload.cpf).first():
            raise Conflict("CPF já cadastrado")
        if payload.cnh and db.query(MotoristaModel).filter(MotoristaModel.cnh == payload.cnh).first():
            raise Conflict("CNH já cadastrada")
        motorista = MotoristaModel(
            nome=payload.nome,
            cpf=payload.cpf,
            cnh=payload.cnh or None,
            telefone=payload.telefone or None,
            transportadora_id=transportadora.id,
            validado=True,
        )
        db.add(motorista)
        db.flush()
        usuario = UsuarioModel(
            email=email,
            senha_hash=senha_hash,
            papel=RoleEnum.MOTORISTA,
            transportadora_id=transportadora.id,
            motorista_id=motorista.id,
        )

    db.add(usuario)
    commit_or_conflict(db, "Cadastro conflita com um registro existente")
    logger.info(f"Novo usuário {usuario.id} ({usuario.papel.value})")
    return _abrir_sessao(request, response, db, usuario)


@router.post("/register-motorista", response_model=SessaoResposta, status_code=201)
def register_motorista(payload: RegisterMotoristaRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    """Claim a login for a driver the company already registered."""
    email = payload.email.lower()
    _email_livre(db, email)
    motorista = (
        db.query(MotoristaModel)
        .filter(
            MotoristaModel.cpf == payload.cpf,
            MotoristaModel.codigo_validacao == payload.codigo_validacao.upper(),
            MotoristaModel.validado.is_(False),
        )
        .first()
    )
    if not motorista:
        raise ValidationError("CPF ou código de validação inválido, ou motorista já validado")
    motorista.validado = True
    usuario = UsuarioModel(
        email=email,
        senha_hash=auth_service.get_password_hash(payload.senha),
        papel=RoleEnum.MOTORISTA,
        transportadora_id=motorista.transportadora_id,
        motorista_id=motorista.id,
    )
    db.add(motorista)
    db.add(usuario)
    commit_or_conflict(db, "Motorista já possui usuário")
    logger.info(f"Motorista {motorista.id} validado e vinculado ao usuário {usuario.id}")
    return _abrir_sessao(request, response, db, usuario)


@router.post("/login", response_model=SessaoResposta)
def login(payload: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    usuario = auth_service.authenticate_user(db, payload.email, payload.senha)
    if not usuario:
        raise Unauthenticated("Email ou senha inválidos")
    return _abrir_sessao(request, response, db, usuario)


@router.post("/logout", response_model=Mensagem)
def logout(
    request: Request,
    response: Response,
    ses: SessionModel = Depends(auth_service.get_current_session),
    db: Session = Depends(get_db),
):
    ses.revoked = True
    db.add(ses)
    db.commit()
    settings = auth_service.get_settings(request)
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return {"success": True, "message": "Logout realizado com sucesso"}


@router.get("/me", response_model=UsuarioAtual)
def read_users_me(current_user=Depends(auth_service.get_current_user)):
    return {"success": True, "user": UsuarioRead.model_validate(current_user)}


@router.post("/forgot-password", response_model=Mensagem)
def forgot_password(payload: ForgotPasswordRequest, request: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    """Trigger a password reset flow.

    The answer is the same whether or not the email exists.
    """
    usuario = db.query(UsuarioModel).filter(UsuarioModel.email == payload.email.lower()).first()
    if usuario:
        settings = auth_service.get_settings(request)
        token = auth_service.create_reset_token(settings, usuario)
        reset_url = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
        background_tasks.add_task(send_reset_email_sync, usuario.email, reset_url, settings.RESET_TOKEN_EXPIRE_MINUTES)
        logger.info(f"Password reset requested for user {usuario.id}")
    return {"success": True, "message": "Se o e-mail estiver cadastrado, enviamos um link de recuperação."}


@router.post("/reset-password", response_model=Mensagem)
def reset_password(payload: ResetPasswordRequest, request: Request, db: Session = Depends(get_db)):
    settings = auth_service.get_settings(request)
    usuario = auth_service.decode_reset_token(settings, db, payload.token)
    if usuario is None:
        raise ValidationError("Link de redefinição inválido ou expirado")
    usuario.senha_hash = auth_service.get_password_hash(payload.senha)
    # a new password ends every open session
    db.query(SessionModel).filter(SessionModel.usuario_id == usuario.id).update({"revoked": True})
    db.add(usuario)
    db.commit()
    return {"success": True, "message": "Senha redefinida com sucesso"}
