from datetime import datetime, timedelta, timezone
import logging
import secrets
import string
import uuid
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from transporte.core.config import settings as default_settings
from transporte.core.errors import Forbidden, Unauthenticated
from transporte.db.session import get_db
from transporte.models.usuario import Usuario
from transporte.models.session import Session as SessionModel
from transporte.services.access import Autorizacao, autorizacao_para

logger = logging.getLogger("transporte.auth")

# pbkdf2_sha256 has no 72-byte password limit; bcrypt stays so older hashes still verify.
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")
# auto_error=False: the cookie is the primary carrier, the header is a fallback
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

_ALFABETO_CODIGO = string.ascii_uppercase + string.digits


def get_settings(request: Request):
    return getattr(request.app.state, "settings", default_settings)


def verify_password(plain_password, hashed_password):
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # malformed or unknown hash
        return False


def get_password_hash(password):
    try:
        return pwd_context.hash(password)
    except ValueError as exc:
        raise ValueError("password too long to hash; choose a shorter password") from exc


def create_access_token(settings, data: dict, expires_delta: Optional[timedelta] = None):
    """Return ``(token, jti, expires_at)``; expires_at is naive UTC."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    jti = str(uuid.uuid4())
    to_encode.update({"exp": expire, "jti": jti, "type": "access"})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt, jti, expire.replace(tzinfo=None)


def create_reset_token(settings, usuario: Usuario) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    # binding the current hash makes the link single-use: it dies once the password changes
    to_encode = {"sub": usuario.id, "type": "reset", "exp": expire, "pwd": usuario.senha_hash[-12:]}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_reset_token(settings, db: Session, token: str) -> Usuario:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "reset":
        return None
    usuario = db.query(Usuario).filter(Usuario.id == payload.get("sub")).first()
    if usuario is None or usuario.senha_hash[-12:] != payload.get("pwd"):
        return None
    return usuario


def start_session(settings, db: Session, usuario: Usuario) -> str:
    """Issue an access token and persist its session row. The caller commits."""
    token, jti, expires_at = create_access_token(
        settings, {"sub": usuario.id, "email": usuario.email, "papel": usuario.papel.value}
    )
    db.add(SessionModel(jti=jti, usuario_id=usuario.id, expires_at=expires_at))
    return token


def authenticate_user(db: Session, email: str, password: str):
    usuario = db.query(Usuario).filter(Usuario.email == email.strip().lower()).first()
    if not usuario:
        return None
    if not verify_password(password, usuario.senha_hash):
        return None
    return usuario


def read_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    settings = get_settings(request)
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or bearer


def decode_access_token(settings, token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise Unauthenticated("Token de autenticação inválido ou expirado")
    if payload.get("type") != "access" or not payload.get("sub") or not payload.get("jti"):
        raise Unauthenticated("Token de autenticação inválido ou expirado")
    return payload


def get_current_session(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> SessionModel:
    token = read_token(request, bearer)
    if not token:
        raise Unauthenticated("Não autenticado")
    payload = decode_access_token(get_settings(request), token)
    ses = db.query(SessionModel).filter(SessionModel.jti == payload["jti"]).first()
    # logout revokes the row; a token without a row was never issued here
    if ses is None or ses.revoked or ses.usuario_id != payload["sub"]:
        raise Unauthenticated("Sessão encerrada")
    return ses


def get_current_user(
    ses: SessionModel = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> Usuario:
    usuario = db.query(Usuario).filter(Usuario.id == ses.usuario_id).first()
    if usuario is None:
        raise Unauthenticated("Usuário não encontrado")
    return usuario


def get_autorizacao(current_user: Usuario = Depends(get_current_user)) -> Autorizacao:
    return autorizacao_para(current_user)


def require_roles(*roles: str):
    """Return a dependency that ensures the current user has one of the provided roles.

    Usage in a route:
        @router.post('/motoristas')
        def create_motorista(current_user=Depends(require_roles('ADMIN_TRANSPORTADORA'))):
            ...
    """
    def role_checker(current_user=Depends(get_current_user)):
        user_role = getattr(current_user, 'papel', None)
        role_value = user_role.value if hasattr(user_role, 'value') else str(user_role)
        if role_value not in roles:
            raise Forbidden("Permissão insuficiente para acessar este recurso")
        return current_user

    return role_checker


def gerar_codigo_validacao() -> str:
    """Six-character code a company hands to a driver to claim a login."""
    return "".join(secrets.choice(_ALFABETO_CODIGO) for _ in range(6))
