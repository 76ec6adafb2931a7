from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime

from transporte.models.usuario import RoleEnum
from transporte.schemas.common import ORMModel, TextoObrigatorio
from transporte.schemas.motorista import MotoristaRead
from transporte.schemas.transportadora import TransportadoraRead

Senha = Field(min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    senha: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    email: EmailStr
    senha: str = Senha
    nome: TextoObrigatorio = Field(min_length=3)
    type: Literal["TRANSPORTADORA", "MOTORISTA"]
    # drivers
    cpf: Optional[str] = Field(default=None, min_length=11, max_length=14)
    cnh: Optional[str] = None
    telefone: Optional[str] = None
    transportadora_id: Optional[str] = None
    # companies
    cnpj: Optional[str] = Field(default=None, min_length=14, max_length=18)
    endereco: Optional[str] = None


class RegisterMotoristaRequest(BaseModel):
    """A driver pre-registered by an admin claims a login."""

    email: EmailStr
    senha: str = Senha
    cpf: str = Field(min_length=11, max_length=14)
    codigo_validacao: str = Field(min_length=6, max_length=6)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    senha: str = Senha


class UsuarioRead(ORMModel):
    id: str
    email: str
    papel: RoleEnum
    transportadora_id: Optional[str] = None
    motorista_id: Optional[str] = None
    transportadora: Optional[TransportadoraRead] = None
    motorista: Optional[MotoristaRead] = None
    criado_em: Optional[datetime] = None


class SessaoResposta(BaseModel):
    success: bool = True
    user: UsuarioRead
    access_token: str
    token_type: str = "bearer"


class UsuarioAtual(BaseModel):
    success: bool = True
    user: UsuarioRead
