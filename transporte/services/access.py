"""Row-level access rules.

Every entity resolves to an ``Escopo``: the company that owns it and, when the
entity hangs off a trip or is a driver, the driver it belongs to. A caller is
wrapped in one ``Autorizacao`` variant that answers whether a scope is
reachable and narrows list queries to the reachable rows.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import false

from transporte.core.errors import Forbidden, NotFound
from transporte.models.usuario import RoleEnum, Usuario


@dataclass(frozen=True)
class Escopo:
    transportadora_id: Optional[str]
    motorista_id: Optional[str] = None


def escopo_transportadora(transportadora) -> Escopo:
    return Escopo(transportadora_id=transportadora.id)


def escopo_motorista(motorista) -> Escopo:
    return Escopo(transportadora_id=motorista.transportadora_id, motorista_id=motorista.id)


def escopo_viagem(viagem) -> Escopo:
    return Escopo(transportadora_id=viagem.transportadora_id, motorista_id=viagem.motorista_id)


def escopo_empresa(escopo: Escopo) -> Escopo:
    """Same company, no driver: actions reserved to the company's admins."""
    return Escopo(transportadora_id=escopo.transportadora_id)


class Autorizacao(ABC):
    papel: RoleEnum

    def __init__(self, usuario: Usuario):
        self.usuario = usuario

    @property
    def transportadora_id(self) -> Optional[str]:
        return None

    @property
    def motorista_id(self) -> Optional[str]:
        return None

    @abstractmethod
    def permite(self, escopo: Escopo) -> bool:
        ...

    @abstractmethod
    def restringir(self, query, transportadora_col, motorista_col=None):
        """Filter ``query`` down to rows this caller may see."""


class AdminTransportadora(Autorizacao):
    papel = RoleEnum.ADMIN_TRANSPORTADORA

    @property
    def transportadora_id(self):
        return self.usuario.transportadora_id

    def permite(self, escopo: Escopo) -> bool:
        return self.transportadora_id is not None and escopo.transportadora_id == self.transportadora_id

    def restringir(self, query, transportadora_col, motorista_col=None):
        if self.transportadora_id is None:
            return query.filter(false())
        return query.filter(transportadora_col == self.transportadora_id)


class MotoristaAutorizado(Autorizacao):
    papel = RoleEnum.MOTORISTA

    @property
    def transportadora_id(self):
        motorista = self.usuario.motorista
        return motorista.transportadora_id if motorista is not None else None

    @property
    def motorista_id(self):
        return self.usuario.motorista_id

    def permite(self, escopo: Escopo) -> bool:
        return self.motorista_id is not None and escopo.motorista_id == self.motorista_id

    def restringir(self, query, transportadora_col, motorista_col=None):
        if self.motorista_id is None or motorista_col is None:
            return query.filter(false())
        return query.filter(motorista_col == self.motorista_id)


_VARIANTES = {
    RoleEnum.ADMIN_TRANSPORTADORA: AdminTransportadora,
    RoleEnum.MOTORISTA: MotoristaAutorizado,
}


def autorizacao_para(usuario: Usuario) -> Autorizacao:
    papel = usuario.papel
    if not isinstance(papel, RoleEnum):
        try:
            papel = RoleEnum(papel)
        except ValueError:
            raise Forbidden("Tipo de usuário inválido")
    return _VARIANTES[papel](usuario)


def exigir(autorizacao: Autorizacao, escopo: Escopo, message: str = None) -> None:
    if not autorizacao.permite(escopo):
        raise Forbidden(message)


def exigir_visivel(autorizacao: Autorizacao, escopo: Escopo, message: str) -> None:
    # invisible rows look exactly like missing ones
    if not autorizacao.permite(escopo):
        raise NotFound(message)
