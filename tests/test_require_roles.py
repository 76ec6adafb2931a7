from types import SimpleNamespace

import pytest

from transporte.core.errors import Forbidden
from transporte.models.usuario import RoleEnum
from transporte.services.auth import gerar_codigo_validacao, require_roles


def test_require_roles():
    checker = require_roles(RoleEnum.ADMIN_TRANSPORTADORA.value)

    # enum role allowed
    u1 = SimpleNamespace(papel=RoleEnum.ADMIN_TRANSPORTADORA)
    assert checker(current_user=u1) is u1

    # string role allowed
    u2 = SimpleNamespace(papel="ADMIN_TRANSPORTADORA")
    assert checker(current_user=u2) is u2

    # not allowed
    with pytest.raises(Forbidden):
        checker(current_user=SimpleNamespace(papel=RoleEnum.MOTORISTA))
    with pytest.raises(Forbidden):
        checker(current_user=SimpleNamespace(papel=None))


def test_codigo_validacao():
    codigo = gerar_codigo_validacao()
    assert len(codigo) == 6
    assert codigo.isalnum() and codigo == codigo.upper()
