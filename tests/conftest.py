from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from transporte.core.config import Settings
from transporte.db.session import build_engine
from transporte.main import create_app
from transporte.models.motorista import Motorista
from transporte.models.transportadora import Transportadora
from transporte.models.usuario import RoleEnum, Usuario
from transporte.services import auth as auth_service

SENHA = "senha123"


@pytest.fixture
def settings():
    return Settings(
        SECRET_KEY="segredo-de-teste",
        DATABASE_URL="sqlite://",
        AUTH_COOKIE_SECURE=False,
        REQUEST_LOG_VERBOSE=True,
        FRONTEND_URL="http://front.test",
    )


@pytest.fixture
def app(settings):
    engine = build_engine(settings)
    return create_app(settings, engine)


@pytest.fixture
def client(app):
    # entering the context runs startup, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app, client):
    session = app.state.sessionmaker()
    yield session
    session.close()


def _usuario(db, email, papel, transportadora_id=None, motorista_id=None):
    u = Usuario(
        email=email,
        senha_hash=auth_service.get_password_hash(SENHA),
        papel=papel,
        transportadora_id=transportadora_id,
        motorista_id=motorista_id,
    )
    db.add(u)
    db.flush()
    return u


@pytest.fixture
def mundo(db, settings):
    """Two companies, each with an admin; Alfa has two drivers, Beta one."""
    alfa = Transportadora(nome="Transportes Alfa", cnpj="11222333000181", email="contato@alfa.com.br")
    beta = Transportadora(nome="Beta Cargas", cnpj="44555666000199")
    db.add_all([alfa, beta])
    db.flush()

    joao = Motorista(nome="João Silva", cpf="12345678901", cnh="CNH0001", transportadora_id=alfa.id, validado=True)
    pedro = Motorista(nome="Pedro Souza", cpf="12345678902", transportadora_id=alfa.id, validado=True)
    carlos = Motorista(nome="Carlos Lima", cpf="98765432100", transportadora_id=beta.id, validado=True)
    db.add_all([joao, pedro, carlos])
    db.flush()

    usuarios = {
        "admin_alfa": _usuario(db, "admin@alfa.com.br", RoleEnum.ADMIN_TRANSPORTADORA, transportadora_id=alfa.id),
        "admin_beta": _usuario(db, "admin@beta.com.br", RoleEnum.ADMIN_TRANSPORTADORA, transportadora_id=beta.id),
        "joao": _usuario(db, "joao@alfa.com.br", RoleEnum.MOTORISTA, transportadora_id=alfa.id, motorista_id=joao.id),
        "pedro": _usuario(db, "pedro@alfa.com.br", RoleEnum.MOTORISTA, transportadora_id=alfa.id, motorista_id=pedro.id),
        "carlos": _usuario(db, "carlos@beta.com.br", RoleEnum.MOTORISTA, transportadora_id=beta.id, motorista_id=carlos.id),
    }
    tokens = {nome: auth_service.start_session(settings, db, u) for nome, u in usuarios.items()}
    db.commit()

    return SimpleNamespace(
        alfa=alfa.id,
        beta=beta.id,
        joao=joao.id,
        pedro=pedro.id,
        carlos=carlos.id,
        usuarios={nome: u.id for nome, u in usuarios.items()},
        h={nome: {"Authorization": f"Bearer {t}"} for nome, t in tokens.items()},
    )


@pytest.fixture
def nova_viagem(client, mundo):
    """Create a trip through the API and return its JSON body."""

    def _criar(quem="admin_alfa", motorista=None, **campos):
        body = {
            "descricao": campos.pop("descricao", "São Paulo -> Curitiba"),
            "data_inicio": campos.pop("data_inicio", "2026-03-10T08:00:00-03:00"),
        }
        if motorista is not None:
            body["motorista_id"] = motorista
        elif quem.startswith("admin"):
            body["motorista_id"] = mundo.joao if quem == "admin_alfa" else mundo.carlos
        body.update(campos)
        resp = client.post("/viagens", json=body, headers=mundo.h[quem])
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _criar
