from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from transporte.core.errors import ValidationError
from transporte.models.viagem import StatusViagem
from transporte.services.viagem import mudar_status, validar_periodo


def viagem(status, data_inicio=datetime(2026, 1, 1, 11, 0)):
    return SimpleNamespace(id="v1", status=status, data_inicio=data_inicio, data_fim=None)


def test_fluxo_normal():
    v = viagem(StatusViagem.PLANEJADA)
    mudar_status(v, StatusViagem.EM_ANDAMENTO)
    assert v.status == StatusViagem.EM_ANDAMENTO
    mudar_status(v, StatusViagem.FINALIZADA)
    assert v.status == StatusViagem.FINALIZADA
    # end time is stamped as naive UTC
    assert v.data_fim is not None and v.data_fim.tzinfo is None


def test_mesmo_status_nao_faz_nada():
    v = viagem(StatusViagem.PLANEJADA)
    mudar_status(v, StatusViagem.PLANEJADA)
    assert v.status == StatusViagem.PLANEJADA
    assert v.data_fim is None


@pytest.mark.parametrize(
    "atual,novo",
    [
        (StatusViagem.PLANEJADA, StatusViagem.FINALIZADA),
        (StatusViagem.FINALIZADA, StatusViagem.EM_ANDAMENTO),
        (StatusViagem.CANCELADA, StatusViagem.PLANEJADA),
        (StatusViagem.EM_ANDAMENTO, StatusViagem.PLANEJADA),
    ],
)
def test_transicoes_invalidas(atual, novo):
    with pytest.raises(ValidationError):
        mudar_status(viagem(atual), novo)


def test_status_lido_como_texto():
    v = viagem("PLANEJADA")
    mudar_status(v, StatusViagem.CANCELADA)
    assert v.status == StatusViagem.CANCELADA


def test_periodo():
    validar_periodo(datetime(2026, 1, 1), None)
    validar_periodo(datetime(2026, 1, 1), datetime(2026, 1, 2))
    with pytest.raises(ValidationError):
        validar_periodo(datetime(2026, 1, 2), datetime(2026, 1, 1))
    # aware and naive values are compared in UTC
    with pytest.raises(ValidationError):
        validar_periodo(datetime(2026, 1, 1, 12, 0), datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


def test_finalizar_antes_do_inicio():
    amanha = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=1)
    v = viagem(StatusViagem.EM_ANDAMENTO, data_inicio=amanha)
    with pytest.raises(ValidationError):
        mudar_status(v, StatusViagem.FINALIZADA)
    assert v.status == StatusViagem.EM_ANDAMENTO
    assert v.data_fim is None


def test_finalizar_com_fim_informado():
    v = viagem(StatusViagem.EM_ANDAMENTO)
    fim = datetime(2026, 1, 3, 9, 0, tzinfo=timezone(timedelta(hours=-3)))
    mudar_status(v, StatusViagem.FINALIZADA, fim=fim)
    assert v.data_fim == datetime(2026, 1, 3, 12, 0)

    v = viagem(StatusViagem.EM_ANDAMENTO)
    with pytest.raises(ValidationError):
        mudar_status(v, StatusViagem.FINALIZADA, fim=datetime(2025, 12, 31))
