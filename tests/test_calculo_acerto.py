from decimal import Decimal
from types import SimpleNamespace

from transporte.services.acerto import calcular_valor_acerto, somar, totais_viagem


def lanc(valor):
    return SimpleNamespace(valor=valor)


def test_receitas_menos_despesas():
    receitas = [lanc(Decimal("2000.00")), lanc(Decimal("500.00"))]
    despesas = [lanc(Decimal("300.00"))]
    assert calcular_valor_acerto(receitas, despesas) == Decimal("2200.00")


def test_aceita_valores_soltos():
    assert calcular_valor_acerto(["100.10", 50], [Decimal("0.10")]) == Decimal("150.00")


def test_floats_nao_acumulam_ruido():
    assert calcular_valor_acerto([0.1, 0.2], []) == Decimal("0.30")


def test_sem_lancamentos_e_zero():
    assert calcular_valor_acerto([], []) == Decimal("0.00")


def test_resultado_pode_ser_negativo():
    assert calcular_valor_acerto([lanc(Decimal("100"))], [lanc(Decimal("250.50"))]) == Decimal("-150.50")


def test_recalculo_sem_mudancas_e_idempotente():
    receitas = [lanc(Decimal("2500.00"))]
    despesas = [lanc(Decimal("300.00"))]
    primeiro = calcular_valor_acerto(receitas, despesas)
    assert calcular_valor_acerto(receitas, despesas) == primeiro


def test_arredonda_para_centavos():
    assert somar(["0.005"]) == Decimal("0.01")
    assert somar([None]) == Decimal("0.00")


def test_totais_viagem():
    viagem = SimpleNamespace(receitas=[lanc(Decimal("2500"))], despesas=[lanc(Decimal("300")), lanc(Decimal("50.25"))])
    totais = totais_viagem(viagem)
    assert totais == {
        "total_receitas": Decimal("2500.00"),
        "total_despesas": Decimal("350.25"),
        "lucro": Decimal("2149.75"),
    }
