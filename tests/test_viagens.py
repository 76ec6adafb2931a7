import pytest


def test_admin_cria_viagem_para_motorista_da_empresa(client, mundo):
    body = {"descricao": "Santos -> Campinas", "data_inicio": "2026-03-10T08:00:00-03:00", "motorista_id": mundo.pedro}
    resp = client.post("/viagens", json=body, headers=mundo.h["admin_alfa"])
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    assert data["status"] == "PLANEJADA"
    assert data["transportadora_id"] == mundo.alfa
    assert data["motorista"]["nome"] == "Pedro Souza"
    # stored in UTC
    assert data["data_inicio"].startswith("2026-03-10T11:00:00")
    assert data["lucro"] == "0.00"

    # drivers of another company are off limits
    resp = client.post("/viagens", json={**body, "motorista_id": mundo.carlos}, headers=mundo.h["admin_alfa"])
    assert resp.status_code == 403
    resp = client.post("/viagens", json={**body, "motorista_id": "nao-existe"}, headers=mundo.h["admin_alfa"])
    assert resp.status_code == 404
    resp = client.post("/viagens", json={"descricao": "Sem motorista", "data_inicio": "2026-03-10T08:00:00"}, headers=mundo.h["admin_alfa"])
    assert resp.status_code == 400


def test_motorista_cria_viagem_para_si(client, mundo):
    body = {"descricao": "Curitiba -> Joinville", "data_inicio": "2026-03-11T06:00:00-03:00"}
    resp = client.post("/viagens", json=body, headers=mundo.h["joao"])
    assert resp.status_code == 201
    assert resp.json()["data"]["motorista_id"] == mundo.joao
    assert resp.json()["data"]["transportadora_id"] == mundo.alfa

    resp = client.post("/viagens", json={**body, "motorista_id": mundo.pedro}, headers=mundo.h["joao"])
    assert resp.status_code == 403


def test_periodo_invalido(client, mundo):
    body = {
        "descricao": "Volta",
        "data_inicio": "2026-03-10T08:00:00-03:00",
        "data_fim": "2026-03-09T08:00:00-03:00",
        "motorista_id": mundo.joao,
    }
    resp = client.post("/viagens", json=body, headers=mundo.h["admin_alfa"])
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_visibilidade(client, mundo, nova_viagem):
    do_joao = nova_viagem(motorista=mundo.joao)
    do_pedro = nova_viagem(motorista=mundo.pedro)
    do_carlos = nova_viagem(quem="admin_beta")

    ids = {v["id"] for v in client.get("/viagens", headers=mundo.h["admin_alfa"]).json()["data"]}
    assert ids == {do_joao["id"], do_pedro["id"]}
    ids = {v["id"] for v in client.get("/viagens", headers=mundo.h["joao"]).json()["data"]}
    assert ids == {do_joao["id"]}

    # another driver's trip reads as missing
    assert client.get(f"/viagens/{do_pedro['id']}", headers=mundo.h["joao"]).status_code == 404
    assert client.get(f"/viagens/{do_carlos['id']}", headers=mundo.h["admin_alfa"]).status_code == 404
    assert client.get(f"/viagens/{do_joao['id']}", headers=mundo.h["joao"]).status_code == 200


def test_filtros(client, mundo, nova_viagem):
    marco = nova_viagem(motorista=mundo.joao, data_inicio="2026-03-10T12:00:00-03:00")
    abril = nova_viagem(motorista=mundo.pedro, data_inicio="2026-04-10T12:00:00-03:00")
    client.post(f"/viagens/{abril['id']}/iniciar", headers=mundo.h["admin_alfa"])
    h = mundo.h["admin_alfa"]

    def ids(**params):
        return {v["id"] for v in client.get("/viagens", params=params, headers=h).json()["data"]}

    assert ids(status="EM_ANDAMENTO") == {abril["id"]}
    assert ids(motorista_id=mundo.joao) == {marco["id"]}
    assert ids(inicio="2026-04-01") == {abril["id"]}
    assert ids(fim="2026-03-31") == {marco["id"]}
    assert ids(inicio="2026-03-10", fim="2026-03-10") == {marco["id"]}
    assert client.get("/viagens", params={"inicio": "ontem"}, headers=h).status_code == 400
    assert client.get("/viagens", params={"status": "PERDIDA"}, headers=h).status_code == 400


def test_maquina_de_estados(client, mundo, nova_viagem):
    v = nova_viagem()
    h = mundo.h["joao"]

    assert client.post(f"/viagens/{v['id']}/finalizar", headers=h).status_code == 400

    resp = client.post(f"/viagens/{v['id']}/iniciar", headers=h)
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "EM_ANDAMENTO"

    resp = client.post(f"/viagens/{v['id']}/finalizar", headers=h)
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "FINALIZADA"
    assert resp.json()["data"]["data_fim"] is not None

    # terminal
    assert client.post(f"/viagens/{v['id']}/cancelar", headers=h).status_code == 400
    assert client.patch(f"/viagens/{v['id']}", json={"status": "EM_ANDAMENTO"}, headers=h).status_code == 400


def test_cancelamento_via_atualizacao(client, mundo, nova_viagem):
    v = nova_viagem()
    resp = client.patch(f"/viagens/{v['id']}", json={"status": "CANCELADA", "descricao": "Cancelada pelo cliente"}, headers=mundo.h["admin_alfa"])
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "CANCELADA"
    assert data["descricao"] == "Cancelada pelo cliente"


def test_atualizacao(client, mundo, nova_viagem):
    v = nova_viagem(motorista=mundo.joao)
    h = mundo.h["admin_alfa"]

    resp = client.patch(f"/viagens/{v['id']}", json={"motorista_id": mundo.pedro}, headers=h)
    assert resp.status_code == 200
    assert resp.json()["data"]["motorista"]["id"] == mundo.pedro

    assert client.patch(f"/viagens/{v['id']}", json={"motorista_id": mundo.carlos}, headers=h).status_code == 403
    assert client.patch(f"/viagens/{v['id']}", json={"transportadora_id": mundo.beta}, headers=h).status_code == 400
    assert client.patch(f"/viagens/{v['id']}", json={"data_fim": "2026-03-01T00:00:00-03:00"}, headers=h).status_code == 400
    assert client.patch(f"/viagens/{v['id']}", json={}, headers=h).status_code == 400
    # joao lost the trip when it moved to pedro
    assert client.patch(f"/viagens/{v['id']}", json={"descricao": "x"}, headers=mundo.h["joao"]).status_code == 404


@pytest.mark.parametrize("lancamento", ["receitas", "despesas"])
def test_exclusao_bloqueada_por_lancamentos(client, mundo, nova_viagem, lancamento):
    v = nova_viagem()
    h = mundo.h["admin_alfa"]
    item = client.post(f"/{lancamento}", json={"viagem_id": v["id"], "valor": "100.00", "descricao": "Frete"}, headers=h).json()["data"]

    resp = client.delete(f"/viagens/{v['id']}", headers=h)
    assert resp.status_code == 409
    assert client.get(f"/viagens/{v['id']}", headers=h).status_code == 200
    assert client.get(f"/{lancamento}/{item['id']}", headers=h).status_code == 200

    assert client.delete(f"/{lancamento}/{item['id']}", headers=h).status_code == 200
    assert client.delete(f"/viagens/{v['id']}", headers=h).status_code == 200
    assert client.get(f"/viagens/{v['id']}", headers=h).status_code == 404


def test_criacao_segue_maquina_de_estados(client, mundo):
    body = {"descricao": "Direto", "data_inicio": "2026-03-10T08:00:00-03:00", "motorista_id": mundo.joao}
    h = mundo.h["admin_alfa"]

    resp = client.post("/viagens", json={**body, "status": "FINALIZADA"}, headers=h)
    assert resp.status_code == 400
    assert client.get("/viagens", headers=h).json()["total"] == 0

    resp = client.post("/viagens", json={**body, "status": "EM_ANDAMENTO"}, headers=h)
    assert resp.status_code == 201
    assert resp.json()["data"]["status"] == "EM_ANDAMENTO"
    resp = client.post("/viagens", json={**body, "status": "CANCELADA"}, headers=h)
    assert resp.status_code == 201
    assert resp.json()["data"]["status"] == "CANCELADA"


def test_finalizar_viagem_futura(client, mundo, nova_viagem):
    v = nova_viagem(data_inicio="2030-01-10T08:00:00-03:00")
    h = mundo.h["admin_alfa"]
    assert client.post(f"/viagens/{v['id']}/iniciar", headers=h).status_code == 200

    # the stamp would land before the start
    assert client.post(f"/viagens/{v['id']}/finalizar", headers=h).status_code == 400
    assert client.get(f"/viagens/{v['id']}", headers=h).json()["data"]["status"] == "EM_ANDAMENTO"

    resp = client.patch(f"/viagens/{v['id']}", json={"status": "FINALIZADA", "data_fim": "2030-01-12T08:00:00-03:00"}, headers=h)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "FINALIZADA"
    assert data["data_fim"].startswith("2030-01-12T11:00:00")


def test_fim_informado_junto_com_finalizacao_e_validado(client, mundo, nova_viagem):
    v = nova_viagem()
    h = mundo.h["admin_alfa"]
    client.post(f"/viagens/{v['id']}/iniciar", headers=h)
    resp = client.patch(f"/viagens/{v['id']}", json={"status": "FINALIZADA", "data_fim": "2026-03-01T08:00:00-03:00"}, headers=h)
    assert resp.status_code == 400
    assert client.get(f"/viagens/{v['id']}", headers=h).json()["data"]["status"] == "EM_ANDAMENTO"


def test_data_sem_fuso_e_horario_local(client, mundo, nova_viagem):
    v = nova_viagem(data_inicio="2026-03-10T01:00:00")
    assert v["data_inicio"].startswith("2026-03-10T04:00:00")
    resp = client.get("/viagens", params={"inicio": "2026-03-10", "fim": "2026-03-10"}, headers=mundo.h["admin_alfa"])
    assert [x["id"] for x in resp.json()["data"]] == [v["id"]]
