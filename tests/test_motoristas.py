def test_listagem_respeita_o_escopo(client, mundo):
    resp = client.get("/motoristas", headers=mundo.h["admin_alfa"])
    assert resp.status_code == 200
    assert {m["id"] for m in resp.json()["data"]} == {mundo.joao, mundo.pedro}

    resp = client.get("/motoristas", headers=mundo.h["joao"])
    assert [m["id"] for m in resp.json()["data"]] == [mundo.joao]

    resp = client.get("/motoristas", params={"transportadora_id": mundo.beta}, headers=mundo.h["admin_alfa"])
    assert resp.json()["total"] == 0


def test_cadastro(client, mundo):
    h = mundo.h["admin_alfa"]
    resp = client.post("/motoristas", json={"nome": "Rita Alves", "cpf": "55566677788", "cnh": "CNH0099"}, headers=h)
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    assert data["transportadora_id"] == mundo.alfa
    assert data["transportadora"]["nome"] == "Transportes Alfa"
    assert len(data["codigo_validacao"]) == 6

    assert client.post("/motoristas", json={"nome": "Outro", "cpf": "12345678901"}, headers=h).status_code == 409
    assert client.post("/motoristas", json={"nome": "Outro", "cpf": "11100011100", "cnh": "CNH0001"}, headers=h).status_code == 409
    assert client.post("/motoristas", json={"nome": "Outro", "cpf": "123"}, headers=h).status_code == 400


def test_cadastro_restrito_a_propria_empresa(client, mundo):
    payload = {"nome": "Rita Alves", "cpf": "55566677788"}
    assert client.post("/motoristas", json={**payload, "transportadora_id": mundo.beta}, headers=mundo.h["admin_alfa"]).status_code == 403
    assert client.post("/motoristas", json={**payload, "transportadora_id": "nao-existe"}, headers=mundo.h["admin_alfa"]).status_code == 404
    # drivers cannot register colleagues
    assert client.post("/motoristas", json=payload, headers=mundo.h["joao"]).status_code == 403


def test_detalhe(client, mundo, nova_viagem):
    nova_viagem()
    resp = client.get(f"/motoristas/{mundo.joao}", headers=mundo.h["admin_alfa"])
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data["viagens"]) == 1
    assert data["viagens"][0]["total_receitas"] == "0.00"

    assert client.get(f"/motoristas/{mundo.pedro}", headers=mundo.h["joao"]).status_code == 404
    assert client.get(f"/motoristas/{mundo.carlos}", headers=mundo.h["admin_alfa"]).status_code == 404
    assert client.get(f"/motoristas/{mundo.joao}", headers=mundo.h["joao"]).status_code == 200


def test_atualizacao(client, mundo):
    resp = client.patch(f"/motoristas/{mundo.joao}", json={"telefone": "(41) 99999-0000"}, headers=mundo.h["joao"])
    assert resp.status_code == 200
    assert resp.json()["data"]["telefone"] == "(41) 99999-0000"

    h = mundo.h["admin_alfa"]
    assert client.patch(f"/motoristas/{mundo.joao}", json={"cpf": "12345678902"}, headers=h).status_code == 409
    assert client.patch(f"/motoristas/{mundo.joao}", json={"transportadora_id": mundo.beta}, headers=h).status_code == 403
    assert client.patch(f"/motoristas/{mundo.joao}", json={"transportadora_id": "nao-existe"}, headers=h).status_code == 404
    assert client.patch(f"/motoristas/{mundo.carlos}", json={"nome": "X"}, headers=h).status_code == 404


def test_exclusao(client, mundo, nova_viagem):
    nova_viagem(motorista=mundo.joao)
    assert client.delete(f"/motoristas/{mundo.joao}", headers=mundo.h["admin_alfa"]).status_code == 409
    assert client.delete(f"/motoristas/{mundo.pedro}", headers=mundo.h["pedro"]).status_code == 403
    assert client.delete(f"/motoristas/{mundo.pedro}", headers=mundo.h["admin_alfa"]).status_code == 200
    assert client.get(f"/motoristas/{mundo.pedro}", headers=mundo.h["admin_alfa"]).status_code == 404
