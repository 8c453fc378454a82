"""
Testes do CRUD de obras e da associação com planilhas.
"""

from app.models.material import Material
from tests.conftest import auth_header, criar_usuario

NOVA_OBRA = {
    "nome": "Edifício Horizonte",
    "endereco": "Av. Central, 500",
    "cliente": "Incorporadora Alfa",
    "valor_contrato": 1200000.0,
    "data_inicio": "2025-02-01",
    "data_previsao_termino": "2026-01-31",
}


class TestObrasCrud:
    def test_criar_e_obter(self, client, operador, admin_headers):
        response = client.post("/obras", json=NOVA_OBRA, headers=admin_headers)
        assert response.status_code == 201
        obra = response.json()
        assert obra["status"] == "planejamento"
        assert obra["spreadsheet_id"] is None

        detalhe = client.get(f"/obras/{obra['id']}", headers=admin_headers)
        assert detalhe.status_code == 200
        assert detalhe.json()["nome"] == "Edifício Horizonte"

    def test_campo_obrigatorio_ausente(self, client, admin_headers):
        dados = {k: v for k, v in NOVA_OBRA.items() if k != "cliente"}
        response = client.post("/obras", json=dados, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Dados inválidos"
        assert {"campo": "cliente"}.items() <= response.json()["detail"][0].items()

    def test_texto_em_branco_rejeitado(self, client, admin_headers):
        response = client.post("/obras", json={**NOVA_OBRA, "nome": "   "}, headers=admin_headers)
        assert response.status_code == 400

    def test_status_invalido(self, client, admin_headers):
        response = client.post(
            "/obras", json={**NOVA_OBRA, "status": "demolida"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_atualizacao_parcial(self, client, obra, admin_headers):
        response = client.put(
            f"/obras/{obra.id}", json={"status": "pausada"}, headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "pausada"
        assert body["nome"] == obra.nome

    def test_atualizacao_revalida_registro(self, client, obra, admin_headers):
        response = client.put(
            f"/obras/{obra.id}", json={"data_termino": "2024-01-01"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"][0]["campo"] == "data_termino"

    def test_filtro_por_nome(self, client, obra, admin_headers):
        client.post("/obras", json=NOVA_OBRA, headers=admin_headers)
        response = client.get("/obras", params={"nome": "aurora"}, headers=admin_headers)
        assert [o["nome"] for o in response.json()["records"]] == ["Residencial Aurora"]

    def test_obra_inexistente(self, client, admin_headers):
        response = client.get("/obras/999", headers=admin_headers)
        assert response.status_code == 404

    def test_leitor_sem_escrita(self, client, db, obra):
        pendente = criar_usuario(db, "pre@obras.com", "PreAprovacao", aprovado=True)
        response = client.post("/obras", json=NOVA_OBRA, headers=auth_header(pendente))
        assert response.status_code == 403


class TestExclusao:
    def test_excluir(self, client, obra, admin_headers):
        response = client.delete(f"/obras/{obra.id}", headers=admin_headers)
        assert response.status_code == 200
        assert "message" in response.json()
        assert client.get(f"/obras/{obra.id}", headers=admin_headers).status_code == 404

    def test_excluir_com_vinculos(self, client, db, obra, admin_headers):
        db.add(Material(
            numero_nota="NF-1",
            data=obra.data_inicio,
            local_compra="Loja",
            valor=10,
            solicitante="Ana",
            forma_pagamento="avista",
            obra_id=obra.id,
        ))
        db.commit()

        response = client.delete(f"/obras/{obra.id}", headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["detail"] == {"materiais": 1}


class TestPlanilha:
    def test_associar_e_buscar(self, client, obra, admin_headers):
        response = client.put(
            f"/obras/{obra.id}/planilha",
            json={"spreadsheet_id": "1AbCdEf"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["spreadsheet_id"] == "1AbCdEf"

        encontrada = client.get("/obras/planilha/1AbCdEf", headers=admin_headers)
        assert encontrada.status_code == 200
        assert encontrada.json()["id"] == obra.id

    def test_planilha_sem_obra(self, client, admin_headers):
        response = client.get("/obras/planilha/inexistente", headers=admin_headers)
        assert response.status_code == 404

    def test_planilha_fora_do_escopo(self, client, obra, admin_headers, operador_headers):
        client.put(
            f"/obras/{obra.id}/planilha", json={"spreadsheet_id": "XYZ"}, headers=admin_headers
        )
        response = client.get("/obras/planilha/XYZ", headers=operador_headers)
        assert response.status_code == 403


class TestEscopoDeEscrita:
    """Usuário sem a obra nas obras permitidas não altera nem exclui a obra."""

    def test_atualizar_obra_negada(self, client, obra, operador_headers, admin_headers):
        response = client.put(
            f"/obras/{obra.id}", json={"nome": "Outro nome"}, headers=operador_headers
        )
        assert response.status_code == 403
        assert client.get(f"/obras/{obra.id}", headers=admin_headers).json()["nome"] == obra.nome

    def test_excluir_obra_negada(self, client, obra, operador_headers, admin_headers):
        response = client.delete(f"/obras/{obra.id}", headers=operador_headers)
        assert response.status_code == 403
        assert client.get(f"/obras/{obra.id}", headers=admin_headers).status_code == 200

    def test_associar_planilha_obra_negada(self, client, obra, operador_headers, admin_headers):
        response = client.put(
            f"/obras/{obra.id}/planilha",
            json={"spreadsheet_id": "ABC"},
            headers=operador_headers,
        )
        assert response.status_code == 403
        assert client.get(f"/obras/{obra.id}", headers=admin_headers).json()["spreadsheet_id"] is None

    def test_obra_liberada_pode_ser_alterada(self, client, obra_liberada, operador_headers):
        response = client.put(
            f"/obras/{obra_liberada.id}", json={"status": "pausada"}, headers=operador_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "pausada"
