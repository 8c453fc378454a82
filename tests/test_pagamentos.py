"""
Testes do painel financeiro (/pagamentos): coleções, pagamentos semanais,
relatórios e exportação para Excel.
"""

import pytest

PAINEL = {
    "obra": {
        "nome": "Casa Vila Nova",
        "orcamento": 1000.0,
        "data_inicio": "2025-01-01",
        "data_final_entrega": "2030-12-31",
    }
}

SEMANAL = {
    "nome": "José",
    "funcao": "Servente",
    "semana": 12,
    "ano": 2025,
    "valor_pagar": 500.0,
    "valor_va": 50.0,
    "valor_vt": 30.0,
}


@pytest.fixture()
def painel(client, operador_headers):
    response = client.post("/pagamentos", json=PAINEL, headers=operador_headers)
    assert response.status_code == 201
    return response.json()


class TestPainel:
    def test_criar_vazio(self, painel):
        assert painel["obra"]["status"] == "planejamento"
        assert painel["valor_total_gasto"] == 0.0
        assert painel["saldo_restante"] == 1000.0
        assert painel["status_orcamento"] == "dentro do orçamento"
        assert painel["percentual_concluido"] == 0
        assert painel["dias_restantes"] > 0

    def test_criar_com_colecoes(self, client, operador_headers):
        response = client.post(
            "/pagamentos",
            json={
                **PAINEL,
                "gastos": [{"descricao": "Cimento", "categoria": "Material", "valor": 400}],
                "contratos": [
                    {"nome_contratado": "Elétrica SA", "servico": "Instalação", "valor_total": 380}
                ],
                "cronograma": [{"etapa": "Fundação", "status": "concluida"}, {"etapa": "Laje"}],
            },
            headers=operador_headers,
        )
        body = response.json()
        assert body["valor_total_gasto"] == 780.0
        assert body["status_orcamento"] == "atenção"
        assert body["percentual_concluido"] == 50

    def test_entrega_antes_do_inicio(self, client, operador_headers):
        obra = {**PAINEL["obra"], "data_final_entrega": "2024-12-31"}
        response = client.post("/pagamentos", json={"obra": obra}, headers=operador_headers)
        assert response.status_code == 400

    def test_listar_e_obter(self, client, painel, operador_headers):
        lista = client.get("/pagamentos", headers=operador_headers).json()
        assert lista["pagination"]["total"] == 1
        assert lista["records"][0]["id"] == painel["id"]

        detalhe = client.get(f"/pagamentos/{painel['id']}", headers=operador_headers)
        assert detalhe.json()["obra"]["nome"] == "Casa Vila Nova"

    def test_atualizar_obra(self, client, painel, operador_headers):
        response = client.put(
            f"/pagamentos/{painel['id']}/obra",
            json={"orcamento": 2000, "status": "em andamento"},
            headers=operador_headers,
        )
        assert response.status_code == 200
        assert response.json()["obra"]["orcamento"] == 2000.0
        assert response.json()["obra"]["nome"] == "Casa Vila Nova"

        via_put = client.put(
            f"/pagamentos/{painel['id']}",
            json={"obra": {"responsavel": "Eng. Paula"}},
            headers=operador_headers,
        )
        assert via_put.json()["obra"]["responsavel"] == "Eng. Paula"

    def test_excluir(self, client, painel, operador_headers):
        response = client.delete(f"/pagamentos/{painel['id']}", headers=operador_headers)
        assert response.status_code == 200
        assert client.get(f"/pagamentos/{painel['id']}", headers=operador_headers).status_code == 404


class TestColecoes:
    def test_gasto_alterado_e_removido(self, client, painel, operador_headers):
        base = f"/pagamentos/{painel['id']}/gastos"
        criado = client.post(
            base, json={"descricao": "Areia", "categoria": "Material", "valor": 950},
            headers=operador_headers,
        ).json()
        assert criado["status_orcamento"] == "próximo do limite"
        gasto_id = criado["gastos"][0]["id"]

        alterado = client.put(f"{base}/{gasto_id}", json={"valor": 1100}, headers=operador_headers)
        assert alterado.json()["status_orcamento"] == "acima do orçamento"
        assert alterado.json()["gastos"][0]["descricao"] == "Areia"

        removido = client.delete(f"{base}/{gasto_id}", headers=operador_headers)
        assert removido.json()["gastos"] == []
        assert removido.json()["saldo_restante"] == 1000.0

    def test_item_inexistente(self, client, painel, operador_headers):
        response = client.delete(f"/pagamentos/{painel['id']}/cronograma/77", headers=operador_headers)
        assert response.status_code == 404

    def test_painel_inexistente(self, client, operador_headers):
        response = client.post(
            "/pagamentos/999/cronograma", json={"etapa": "Pintura"}, headers=operador_headers
        )
        assert response.status_code == 404

    def test_etapa_com_status_invalido(self, client, painel, operador_headers):
        response = client.post(
            f"/pagamentos/{painel['id']}/cronograma",
            json={"etapa": "Pintura", "status": "quase"},
            headers=operador_headers,
        )
        assert response.status_code == 400


class TestPagamentosSemanais:
    def test_totais_derivados(self, client, painel, operador_headers):
        response = client.post(
            f"/pagamentos/{painel['id']}/pagamentos-semanais",
            json={**SEMANAL, "total_receber": 1, "valor_va_vt": 1},
            headers=operador_headers,
        )
        assert response.status_code == 201
        semanal = response.json()["pagamentos_semanais"][0]
        assert semanal["valor_va_vt"] == 80.0
        assert semanal["total_receber"] == 580.0
        assert semanal["data_pagamento_efetuado"] is None
        assert response.json()["valor_total_gasto"] == 580.0

    def test_atualizacao_recalcula(self, client, painel, operador_headers):
        base = f"/pagamentos/{painel['id']}/pagamentos-semanais"
        criado = client.post(base, json=SEMANAL, headers=operador_headers).json()
        item_id = criado["pagamentos_semanais"][0]["id"]

        alterado = client.put(f"{base}/{item_id}", json={"valor_vt": 70}, headers=operador_headers)
        semanal = alterado.json()["pagamentos_semanais"][0]
        assert semanal["valor_va_vt"] == 120.0
        assert semanal["total_receber"] == 620.0

    def test_efetuado_idempotente(self, client, painel, operador_headers):
        base = f"/pagamentos/{painel['id']}/pagamentos-semanais"
        item_id = client.post(base, json=SEMANAL, headers=operador_headers).json()[
            "pagamentos_semanais"
        ][0]["id"]

        primeiro = client.patch(f"{base}/{item_id}/efetuado", headers=operador_headers)
        assert primeiro.status_code == 200
        semanal = primeiro.json()["pagamentos_semanais"][0]
        assert semanal["status"] == "pagamento efetuado"
        data_pagamento = semanal["data_pagamento_efetuado"]
        assert data_pagamento is not None

        segundo = client.patch(f"{base}/{item_id}/efetuado", headers=operador_headers)
        assert segundo.json()["pagamentos_semanais"][0]["data_pagamento_efetuado"] == data_pagamento

    def test_pendentes_e_relatorio(self, client, painel, operador_headers):
        base = f"/pagamentos/{painel['id']}/pagamentos-semanais"
        client.post(base, json=SEMANAL, headers=operador_headers)
        pago = client.post(
            base, json={**SEMANAL, "nome": "Rui", "semana": 13}, headers=operador_headers
        ).json()["pagamentos_semanais"][1]
        client.patch(f"{base}/{pago['id']}/efetuado", headers=operador_headers)

        pendentes = client.get("/pagamentos/semanais/pendentes", headers=operador_headers).json()
        assert pendentes["total"] == 1
        item = pendentes["pagamentos_pendentes"][0]
        assert item["obra_id"] == painel["id"]
        assert item["obra_nome"] == "Casa Vila Nova"
        assert item["pagamento_semanal"]["nome"] == "José"

        relatorio = client.get(
            "/pagamentos/relatorio-semanais",
            params={"ano": 2025, "status": "pagamento efetuado"},
            headers=operador_headers,
        ).json()
        assert relatorio["resumo"]["total_pagamentos"] == 1
        assert relatorio["resumo"]["valor_total"] == 580.0
        assert relatorio["resumo"]["filtros"] == {
            "semana": None, "ano": 2025, "status": "pagamento efetuado"
        }
        assert relatorio["relatorio"][0]["pagamento_semanal"]["nome"] == "Rui"

    @pytest.mark.parametrize(("ano", "esperado"), [(2000, 201), (2100, 201), (2101, 400)])
    def test_limites_do_ano(self, client, painel, operador_headers, ano, esperado):
        response = client.post(
            f"/pagamentos/{painel['id']}/pagamentos-semanais",
            json={**SEMANAL, "ano": ano},
            headers=operador_headers,
        )
        assert response.status_code == esperado


class TestRelatorios:
    def _preencher(self, client, painel, headers):
        base = f"/pagamentos/{painel['id']}"
        client.post(
            f"{base}/gastos",
            json={"descricao": "Tijolo", "categoria": "Material", "valor": 100},
            headers=headers,
        )
        client.post(
            f"{base}/contratos",
            json={"nome_contratado": "Hidráulica ME", "servico": "Encanamento", "valor_total": 200},
            headers=headers,
        )
        client.post(
            f"{base}/cronograma", json={"etapa": "Fundação", "status": "concluida"}, headers=headers
        )
        client.post(f"{base}/pagamentos-semanais", json=SEMANAL, headers=headers)

    def test_relatorio_financeiro(self, client, painel, operador_headers):
        self._preencher(client, painel, operador_headers)
        response = client.get(
            f"/pagamentos/{painel['id']}/relatorio-financeiro", headers=operador_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["obra"]["nome"] == "Casa Vila Nova"
        assert body["resumo_financeiro"]["total_gasto"] == 880.0
        assert body["resumo_financeiro"]["percentual_gasto"] == 88.0
        assert body["resumo_financeiro"]["status_orcamento"] == "atenção"
        assert body["detalhamento_gastos"]["pagamentos_semanais"]["pendentes"] == 580.0
        assert body["cronograma"]["percentual_concluido"] == 100

    def test_exportar_excel(self, client, painel, operador_headers):
        self._preencher(client, painel, operador_headers)
        response = client.get(
            f"/pagamentos/{painel['id']}/relatorio-financeiro/excel", headers=operador_headers
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert "relatorio_financeiro_" in response.headers["content-disposition"]
        assert response.content[:2] == b"PK"

    def test_relatorio_painel_inexistente(self, client, operador_headers):
        response = client.get("/pagamentos/999/relatorio-financeiro", headers=operador_headers)
        assert response.status_code == 404
