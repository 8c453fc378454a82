"""
Testes dos lançamentos: as três variantes por ``tipo`` e os campos derivados.
"""

import pytest

MATERIAL = {
    "tipo": "material",
    "nr_nota": "NF-500",
    "descricao": "Vergalhão 10mm",
    "data": "2025-05-02",
    "valor": 920.0,
}

MAO_OBRA = {
    "tipo": "mao_obra",
    "nome": "Luiz",
    "funcao": "Carpinteiro",
    "data_inicio": "2025-05-01",
    "data_fim": "2025-07-31",
    "conta_bancaria": "Ag 0001 CC 12345-6",
    "valor_total": 1000.0,
    "numero_parcelas": 3,
    "data_pagamento": "2025-05-30",
}

SEMANAL = {
    "tipo": "pagamento_semanal",
    "nome": "Sandra",
    "funcao": "Armadora",
    "data_inicio": "2025-05-05",
    "data_fim_contrato": "2025-08-29",
    "tipo_contratacao": "diaria",
    "valor_pagar": 700.0,
    "chave_pix": "sandra@pix.com",
    "nome_chave_pix": "Sandra M.",
    "qualificacao_tecnica": "Armação",
    "valor_va": 40.0,
    "valor_vt": 25.5,
    "semana": 19,
    "ano": 2025,
}


class TestVariantes:
    def test_material(self, client, operador_headers):
        response = client.post("/lancamentos", json=MATERIAL, headers=operador_headers)
        assert response.status_code == 201
        body = response.json()
        assert body["tipo"] == "material"
        assert body["status"] == "pendente_associacao"
        assert body["forma_pagamento"] == "pix"
        assert body["nome"] is None
        assert body["valor_parcela"] is None

    def test_mao_obra_valor_parcela(self, client, operador_headers):
        response = client.post("/lancamentos", json=MAO_OBRA, headers=operador_headers)
        assert response.status_code == 201
        body = response.json()
        assert body["valor_parcela"] == 333.33
        assert body["status_pagamento"] == "previsto"

    def test_semanal_totais(self, client, operador_headers):
        response = client.post(
            "/lancamentos",
            json={**SEMANAL, "total_receber": 1, "valor_va_vt": 1},
            headers=operador_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["valor_va_vt"] == 65.5
        assert body["total_receber"] == 765.5
        assert body["data_pagamento_efetuado"] is None

    def test_semanal_efetuado_registra_data(self, client, operador_headers):
        response = client.post(
            "/lancamentos",
            json={**SEMANAL, "status_semanal": "pagamento efetuado"},
            headers=operador_headers,
        )
        assert response.json()["data_pagamento_efetuado"] is not None

    def test_campo_da_variante_ausente(self, client, operador_headers):
        dados = {k: v for k, v in MAO_OBRA.items() if k != "conta_bancaria"}
        response = client.post("/lancamentos", json=dados, headers=operador_headers)
        assert response.status_code == 400
        campos = [erro["campo"] for erro in response.json()["detail"]]
        assert any(campo.endswith("conta_bancaria") for campo in campos)

    def test_tipo_desconhecido(self, client, operador_headers):
        response = client.post(
            "/lancamentos", json={**MATERIAL, "tipo": "aluguel"}, headers=operador_headers
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("ano", [1999, 2101])
    def test_ano_fora_do_intervalo(self, client, operador_headers, ano):
        response = client.post(
            "/lancamentos", json={**SEMANAL, "ano": ano}, headers=operador_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"][0]["campo"].endswith("ano")


class TestAtualizacao:
    def test_troca_de_tipo_limpa_campos(self, client, operador_headers):
        criado = client.post("/lancamentos", json=MATERIAL, headers=operador_headers).json()
        mao_obra = {k: v for k, v in MAO_OBRA.items() if k != "numero_parcelas"}

        response = client.put(
            f"/lancamentos/{criado['id']}", json=mao_obra, headers=operador_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["tipo"] == "mao_obra"
        assert body["nome"] == "Luiz"
        assert body["nr_nota"] is None
        assert body["valor"] is None
        assert body["forma_pagamento"] is None
        assert body["status_pagamento"] == "previsto"
        assert body["numero_parcelas"] == 1
        assert body["valor_parcela"] == 1000.0
        assert body["status"] == "pendente_associacao"

    def test_troca_de_tipo_para_semanal(self, client, operador_headers):
        criado = client.post("/lancamentos", json=MAO_OBRA, headers=operador_headers).json()

        response = client.put(
            f"/lancamentos/{criado['id']}", json=SEMANAL, headers=operador_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["tipo"] == "pagamento_semanal"
        assert body["status_semanal"] == "pagar"
        assert body["total_receber"] == 765.5
        assert body["conta_bancaria"] is None
        assert body["numero_parcelas"] is None
        assert body["status_pagamento"] is None

    def test_atualizacao_recalcula_total(self, client, operador_headers):
        criado = client.post("/lancamentos", json=SEMANAL, headers=operador_headers).json()
        response = client.put(
            f"/lancamentos/{criado['id']}", json={"valor_pagar": 800}, headers=operador_headers
        )
        assert response.json()["total_receber"] == 865.5

    def test_atualizacao_invalida(self, client, operador_headers):
        criado = client.post("/lancamentos", json=MATERIAL, headers=operador_headers).json()
        response = client.put(
            f"/lancamentos/{criado['id']}", json={"descricao": ""}, headers=operador_headers
        )
        assert response.status_code == 400


class TestListagem:
    def test_filtro_por_tipo(self, client, operador_headers):
        client.post("/lancamentos", json=MATERIAL, headers=operador_headers)
        client.post("/lancamentos", json=MAO_OBRA, headers=operador_headers)
        client.post("/lancamentos", json=SEMANAL, headers=operador_headers)

        response = client.get(
            "/lancamentos", params={"tipo": "mao_obra"}, headers=operador_headers
        )
        body = response.json()
        assert body["pagination"]["total"] == 1
        assert body["records"][0]["nome"] == "Luiz"
