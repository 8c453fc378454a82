"""
Testes de filtros declarativos e paginação tolerante das listagens.
"""

from datetime import date, timedelta

import pytest

from app.exceptions import ValidationFailed
from app.models.material import Material
from app.services import crud_service
from app.services.despesa_service import MATERIAIS
from app.services.filtros import resolver_paginacao


def _materiais(db, quantidade, **extra):
    inicio = date(2025, 1, 1)
    for i in range(quantidade):
        dados = {
            "numero_nota": f"NF-{i:03d}",
            "data": inicio + timedelta(days=i),
            "local_compra": "Depósito Central",
            "valor": 10 + i,
            "solicitante": "Carlos",
            "forma_pagamento": "avista",
        }
        dados.update(extra)
        db.add(Material(**dados))
    db.commit()


class TestResolverPaginacao:
    def test_valores_validos(self):
        pag = resolver_paginacao("3", "10")
        assert (pag.page, pag.limit, pag.offset) == (3, 10, 20)

    @pytest.mark.parametrize("page, limit", [("abc", "-5"), (None, None), ("0", "0"), ("", "x")])
    def test_valores_invalidos_usam_padrao(self, page, limit):
        pag = resolver_paginacao(page, limit)
        assert (pag.page, pag.limit) == (1, 10)

    def test_limite_maximo(self):
        assert resolver_paginacao("1", "5000").limit == 100


class TestListagem:
    def test_ultima_pagina_parcial(self, db):
        _materiais(db, 25)
        resultado = crud_service.listar(db, MATERIAIS, {}, page="3", limit="10")

        assert len(resultado["records"]) == 5
        assert resultado["pagination"] == {"page": 3, "limit": 10, "total": 25, "pages": 3}

    def test_ordem_data_desc(self, db):
        _materiais(db, 3)
        resultado = crud_service.listar(db, MATERIAIS, {})
        datas = [m.data for m in resultado["records"]]
        assert datas == sorted(datas, reverse=True)

    def test_sem_resultados(self, db):
        resultado = crud_service.listar(db, MATERIAIS, {"solicitante": "ninguém"})
        assert resultado["records"] == []
        assert resultado["pagination"]["pages"] == 0

    def test_intervalo_de_datas_inclusivo(self, db):
        _materiais(db, 10)
        resultado = crud_service.listar(
            db, MATERIAIS, {"data_inicio": "2025-01-03", "data_fim": "2025-01-05"}
        )
        assert sorted(m.data.day for m in resultado["records"]) == [3, 4, 5]

    def test_substring_sem_diferenciar_maiusculas(self, db):
        _materiais(db, 2)
        _materiais(db, 1, solicitante="Mariana Souza")
        resultado = crud_service.listar(db, MATERIAIS, {"solicitante": "mariana"})
        assert [m.solicitante for m in resultado["records"]] == ["Mariana Souza"]

    def test_curinga_tratado_como_texto(self, db):
        _materiais(db, 2)
        resultado = crud_service.listar(db, MATERIAIS, {"local_compra": "%"})
        assert resultado["pagination"]["total"] == 0

    def test_filtro_vazio_ignorado(self, db):
        _materiais(db, 4)
        resultado = crud_service.listar(db, MATERIAIS, {"forma_pagamento": "  "})
        assert resultado["pagination"]["total"] == 4

    def test_data_invalida(self, db):
        with pytest.raises(ValidationFailed) as exc:
            crud_service.listar(db, MATERIAIS, {"data_inicio": "01/02/2025"})
        assert exc.value.detail[0]["campo"] == "data_inicio"

    def test_lista_de_obras_vazia(self, db):
        _materiais(db, 3)
        resultado = crud_service.listar(db, MATERIAIS, {}, obras_permitidas=set())
        # Materiais não são escopados por obra
        assert resultado["pagination"]["total"] == 3
