"""
Testes de inclusão, alteração e remoção de itens das coleções filhas.
"""

from datetime import date

import pytest

from app.exceptions import ElementNotFound, ParentNotFound, ValidationFailed
from app.models.contrato import Contrato
from app.schemas.despesas import ContratoResponse, ParcelaCreate, ParcelaUpdate
from app.services import subdocumentos


@pytest.fixture()
def contrato(db):
    registro = Contrato(codigo="CONT-2025-0001", loja="Locadora Norte")
    db.add(registro)
    db.commit()
    db.refresh(registro)
    return registro


def _parcela(valor, status="pendente"):
    return ParcelaCreate(
        valor=valor,
        tipo_pagamento="avista",
        data_pagamento=date(2025, 3, 10),
        status_pagamento=status,
    )


def _totais(contrato):
    resposta = ContratoResponse.model_validate(contrato)
    return resposta.valor_total_pagamentos, resposta.status_geral_pagamentos


class TestSubdocumentos:
    def test_pai_inexistente(self, db):
        with pytest.raises(ParentNotFound):
            subdocumentos.carregar_pai(db, Contrato, 999, "Contrato")

    def test_append_recalcula_totais(self, db, contrato):
        assert _totais(contrato) == (0.0, "sem_pagamentos")

        subdocumentos.append(db, contrato, "pagamentos", _parcela(100, "efetuado"))
        pai = subdocumentos.append(db, contrato, "pagamentos", _parcela(50))

        assert len(pai.pagamentos) == 2
        assert _totais(pai) == (150.0, "pendente")

    def test_ids_estaveis_apos_remocao(self, db, contrato):
        subdocumentos.append(db, contrato, "pagamentos", _parcela(10))
        subdocumentos.append(db, contrato, "pagamentos", _parcela(20))
        primeiro, segundo = (p.id for p in contrato.pagamentos)

        pai = subdocumentos.remove_by_id(db, contrato, "pagamentos", primeiro)

        assert [p.id for p in pai.pagamentos] == [segundo]
        assert _totais(pai)[0] == 20.0

    def test_update_mescla_campos(self, db, contrato):
        subdocumentos.append(db, contrato, "pagamentos", _parcela(10))
        parcela_id = contrato.pagamentos[0].id

        pai = subdocumentos.update_by_id(
            db, contrato, "pagamentos", parcela_id,
            ParcelaUpdate(status_pagamento="efetuado"), esquema=ParcelaCreate,
        )

        parcela = subdocumentos.find_by_id(pai, "pagamentos", parcela_id)
        assert parcela.status_pagamento == "efetuado"
        assert float(parcela.valor) == 10.0
        assert _totais(pai) == (10.0, "todos_pagos")

    def test_update_invalido_nao_altera(self, db, contrato):
        subdocumentos.append(db, contrato, "pagamentos", _parcela(10))
        parcela_id = contrato.pagamentos[0].id

        with pytest.raises(ValidationFailed):
            subdocumentos.update_by_id(
                db, contrato, "pagamentos", parcela_id,
                ParcelaUpdate(status_pagamento="inexistente"), esquema=ParcelaCreate,
            )
        assert contrato.pagamentos[0].status_pagamento == "pendente"

    def test_remover_inexistente_nao_altera(self, db, contrato):
        subdocumentos.append(db, contrato, "pagamentos", _parcela(10))

        with pytest.raises(ElementNotFound):
            subdocumentos.remove_by_id(db, contrato, "pagamentos", 12345)

        assert len(contrato.pagamentos) == 1
        assert _totais(contrato)[0] == 10.0

    def test_atualizar_inexistente(self, db, contrato):
        with pytest.raises(ElementNotFound):
            subdocumentos.update_by_id(
                db, contrato, "pagamentos", 1, ParcelaUpdate(valor=5)
            )
