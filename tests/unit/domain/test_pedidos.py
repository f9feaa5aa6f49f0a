"""Unit tests for order status transitions and customer order summaries."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from b2bvendas.domain.pedidos.models import Pedido, StatusPedido
from b2bvendas.domain.pedidos.repository import ResumoPedidos


@pytest.mark.unit
class TestStatusTransitions:
    """Test the allowed order status moves."""

    @pytest.mark.parametrize(
        ("atual", "novo", "allowed"),
        [
            (StatusPedido.PENDENTE, StatusPedido.CONFIRMADO, True),
            (StatusPedido.PENDENTE, StatusPedido.CANCELADO, True),
            (StatusPedido.PENDENTE, StatusPedido.ENVIADO, False),
            (StatusPedido.CONFIRMADO, StatusPedido.ENVIADO, True),
            (StatusPedido.ENVIADO, StatusPedido.ENTREGUE, True),
            (StatusPedido.ENVIADO, StatusPedido.CANCELADO, False),
            (StatusPedido.ENTREGUE, StatusPedido.CANCELADO, False),
            (StatusPedido.CANCELADO, StatusPedido.PENDENTE, False),
        ],
    )
    def test_can_transition_to(
        self, atual: StatusPedido, novo: StatusPedido, allowed: bool
    ) -> None:
        assert Pedido(status=atual).can_transition_to(novo) is allowed


@pytest.mark.unit
class TestResumoPedidos:
    """Test the average ticket of a summary."""

    def test_ticket_medio(self) -> None:
        resumo = ResumoPedidos(3, Decimal("100.00"), datetime.now(UTC))

        assert resumo.ticket_medio == Decimal("33.33")

    def test_ticket_medio_without_orders(self) -> None:
        assert ResumoPedidos(0, Decimal(0), None).ticket_medio == Decimal(0)
