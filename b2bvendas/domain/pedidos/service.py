"""Order placement and the supplier side of the order lifecycle."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.core.exceptions import (
    BusinessRuleViolationError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from b2bvendas.core.text import apply_discount, generate_order_number
from b2bvendas.domain.clientes.repository import ClienteFornecedorRepository
from b2bvendas.domain.pedidos.models import ItemPedido, Pedido, StatusPedido
from b2bvendas.domain.pedidos.repository import PedidoRepository
from b2bvendas.domain.produtos.repository import ProdutoRepository
from b2bvendas.infrastructure.database import Page

PEDIDO_NAO_ENCONTRADO = "Pedido não encontrado"
CLIENTE_NAO_ASSOCIADO = "Cliente não está associado a este fornecedor"


@dataclass(frozen=True, slots=True)
class ItemSolicitado:
    produto_id: int
    quantidade: int


class PedidoService:
    def __init__(self, session: AsyncSession) -> None:
        self.pedidos = PedidoRepository(session)
        self.produtos = ProdutoRepository(session)
        self.associacoes = ClienteFornecedorRepository(session)

    async def list_for_fornecedor(
        self,
        fornecedor_id: int,
        *,
        status: StatusPedido | None = None,
        pagina: int = 1,
        limite: int = 10,
    ) -> Page[Pedido]:
        return await self.pedidos.list_for_fornecedor(
            fornecedor_id, status=status, pagina=pagina, limite=limite
        )

    async def list_for_cliente(
        self, cliente_id: int, *, pagina: int = 1, limite: int = 10
    ) -> Page[Pedido]:
        return await self.pedidos.list_for_cliente(
            cliente_id, pagina=pagina, limite=limite
        )

    async def get_for_fornecedor(self, fornecedor_id: int, pedido_id: int) -> Pedido:
        pedido = await self.pedidos.get_detail(pedido_id)
        if pedido is None or pedido.fornecedor_id != fornecedor_id:
            raise NotFoundError(PEDIDO_NAO_ENCONTRADO, context={"pedido_id": pedido_id})
        return pedido

    async def update_status(
        self, fornecedor_id: int, pedido_id: int, status: StatusPedido
    ) -> Pedido:
        """Move an order to ``status``.

        Raises:
            BusinessRuleViolationError: If the transition is not allowed.
        """
        pedido = await self.get_for_fornecedor(fornecedor_id, pedido_id)
        if not pedido.can_transition_to(status):
            raise BusinessRuleViolationError(
                "Não é possível alterar o status de "
                f"'{pedido.status}' para '{status}'",
                context={"pedido_id": pedido_id, "de": pedido.status, "para": status},
            )

        if status == StatusPedido.CANCELADO:
            for item in pedido.itens:
                item.produto.quantidade_estoque += item.quantidade
            logger.info("Stock restored for cancelled pedido {}", pedido.numero)

        previous = pedido.status
        await self.pedidos.update(pedido, {"status": status})
        logger.info(
            "Pedido {} moved from {} to {}",
            pedido.numero,
            previous,
            status,
            pedido_id=pedido_id,
            fornecedor_id=fornecedor_id,
        )
        return await self.get_for_fornecedor(fornecedor_id, pedido_id)

    async def create_pedido(
        self,
        cliente_id: int,
        fornecedor_id: int,
        itens: Iterable[ItemSolicitado],
        *,
        frete: Decimal = Decimal(0),
        observacoes: str | None = None,
    ) -> Pedido:
        """Place an order for a customer with one supplier.

        Unit prices come from the price list assigned to the customer, and the
        ordered quantities are taken out of stock.
        """
        association = await self.associacoes.get_active(cliente_id, fornecedor_id)
        if association is None:
            raise ForbiddenError(
                CLIENTE_NAO_ASSOCIADO,
                context={"cliente_id": cliente_id, "fornecedor_id": fornecedor_id},
            )

        quantidades: Counter[int] = Counter()
        for item in itens:
            quantidades[item.produto_id] += item.quantidade
        if not quantidades:
            raise ValidationError("O pedido deve ter pelo menos um item")

        produtos = {
            produto.id: produto
            for produto in await self.produtos.get_many(
                list(quantidades), fornecedor_id
            )
            if produto.ativo
        }
        lista = association.lista_preco
        if lista is not None and not lista.ativo:
            lista = None

        subtotal = desconto = Decimal(0)
        novos_itens: list[ItemPedido] = []
        for produto_id, quantidade in quantidades.items():
            produto = produtos.get(produto_id)
            if produto is None:
                raise NotFoundError.for_resource("Produto", produto_id=produto_id)
            if quantidade > produto.quantidade_estoque:
                raise BusinessRuleViolationError(
                    f"Estoque insuficiente para o produto {produto.nome}",
                    context={
                        "produto_id": produto_id,
                        "solicitado": quantidade,
                        "disponivel": produto.quantidade_estoque,
                    },
                )

            preco_unitario = produto.preco_base
            if lista is not None:
                preco_unitario = apply_discount(
                    produto.preco_base, lista.desconto_tipo, lista.desconto_valor
                )
            subtotal += produto.preco_base * quantidade
            desconto += (produto.preco_base - preco_unitario) * quantidade
            produto.quantidade_estoque -= quantidade
            novos_itens.append(
                ItemPedido(
                    produto=produto,
                    quantidade=quantidade,
                    preco_unitario=preco_unitario,
                    subtotal=preco_unitario * quantidade,
                )
            )

        pedido = await self.pedidos.create(
            Pedido(
                numero=generate_order_number(),
                cliente_id=cliente_id,
                fornecedor_id=fornecedor_id,
                status=StatusPedido.PENDENTE,
                subtotal=subtotal,
                desconto=desconto,
                frete=frete,
                total=subtotal - desconto + frete,
                observacoes=observacoes,
                itens=novos_itens,
            )
        )
        logger.info(
            "Pedido {} created",
            pedido.numero,
            pedido_id=pedido.id,
            cliente_id=cliente_id,
            fornecedor_id=fornecedor_id,
            total=str(pedido.total),
        )
        return await self.get_for_fornecedor(fornecedor_id, pedido.id)
