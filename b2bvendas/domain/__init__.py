"""Business contexts of the marketplace.

Importing this package registers every ORM model on ``Base.metadata`` so that
relationships declared by name resolve and migrations see the full schema.
"""

from b2bvendas.domain.auditoria.models import AuditLog
from b2bvendas.domain.categorias.models import Categoria
from b2bvendas.domain.clientes.models import Cliente, ClienteFornecedor
from b2bvendas.domain.email.models import EmailLog
from b2bvendas.domain.fornecedores.models import Fornecedor
from b2bvendas.domain.pedidos.models import ItemPedido, Pedido
from b2bvendas.domain.precos.models import ListaPreco
from b2bvendas.domain.produtos.models import Produto
from b2bvendas.domain.usuarios.models import Usuario

__all__ = [
    "AuditLog",
    "Categoria",
    "Cliente",
    "ClienteFornecedor",
    "EmailLog",
    "Fornecedor",
    "ItemPedido",
    "ListaPreco",
    "Pedido",
    "Produto",
    "Usuario",
]
