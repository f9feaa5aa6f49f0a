"""Transactional email templates.

Each template fixes the subject, tags and priority of a notification and
renders a minimal HTML and plain text body from its ``data`` mapping. Keys in
``data`` follow the API's camelCase payloads (``orderNumber``,
``customerName``...).
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from html import escape
from typing import Any

from b2bvendas.core.exceptions import ValidationError
from b2bvendas.infrastructure.constants import (
    EMAIL_PRIORITY_HIGH,
    EMAIL_PRIORITY_NORMAL,
)

type TemplateData = Mapping[str, Any]


def format_brl(value: Any) -> str:
    """Format a number as Brazilian currency, e.g. ``R$ 1.234,50``."""
    amount = Decimal(str(value or 0)).quantize(Decimal("0.01"))
    integer, _, cents = f"{amount:,.2f}".partition(".")
    return f"R$ {integer.replace(',', '.')},{cents}"


@dataclass(frozen=True, slots=True)
class EmailTemplate:
    name: str
    description: str
    subject: Callable[[TemplateData], str]
    lines: Callable[[TemplateData], list[str]]
    tags: tuple[str, ...]
    priority: int = EMAIL_PRIORITY_NORMAL
    required: tuple[str, ...] = ()

    def render(self, data: TemplateData) -> tuple[str, str, str]:
        """Return ``(subject, html, text)`` for ``data``."""
        missing = [key for key in self.required if data.get(key) in (None, "")]
        if missing:
            raise ValidationError(
                f"Dados obrigatórios ausentes para o template {self.name}: "
                + ", ".join(missing),
                context={"template": self.name, "missing": missing},
            )
        subject = self.subject(data)
        lines = self.lines(data)
        paragraphs = "".join(f"<p>{escape(line)}</p>" for line in lines)
        html = (
            "<!DOCTYPE html><html><body>"
            f"<h1>{escape(subject)}</h1>{paragraphs}"
            "<hr><p><small>B2B Vendas</small></p>"
            "</body></html>"
        )
        return subject, html, "\n\n".join([subject, *lines])


def _item_lines(data: TemplateData) -> list[str]:
    return [
        f"{item.get('quantity', 0)}x {item.get('name', '')}: "
        f"{format_brl(item.get('total'))}"
        for item in data.get("items", [])
    ]


def _welcome(data: TemplateData) -> list[str]:
    lines = [f"Olá {data['userName']}, sua conta no B2B Vendas foi criada."]
    if company := data.get("companyName"):
        lines.append(f"Empresa: {company}")
    if link := data.get("activationLink"):
        lines.append(f"Ative sua conta em: {link}")
    return lines


def _order_confirmation(data: TemplateData) -> list[str]:
    return [
        f"Olá {data['customerName']}, seu pedido foi confirmado.",
        *_item_lines(data),
        f"Subtotal: {format_brl(data.get('subtotal'))}",
        f"Desconto: {format_brl(data.get('discount'))}",
        f"Frete: {format_brl(data.get('shipping'))}",
        f"Total: {format_brl(data.get('total'))}",
    ]


def _order_status_update(data: TemplateData) -> list[str]:
    lines = [
        f"Olá {data['customerName']}, o status do seu pedido mudou.",
        f"De: {data.get('oldStatus', '-')} para: {data['newStatus']}",
    ]
    if message := data.get("statusMessage"):
        lines.append(message)
    if tracking := data.get("trackingCode"):
        lines.append(f"Código de rastreio: {tracking}")
    return lines


def _order_shipped(data: TemplateData) -> list[str]:
    lines = [f"Olá {data['customerName']}, seu pedido está a caminho."]
    if tracking := data.get("trackingCode"):
        lines.append(f"Código de rastreio: {tracking}")
    if carrier := data.get("carrier"):
        lines.append(f"Transportadora: {carrier}")
    return lines


def _order_delivered(data: TemplateData) -> list[str]:
    return [f"Olá {data['customerName']}, seu pedido foi entregue."]


def _password_reset(data: TemplateData) -> list[str]:
    return [
        f"Olá {data['userName']}, recebemos um pedido de redefinição de senha.",
        f"Redefina sua senha em: {data['resetLink']}",
        "Se você não fez este pedido, ignore esta mensagem.",
    ]


def _low_stock_alert(data: TemplateData) -> list[str]:
    lines = [f"Olá {data['supplierName']}, alguns produtos estão com estoque baixo."]
    lines.extend(
        f"{product.get('name', '')} ({product.get('sku', '')}): "
        f"{product.get('currentStock', 0)} em estoque, "
        f"mínimo {product.get('minStock', 0)}"
        for product in data.get("products", [])
    )
    return lines


TEMPLATES: dict[str, EmailTemplate] = {
    template.name: template
    for template in (
        EmailTemplate(
            name="welcome",
            description="Boas-vindas a novos usuários",
            subject=lambda _: "Bem-vindo ao B2B Vendas!",
            lines=_welcome,
            tags=("welcome", "onboarding"),
            required=("userName",),
        ),
        EmailTemplate(
            name="order-confirmation",
            description="Confirmação de pedido",
            subject=lambda d: f"Pedido #{d['orderNumber']} Confirmado",
            lines=_order_confirmation,
            tags=("order", "confirmation"),
            priority=EMAIL_PRIORITY_HIGH,
            required=("orderNumber", "customerName"),
        ),
        EmailTemplate(
            name="order-status-update",
            description="Atualização de status do pedido",
            subject=lambda d: f"Status do Pedido #{d['orderNumber']} Atualizado",
            lines=_order_status_update,
            tags=("order", "status-update"),
            priority=EMAIL_PRIORITY_HIGH,
            required=("orderNumber", "customerName", "newStatus"),
        ),
        EmailTemplate(
            name="order-shipped",
            description="Pedido enviado",
            subject=lambda d: f"Pedido #{d['orderNumber']} Enviado",
            lines=_order_shipped,
            tags=("order", "shipped"),
            priority=EMAIL_PRIORITY_HIGH,
            required=("orderNumber", "customerName"),
        ),
        EmailTemplate(
            name="order-delivered",
            description="Pedido entregue",
            subject=lambda d: f"Pedido #{d['orderNumber']} Entregue",
            lines=_order_delivered,
            tags=("order", "delivered"),
            priority=EMAIL_PRIORITY_HIGH,
            required=("orderNumber", "customerName"),
        ),
        EmailTemplate(
            name="password-reset",
            description="Redefinição de senha",
            subject=lambda _: "Redefinição de Senha - B2B Vendas",
            lines=_password_reset,
            tags=("security", "password-reset"),
            priority=EMAIL_PRIORITY_HIGH,
            required=("userName", "resetLink"),
        ),
        EmailTemplate(
            name="low-stock-alert",
            description="Alerta de estoque baixo",
            subject=lambda d: (
                f"Alerta: {len(d.get('products', []))} Produto(s) com Estoque Baixo"
            ),
            lines=_low_stock_alert,
            tags=("alert", "low-stock", "inventory"),
            required=("supplierName",),
        ),
    )
}


def get_template(name: str) -> EmailTemplate:
    try:
        return TEMPLATES[name]
    except KeyError as e:
        raise ValidationError(
            f'Template de email "{name}" não encontrado', context={"template": name}
        ) from e
