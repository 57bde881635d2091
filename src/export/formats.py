"""XML and TXT renderers for exported orders."""

from datetime import datetime
from xml.sax.saxutils import escape

from src.export.order import Order


SUPPORTED_FORMATS = ("xml", "txt")

SEPARATOR = "=" * 50

# Quotes are escaped too so values are safe inside attributes
XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_xml(text: str) -> str:
    return escape(text, XML_ENTITIES)


def format_money(value: float) -> str:
    return f"{value:.2f}"


def format_date(value: str) -> str:
    """Render an ISO timestamp as dd/mm/YYYY HH:MM:SS, or return it unchanged."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return value
    return parsed.strftime("%d/%m/%Y %H:%M:%S")


def padded_number(order: Order) -> str:
    return str(order.number).zfill(6)


def generate_xml(order: Order) -> str:
    """Render an order as a <pedido> XML document."""
    items_xml = "".join(
        f"""
    <item>
      <codigo>{escape_xml(item.code)}</codigo>
      <descricao>{escape_xml(item.description)}</descricao>
      <quantidade>{item.quantity:g}</quantidade>
      <valorUnitario>{format_money(item.unit_price)}</valorUnitario>
      <total>{format_money(item.total)}</total>
    </item>"""
        for item in order.items
    )

    return f"""<?xml version="1.0" encoding="UTF-8"?>
<pedido>
  <numero>{order.number}</numero>
  <data>{escape_xml(order.date)}</data>
  <vendedor>
    <id>{escape_xml(order.vendor_id)}</id>
    <nome>{escape_xml(order.vendor_name)}</nome>
  </vendedor>
  <itens>{items_xml}
  </itens>
  <total>{format_money(order.total)}</total>
</pedido>"""


def generate_txt(order: Order) -> str:
    """Render an order as a plain text sales receipt."""
    lines = [
        SEPARATOR,
        f"PEDIDO DE VENDA Nº {padded_number(order)}",
        SEPARATOR,
        f"Data: {format_date(order.date)}",
        f"Vendedor: {order.vendor_name}",
        SEPARATOR,
        "ITENS DO PEDIDO:",
        SEPARATOR,
        "",
    ]

    for index, item in enumerate(order.items, start=1):
        lines.append(f"{index}. {item.code} - {item.description}")
        lines.append(
            f"   Qtd: {item.quantity:g} x R$ {format_money(item.unit_price)}"
            f" = R$ {format_money(item.total)}"
        )
        lines.append("")

    lines.append(SEPARATOR)
    lines.append(f"TOTAL DO PEDIDO: R$ {format_money(order.total)}")
    lines.append(SEPARATOR)

    return "\n".join(lines)


def render(order: Order, fmt: str) -> str:
    """
    Render an order in the given export format.

    Raises:
        ValueError: If the format is not supported
    """
    if fmt == "xml":
        return generate_xml(order)
    if fmt == "txt":
        return generate_txt(order)
    raise ValueError(f"Formato de exportação não suportado: {fmt}")


def build_filename(order: Order, fmt: str) -> str:
    """
    Export file name, e.g. pedido_000123.xml.

    Raises:
        ValueError: If the format is not supported
    """
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Formato de exportação não suportado: {fmt}")
    return f"pedido_{padded_number(order)}.{fmt}"
