"""Pedido FTP: order export and FTP delivery service."""

__version__ = "1.0.0"
