"""Order export over FTP for Pedido FTP.

Renders an order, hands it to the FTP upload service and records the
delivery in the upload history.
"""

import logging
import sqlite3
from typing import Optional

from src.export.formats import build_filename, render
from src.export.order import Order
from src.ftp.connection import ConnectionConfig
from src.ftp.uploader import FtpUploadService, TransferRequest, UploadResult
from src.history.store import FTPHistoryEntry, FTPHistoryStore

logger = logging.getLogger("pedido_ftp.exporter")


class OrderExporter:
    """Delivers exported orders to an FTP server."""

    def __init__(
        self,
        service: FtpUploadService,
        history: Optional[FTPHistoryStore] = None
    ):
        """
        Initialize the exporter.

        Args:
            service: FTP upload service
            history: Optional store for successful deliveries
        """
        self._service = service
        self._history = history

    def export_to_ftp(
        self,
        order: Order,
        fmt: str,
        config: ConnectionConfig
    ) -> UploadResult:
        """
        Render the order and upload it.

        Args:
            order: Order to export
            fmt: "xml" or "txt"
            config: Target FTP server

        Returns:
            UploadResult from the upload service

        Raises:
            ValueError: If the format is not supported
        """
        filename = build_filename(order, fmt)
        content = render(order, fmt)

        result = self._service.execute(
            config,
            TransferRequest(filename=filename, payload=content.encode("utf-8"))
        )

        if result.success:
            self._record(order, fmt, filename, config)

        return result

    def _record(
        self,
        order: Order,
        fmt: str,
        filename: str,
        config: ConnectionConfig
    ) -> None:
        """Store a history entry; failures never undo a delivered upload."""
        if self._history is None:
            return

        entry = FTPHistoryEntry(
            order_number=order.number,
            filename=filename,
            ftp_host=config.host,
            ftp_folder=config.remote_folder,
            file_format=fmt,
            order_total=round(order.total, 2),
            items_count=order.items_count,
        )

        try:
            self._history.add_entry(entry)
        except sqlite3.Error as e:
            logger.error(f"Could not record FTP history for {filename}: {e}")
