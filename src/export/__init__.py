"""Order export module for Pedido FTP.

This module turns orders into files and delivers them:
- Order / OrderItem: Export input
- formats: XML and TXT renderers, export file names
- OrderExporter: Render, upload over FTP and record history
"""
