"""Upload history module for Pedido FTP.

Records one entry per order file successfully delivered over FTP.
"""
