"""HTTP module for Pedido FTP.

This module exposes the FTP service over HTTP:
- create_app: Flask application factory
- schema: Request validation into typed requests
- UploadFunctionClient: requests-based client for a deployed function
"""
