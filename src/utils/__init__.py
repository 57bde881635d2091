"""Utility module for Pedido FTP.

This module provides cross-cutting utilities:
- Logging: Configured logging with PII redaction
- Validators: Input validation for hosts, ports, folders and filenames
"""
