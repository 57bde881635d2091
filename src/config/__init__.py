"""Configuration module for Pedido FTP.

This module handles application settings and credentials:
- SettingsManager: JSON-based settings persistence
- load_settings: Settings file plus environment overrides
- CredentialManager: Secure FTP password storage via keyring
- Paths: Application data directories
"""
