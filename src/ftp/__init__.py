"""FTP operations module for Pedido FTP.

This module handles all FTP-related functionality:
- FtpReply: Control channel reply parsing (EPSV/PASV tuples included)
- ControlSession / DataSession: Scoped control and data connections
- FtpUploadService: Connectivity test and single-file upload
- Exceptions: FTP-specific error types
"""
