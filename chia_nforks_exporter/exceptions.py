"""
Custom exceptions for chia-exporter-nforks
"""

from typing import Optional


class ExporterException(Exception):
    """Base exception for the exporter"""
    pass


class ConfigError(ExporterException):
    """Configuration could not be read, parsed or validated"""
    pass


class RpcError(ExporterException):
    """A single RPC query failed"""

    def __init__(self, endpoint: str, method: str, message: str):
        self.endpoint = endpoint
        self.method = method
        super().__init__(f"RPC error for {endpoint} calling {method}: {message}")


class ConnectivityError(RpcError):
    """Endpoint could not be reached"""
    pass


class TlsError(ConnectivityError):
    """TLS handshake or certificate failure"""
    pass


class RpcTimeoutError(RpcError):
    """Endpoint did not answer within the request timeout"""
    pass


class DecodeError(RpcError):
    """Response body was malformed or had an unexpected shape"""

    def __init__(self, endpoint: str, method: str, message: str, body: Optional[str] = None):
        self.body = body
        super().__init__(endpoint, method, message)


class RpcResponseError(DecodeError):
    """Node answered with success=false"""
    pass
