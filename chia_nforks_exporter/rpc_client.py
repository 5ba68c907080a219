#!/usr/bin/env python3
"""
RPC Client
Mutual-TLS JSON-RPC access to the full node, wallet, farmer and harvester services
"""

import ssl
import time
import socket
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter

from .exceptions import (
    ConfigError,
    ConnectivityError,
    DecodeError,
    RpcResponseError,
    RpcTimeoutError,
    TlsError,
)
from .models import CoinProfile

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 5.0
DEFAULT_HANDSHAKE_TIMEOUT = 10.0
DEFAULT_IDLE_TIMEOUT = 90.0
DEFAULT_POOL_SIZE = 10

# Chia RPC handlers expect a JSON object even when they take no arguments
EMPTY_BODY = {"": ""}


def load_client_certificate(cert_path: str, key_path: str) -> None:
    """Fail fast on an unreadable or mismatched cert/key pair"""
    try:
        context = ssl.create_default_context()
        context.load_cert_chain(cert_path, key_path)
    except (OSError, ssl.SSLError) as e:
        raise ConfigError(f"cannot load client certificate {cert_path} / {key_path}: {e}") from e


class RpcTransport:
    """Pooled mutual-TLS session shared by one coin's four endpoints"""

    def __init__(self, cert_path: Optional[str] = None, key_path: Optional[str] = None,
                 verify_server_cert: bool = False, ca_cert_path: Optional[str] = None,
                 pool_size: int = DEFAULT_POOL_SIZE, idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.idle_timeout = idle_timeout
        self.session = session or self._build_session(
            cert_path, key_path, verify_server_cert, ca_cert_path, pool_size
        )
        self._last_used: Optional[float] = None
        self._lock = threading.Lock()

    @classmethod
    def from_profile(cls, profile: CoinProfile, pool_size: int = DEFAULT_POOL_SIZE,
                     idle_timeout: float = DEFAULT_IDLE_TIMEOUT) -> "RpcTransport":
        if profile.cert_path and profile.key_path:
            load_client_certificate(profile.cert_path, profile.key_path)
        return cls(
            cert_path=profile.cert_path,
            key_path=profile.key_path,
            verify_server_cert=profile.verify_server_cert,
            ca_cert_path=profile.ca_cert_path,
            pool_size=pool_size,
            idle_timeout=idle_timeout,
        )

    @staticmethod
    def _build_session(cert_path, key_path, verify_server_cert, ca_cert_path, pool_size) -> requests.Session:
        session = requests.Session()
        if cert_path and key_path:
            session.cert = (cert_path, key_path)
        if verify_server_cert:
            session.verify = ca_cert_path or True
        else:
            session.verify = False
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        adapter = HTTPAdapter(pool_connections=4, pool_maxsize=pool_size, max_retries=0)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        session.headers.update({
            'User-Agent': 'chia-exporter-nforks',
            'Connection': 'keep-alive'
        })
        return session

    def _expire_idle_connections(self) -> None:
        with self._lock:
            now = time.monotonic()
            if self._last_used is not None and now - self._last_used > self.idle_timeout:
                logger.debug(f"Dropping connections idle for {now - self._last_used:.1f}s")
                self.session.close()
            self._last_used = now

    def post(self, url: str, body: Dict[str, Any], timeout) -> requests.Response:
        """Send the request; the body is left unread for the caller to stream"""
        self._expire_idle_connections()
        return self.session.post(url, json=body, timeout=timeout, stream=True)

    def close(self) -> None:
        self.session.close()


class RpcClient:
    """Queries one RPC service (one base URL) over a shared transport"""

    def __init__(self, transport: RpcTransport, base_url: str, name: str,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 handshake_timeout: float = DEFAULT_HANDSHAKE_TIMEOUT):
        self.transport = transport
        self.base_url = base_url.rstrip("/")
        self.name = name
        self.timeout = timeout
        self.handshake_timeout = handshake_timeout

    def query(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST {base}/{method} and return the decoded JSON object"""
        url = f"{self.base_url}/{method}"
        body = params if params else dict(EMPTY_BODY)
        deadline = time.monotonic() + self.timeout

        try:
            response = self.transport.post(url, body, timeout=(self.handshake_timeout, self.timeout))
        except requests.exceptions.SSLError as e:
            raise TlsError(self.base_url, method, str(e)) from e
        except requests.exceptions.Timeout as e:
            raise RpcTimeoutError(self.base_url, method, str(e)) from e
        except requests.exceptions.RequestException as e:
            raise ConnectivityError(self.base_url, method, str(e)) from e

        try:
            self._read_body(response, method, deadline)
        finally:
            response.close()

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(
                self.base_url, method,
                f"non-JSON response (HTTP {response.status_code}): {e}",
                body=response.text[:200]
            ) from e

        if not isinstance(payload, dict):
            raise DecodeError(self.base_url, method, f"expected a JSON object, got {type(payload).__name__}")

        if payload.get("success") is False:
            raise RpcResponseError(self.base_url, method, str(payload.get("error") or "request failed"))

        logger.debug(f"{self.name} {method} -> HTTP {response.status_code}")
        return payload

    def _read_body(self, response: requests.Response, method: str, deadline: float) -> bytes:
        """
        Read the streamed body before the request deadline.

        The socket read timeout only limits each read, so a server trickling
        bytes could hold the request open indefinitely. A timer shuts the
        socket down once the deadline passes, which ends any blocked read.
        """
        expired = threading.Event()

        def cut_connection():
            expired.set()
            sock = getattr(getattr(response.raw, "connection", None), "sock", None)
            if not isinstance(sock, socket.socket):
                return
            try:
                # SSLSocket.shutdown would unwrap TLS under the reading thread
                socket.socket.shutdown(sock, socket.SHUT_RDWR)
            except OSError as e:
                logger.debug(f"{self.name} {method}: socket already closed at deadline: {e}")

        watchdog = threading.Timer(max(deadline - time.monotonic(), 0.0), cut_connection)
        watchdog.daemon = True
        watchdog.start()
        try:
            content = response.content
        except requests.exceptions.RequestException as e:
            if expired.is_set():
                raise RpcTimeoutError(self.base_url, method, f"no complete response within {self.timeout}s") from e
            raise ConnectivityError(self.base_url, method, f"response body interrupted: {e}") from e
        finally:
            watchdog.cancel()

        if expired.is_set() or time.monotonic() > deadline:
            raise RpcTimeoutError(self.base_url, method, f"no complete response within {self.timeout}s")
        return content

    def __repr__(self) -> str:
        return f"RpcClient({self.name}, {self.base_url})"


@dataclass(frozen=True)
class CoinClients:
    """The four service clients of one coin"""
    full_node: RpcClient
    wallet: RpcClient
    farmer: RpcClient
    harvester: RpcClient
    transport: Optional[RpcTransport] = None

    @classmethod
    def from_profile(cls, profile: CoinProfile, transport: RpcTransport,
                     timeout: float = DEFAULT_REQUEST_TIMEOUT,
                     handshake_timeout: float = DEFAULT_HANDSHAKE_TIMEOUT) -> "CoinClients":
        def client(url: str, name: str) -> RpcClient:
            return RpcClient(transport, url, name, timeout=timeout, handshake_timeout=handshake_timeout)

        return cls(
            full_node=client(profile.full_node_url, "full_node"),
            wallet=client(profile.wallet_url, "wallet"),
            farmer=client(profile.farmer_url, "farmer"),
            harvester=client(profile.harvester_url, "harvester"),
            transport=transport,
        )

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()
