"""SSH transport establishment, direct or through a jump host.

Public API:
    load_private_key: Parse private key material into a paramiko key
    SSHSession: Authenticated SSH connection to one endpoint
    TransportBuilder: Dial the target directly or tunneled through a proxy

A tunneled target session runs its own handshake over a direct-tcpip
channel of the proxy session. Host keys are verified independently for
each hop against that hop's own fingerprint.
"""

import io
import logging

import paramiko

from hopscp.config_manager import EndpointConfig
from hopscp.exceptions import (
    AuthenticationError,
    ConnectivityError,
    CredentialError,
    TunnelError,
)

from .host_key import FingerprintPolicy

logger = logging.getLogger(__name__)

# Tried in order; DSA is intentionally absent (removed from paramiko and OpenSSH)
KEY_TYPES: tuple[type[paramiko.PKey], ...] = (
    paramiko.Ed25519Key,
    paramiko.ECDSAKey,
    paramiko.RSAKey,
)


def load_private_key(material: str, endpoint: str = "target") -> paramiko.PKey:
    """Parse private key material (OpenSSH or PEM format).

    Args:
        material: Private key file contents
        endpoint: Endpoint name used in error messages

    Returns:
        paramiko key usable for public key authentication

    Raises:
        CredentialError: Material is empty, encrypted or not a supported key
    """
    if not material or not material.strip():
        raise CredentialError(f"Failed to parse {endpoint} key: key is empty", endpoint)

    errors: list[str] = []
    for key_type in KEY_TYPES:
        try:
            return key_type.from_private_key(io.StringIO(material))
        except paramiko.PasswordRequiredException as e:
            raise CredentialError(
                f"Failed to parse {endpoint} key: encrypted keys are not supported", endpoint
            ) from e
        except (paramiko.SSHException, ValueError) as e:
            errors.append(f"{key_type.__name__}: {e}")

    logger.debug(f"Unparseable {endpoint} key ({'; '.join(errors)})")
    raise CredentialError(
        f"Failed to parse {endpoint} key: not a supported Ed25519, ECDSA or RSA private key",
        endpoint,
    )


class SSHSession:
    """Authenticated SSH connection bound to one endpoint.

    Owns its paramiko client exclusively. A target session tunneled through
    a proxy also owns the proxy session and closes it after itself, so the
    tunnel is never torn down under an active session.
    """

    def __init__(
        self,
        endpoint: EndpointConfig,
        client: paramiko.SSHClient,
        via: "SSHSession | None" = None,
    ):
        self.endpoint = endpoint
        self.client = client
        self.via = via
        self._closed = False

    @property
    def name(self) -> str:
        return self.endpoint.name

    @property
    def transport(self) -> paramiko.Transport:
        """Underlying paramiko transport.

        Raises:
            ConnectivityError: Session is closed or transport went away
        """
        transport = self.client.get_transport()
        if self._closed or transport is None:
            raise ConnectivityError(f"{self.name} session is closed", self.name)
        return transport

    @property
    def is_active(self) -> bool:
        if self._closed:
            return False
        transport = self.client.get_transport()
        return transport is not None and transport.is_active()

    @property
    def tunneled(self) -> bool:
        return self.via is not None

    def open_tunnel(self, host: str, port: int, timeout: float | None = None) -> paramiko.Channel:
        """Ask the remote side to open a TCP connection to host:port.

        The connection originates from this session's host, not from the
        local machine.

        Raises:
            TunnelError: Remote side refused or could not reach the address
        """
        logger.debug(f"Opening tunnel from {self.name} to {host}:{port}")
        try:
            return self.transport.open_channel(
                "direct-tcpip",
                (host, port),
                ("127.0.0.1", 0),
                timeout=timeout,
            )
        except (paramiko.SSHException, OSError, EOFError) as e:
            raise TunnelError(
                f"Failed to dial to target {host}:{port} through {self.name}: {e}", "target"
            ) from e

    def close(self) -> None:
        """Close this session, then the proxy session it runs through."""
        try:
            if not self._closed:
                self._closed = True
                logger.debug(f"Closing {self.name} session")
                self.client.close()
        finally:
            if self.via is not None:
                self.via.close()

    def __enter__(self) -> "SSHSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        route = f" via {self.via.endpoint.address}" if self.via else ""
        return f"<SSHSession {self.name} {self.endpoint.user}@{self.endpoint.address}{route}>"


class TransportBuilder:
    """Build authenticated SSH sessions.

    Example:
        >>> builder = TransportBuilder(dial_timeout=30)
        >>> with builder.connect(target, proxy) as session:
        ...     session.transport.is_active()
    """

    def __init__(self, dial_timeout: float, client_factory=paramiko.SSHClient):
        """Initialize builder.

        Args:
            dial_timeout: Seconds allowed for each dial, banner, auth and channel open
            client_factory: Callable returning a fresh paramiko.SSHClient
        """
        self.dial_timeout = dial_timeout
        self._client_factory = client_factory

    def connect(self, target: EndpointConfig, proxy: EndpointConfig | None = None) -> SSHSession:
        """Connect to target, directly or through proxy.

        Args:
            target: Target endpoint
            proxy: Optional jump host endpoint

        Returns:
            Authenticated session to the target

        Raises:
            CredentialError: A private key could not be parsed
            ConnectivityError: Dial or handshake to a hop failed
            TunnelError: Proxy could not reach the target
            AuthenticationError: A hop rejected the key
            HostKeyMismatchError: A hop presented an unexpected host key
        """
        target_key = load_private_key(target.key_material, target.name)

        if proxy is None:
            return self._handshake(target, target_key)

        proxy_key = load_private_key(proxy.key_material, proxy.name)
        proxy_session = self._handshake(proxy, proxy_key)

        try:
            channel = proxy_session.open_tunnel(target.host, target.port, self.dial_timeout)
            try:
                return self._handshake(target, target_key, sock=channel, via=proxy_session)
            except BaseException:
                channel.close()
                raise
        except BaseException:
            proxy_session.close()
            raise

    def _handshake(
        self,
        endpoint: EndpointConfig,
        pkey: paramiko.PKey,
        sock=None,
        via: SSHSession | None = None,
    ) -> SSHSession:
        """Run SSH handshake, host key check and public key auth.

        Over `sock` when given (a tunnel channel), otherwise paramiko dials
        endpoint.host:port itself.
        """
        client = self._client_factory()
        client.set_missing_host_key_policy(FingerprintPolicy(endpoint.fingerprint, endpoint.name))

        route = f" via {via.name}" if via is not None else ""
        logger.info(f"Connecting to {endpoint.name} {endpoint.user}@{endpoint.address}{route}...")

        try:
            client.connect(
                hostname=endpoint.host,
                port=endpoint.port,
                username=endpoint.user,
                pkey=pkey,
                sock=sock,
                timeout=self.dial_timeout,
                banner_timeout=self.dial_timeout,
                auth_timeout=self.dial_timeout,
                channel_timeout=self.dial_timeout,
                allow_agent=False,
                look_for_keys=False,
            )
        except paramiko.AuthenticationException as e:
            client.close()
            raise AuthenticationError(
                f"Failed to authenticate to {endpoint.name} as {endpoint.user}: {e}",
                endpoint.name,
            ) from e
        except (paramiko.SSHException, OSError, EOFError) as e:
            client.close()
            raise ConnectivityError(
                f"Failed to connect to {endpoint.name} {endpoint.address}: {e}", endpoint.name
            ) from e
        except BaseException:
            # Host key mismatch, deadline or interrupt mid-handshake
            client.close()
            raise

        logger.debug(f"Connected to {endpoint.name}")
        return SSHSession(endpoint, client, via=via)


__all__ = ["KEY_TYPES", "SSHSession", "TransportBuilder", "load_private_key"]
