"""
Shared test fixtures for hopscp tests.

This module provides common fixtures used across test modules:
- Host keys the fake servers present
- Target and proxy endpoints
- A transfer configuration
"""

from unittest.mock import Mock

import paramiko
import pytest
from fakes import KEY_FINGERPRINTS, KEYS_DIR, read_key

from hopscp.config_manager import Direction, EndpointConfig, TransferConfig

# ============================================================================
# KEY AND ENDPOINT FIXTURES
# ============================================================================


@pytest.fixture(scope="session")
def target_host_key():
    """Key the fake target server presents (RSA)."""
    return paramiko.RSAKey.from_private_key_file(str(KEYS_DIR / "target_rsa"))


@pytest.fixture(scope="session")
def proxy_host_key():
    """Key the fake proxy server presents (ECDSA)."""
    return paramiko.ECDSAKey.from_private_key_file(str(KEYS_DIR / "proxy_ecdsa"))


@pytest.fixture
def target_endpoint():
    """Target endpoint pinned to the target_rsa host key."""
    return EndpointConfig(
        name="target",
        host="10.0.0.5",
        port=22,
        user="deploy",
        key_material=read_key("target_ed25519"),
        fingerprint=KEY_FINGERPRINTS["target_rsa"],
    )


@pytest.fixture
def proxy_endpoint():
    """Proxy endpoint pinned to the proxy_ecdsa host key."""
    return EndpointConfig(
        name="proxy",
        host="bastion.example.com",
        port=2222,
        user="jump",
        key_material=read_key("proxy_ecdsa"),
        fingerprint=KEY_FINGERPRINTS["proxy_ecdsa"],
    )


# ============================================================================
# TRANSFER FIXTURES
# ============================================================================


@pytest.fixture
def transfer_config(target_endpoint):
    """Upload of two files, no proxy."""
    return TransferConfig(
        action_timeout=30.0,
        dial_timeout=5.0,
        direction=Direction.UPLOAD,
        target=target_endpoint,
        proxy=None,
        sources=("/a/b/x.txt", "/c/y.txt"),
        destination="/out",
    )


@pytest.fixture
def call_log():
    """Shared ordered record of fake client connects and closes."""
    return []


@pytest.fixture
def recording_copier():
    """FileCopier double; orchestration tests live beside the module."""
    copier = Mock(spec=["copy_to", "copy_from"])
    copier.copy_to.return_value = 10
    copier.copy_from.return_value = 10
    return copier
