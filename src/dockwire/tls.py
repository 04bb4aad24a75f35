"""TLS context construction for TCP connections to the daemon."""

from __future__ import annotations

import ssl

import certifi

from .config import TlsMaterial
from .errors import TlsConfigError
from .logger import BoundLogger, create_logger


def build_ssl_context(
    material: TlsMaterial | None = None,
    *,
    logger: BoundLogger | None = None,
) -> ssl.SSLContext:
    """Build a client context trusting system roots, certifi and any user CA.

    When a client certificate and key are supplied they are presented during
    the handshake. Nothing here touches the network.
    """
    log = (logger or create_logger()).child("tls")
    material = material or TlsMaterial()

    if bool(material.client_cert) != bool(material.client_key):
        missing = "private key" if material.client_cert else "client certificate"
        raise TlsConfigError(
            f"Client TLS identity is incomplete: missing {missing}",
            context=material,
        )

    context = ssl.create_default_context(purpose=ssl.Purpose.SERVER_AUTH)
    context.set_alpn_protocols(["http/1.1"])
    try:
        context.load_verify_locations(cafile=certifi.where())
    except (OSError, ssl.SSLError) as exc:
        raise TlsConfigError(f"Cannot load baseline root store: {exc}") from exc

    if material.ca_cert:
        try:
            context.load_verify_locations(cafile=material.ca_cert)
        except (OSError, ssl.SSLError) as exc:
            raise TlsConfigError(f"Cannot load CA bundle {material.ca_cert}: {exc}", context=material) from exc
        log.debug("Trusting CA bundle %s", material.ca_cert)

    if material.client_cert and material.client_key:
        try:
            context.load_cert_chain(certfile=material.client_cert, keyfile=material.client_key)
        except (OSError, ssl.SSLError) as exc:
            raise TlsConfigError(
                f"Cannot load client certificate {material.client_cert} with key {material.client_key}: {exc}",
                context=material,
            ) from exc
        log.debug("Presenting client certificate %s", material.client_cert)

    log.debug("Built TLS context (client identity: %s)", material.has_client_identity)
    return context


__all__ = ["build_ssl_context"]
