import ssl

import pytest

from dockwire import TlsConfigError, TlsMaterial, build_ssl_context


def test_context_without_user_material_trusts_baseline_roots() -> None:
    context = build_ssl_context(None)
    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.check_hostname is True
    assert context.cert_store_stats()["x509_ca"] > 0


def test_empty_material_matches_no_material() -> None:
    assert build_ssl_context(TlsMaterial()).cert_store_stats()["x509_ca"] > 0


def test_client_cert_without_key_is_rejected(tmp_path) -> None:
    cert = tmp_path / "cert.pem"
    cert.write_text("placeholder")
    with pytest.raises(TlsConfigError, match="missing private key"):
        build_ssl_context(TlsMaterial(client_cert=str(cert)))


def test_client_key_without_cert_is_rejected(tmp_path) -> None:
    key = tmp_path / "key.pem"
    key.write_text("placeholder")
    with pytest.raises(TlsConfigError, match="missing client certificate"):
        build_ssl_context(TlsMaterial(client_key=str(key)))


def test_malformed_ca_bundle_is_rejected(tmp_path) -> None:
    ca = tmp_path / "ca.pem"
    ca.write_text("-----BEGIN CERTIFICATE-----\nnot base64\n-----END CERTIFICATE-----\n")
    with pytest.raises(TlsConfigError) as excinfo:
        build_ssl_context(TlsMaterial(ca_cert=str(ca)))
    assert isinstance(excinfo.value.__cause__, ssl.SSLError)


def test_missing_ca_bundle_is_rejected(tmp_path) -> None:
    with pytest.raises(TlsConfigError):
        build_ssl_context(TlsMaterial(ca_cert=str(tmp_path / "absent.pem")))


def test_malformed_client_pair_is_rejected(tmp_path) -> None:
    cert = tmp_path / "cert.pem"
    key = tmp_path / "key.pem"
    cert.write_text("garbage")
    key.write_text("garbage")
    with pytest.raises(TlsConfigError, match="Cannot load client certificate"):
        build_ssl_context(TlsMaterial(client_cert=str(cert), client_key=str(key)))


def test_valid_ca_and_client_pair_are_loaded(pki) -> None:
    material = pki.material()
    baseline = build_ssl_context(None).cert_store_stats()["x509_ca"]
    context = build_ssl_context(material)
    assert context.cert_store_stats()["x509_ca"] == baseline + 1


def test_certificate_with_foreign_key_is_rejected(pki) -> None:
    cert, _ = pki.write_identity("alice")
    _, key = pki.write_identity("bob")
    with pytest.raises(TlsConfigError, match="Cannot load client certificate") as excinfo:
        build_ssl_context(TlsMaterial(client_cert=cert, client_key=key))
    assert isinstance(excinfo.value.__cause__, ssl.SSLError)
