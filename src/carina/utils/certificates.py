"""Client certificate helpers."""

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

KEY_SIZE = 2048


def generate_key_and_csr(common_name: str) -> tuple[str, str]:
    """Generate an RSA private key and a certificate signing request for it.

    Args:
        common_name: Subject common name, usually the user name

    Returns:
        (private key PEM, CSR PEM)
    """
    key = rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)

    private_key = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")

    csr = (
        x509.CertificateSigningRequestBuilder()
        .subject_name(
            x509.Name(
                [
                    x509.NameAttribute(NameOID.COMMON_NAME, common_name),
                    x509.NameAttribute(NameOID.ORGANIZATION_NAME, "system:masters"),
                ]
            )
        )
        .sign(key, hashes.SHA256())
    )

    return private_key, csr.public_bytes(serialization.Encoding.PEM).decode("utf-8")
