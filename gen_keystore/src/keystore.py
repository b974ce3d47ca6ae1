"""Android release keystore generation: key.properties passwords, alias lookup and PKCS#12 output."""
from __future__ import annotations

import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import BestAvailableEncryption, pkcs12
from cryptography.x509.oid import NameOID

from core.command_runner import CommandRunner, SubprocessCommandRunner
from core.config_loader import FILE_LOADERS, load_config_file, lookup_path
from core.pkl import eval_expression
from core.properties import read_properties

# keytool -keyalg RSA -keysize 2048 -validity 36500
KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537
VALIDITY_DAYS = 36500
DEFAULT_DNAME = "CN=Android, OU=Dev, O=Dev, L=Unknown, ST=Unknown, C=CN"
KEY_ALIAS_PATH = "android.template_vars.key_alias"

DNAME_ATTRIBUTES = {
    "CN": NameOID.COMMON_NAME,
    "OU": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "O": NameOID.ORGANIZATION_NAME,
    "L": NameOID.LOCALITY_NAME,
    "ST": NameOID.STATE_OR_PROVINCE_NAME,
    "C": NameOID.COUNTRY_NAME,
    "STREET": NameOID.STREET_ADDRESS,
    "DC": NameOID.DOMAIN_COMPONENT,
    "UID": NameOID.USER_ID,
    "EMAILADDRESS": NameOID.EMAIL_ADDRESS,
}


class KeystoreError(RuntimeError):
    """Raised when the keystore inputs are missing or inconsistent."""


def _split_unescaped(text: str, separator: str) -> List[str]:
    parts: List[str] = []
    current: List[str] = []
    escaped = False
    for char in text:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def parse_dname(dname: str) -> x509.Name:
    """Parse a keytool style distinguished name (``CN=x, OU=y, ...``)."""
    attributes = []
    for part in _split_unescaped(dname, ","):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        oid = DNAME_ATTRIBUTES.get(key.strip().upper())
        if not sep or oid is None:
            raise KeystoreError(f"Unsupported distinguished name component: '{part}'")
        value = value.strip()
        if oid == NameOID.COUNTRY_NAME and len(value) != 2:
            raise KeystoreError(f"Country code must have two letters: '{value}'")
        attributes.append(x509.NameAttribute(oid, value))
    if not attributes:
        raise KeystoreError("Distinguished name is empty")
    return x509.Name(attributes)


def read_passwords(props: Path) -> Tuple[str, str]:
    """Return ``(storePassword, keyPassword)`` from ``key.properties``."""
    if not props.exists():
        raise KeystoreError(
            f"{props} not found.\nCopy key.properties.example to key.properties and fill in passwords."
        )
    values: Dict[str, str] = read_properties(props)
    store_password = values.get("storePassword", "")
    key_password = values.get("keyPassword", "")
    if not store_password:
        raise KeystoreError("storePassword is missing or empty in key.properties")
    if not key_password:
        raise KeystoreError("keyPassword is missing or empty in key.properties")
    return store_password, key_password


def read_key_alias(config: Path, runner: Optional[CommandRunner] = None) -> str:
    """Read ``android.template_vars.key_alias`` from an app config."""
    if config.suffix.lower() == ".pkl":
        alias = eval_expression(runner or SubprocessCommandRunner(), config, KEY_ALIAS_PATH)
    elif config.suffix.lower() in FILE_LOADERS:
        value = lookup_path(load_config_file(config), KEY_ALIAS_PATH)
        alias = value.strip() if isinstance(value, str) else ""
    else:
        raise KeystoreError(f"Unsupported config format: {config}")
    if not alias:
        raise KeystoreError(f"key_alias is empty in {config}")
    return alias


def generate_keystore(
    output: Path,
    alias: str,
    password: str,
    dname: str = DEFAULT_DNAME,
    *,
    now: Optional[datetime.datetime] = None,
) -> None:
    """
    Write a PKCS#12 keystore holding one RSA key and its self-signed certificate.

    The alias becomes the entry's friendly name, which is how keytool and the
    Android Gradle plugin look the key up.
    """
    subject = parse_dname(dname)
    key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    not_before = now or datetime.datetime.now(datetime.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_before + datetime.timedelta(days=VALIDITY_DAYS))
        .sign(key, hashes.SHA256())
    )
    data = pkcs12.serialize_key_and_certificates(
        name=alias.encode("utf-8"),
        key=key,
        cert=certificate,
        cas=None,
        encryption_algorithm=BestAvailableEncryption(password.encode("utf-8")),
    )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
