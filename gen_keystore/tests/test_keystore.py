import datetime
import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from core.command_runner import CommandResult, CommandRunner
from gen_keystore import cli
from gen_keystore.src.keystore import (
    KeystoreError,
    VALIDITY_DAYS,
    generate_keystore,
    parse_dname,
    read_key_alias,
    read_passwords,
)


class ExpressionRunner(CommandRunner):
    def __init__(self, stdout):
        self.stdout = stdout
        self.calls = []

    def run(self, command, **kwargs):
        self.calls.append(list(command))
        return CommandResult(command=command, returncode=0, stdout=self.stdout, stderr="")


class TestInputs(unittest.TestCase):
    def test_parse_dname(self):
        name = parse_dname("CN=Android, OU=Dev, O=Acme\\, Inc., L=Unknown, ST=Unknown, C=CN")
        self.assertEqual(name.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value, "Android")
        self.assertEqual(name.get_attributes_for_oid(NameOID.ORGANIZATION_NAME)[0].value, "Acme, Inc.")
        self.assertEqual(name.get_attributes_for_oid(NameOID.COUNTRY_NAME)[0].value, "CN")

    def test_parse_dname_rejects_unknown_component(self):
        with self.assertRaises(KeystoreError):
            parse_dname("CN=Android, XX=nope")
        with self.assertRaises(KeystoreError):
            parse_dname("CN=Android, C=China")

    def test_read_passwords(self):
        with tempfile.TemporaryDirectory() as tmp:
            props = Path(tmp) / "key.properties"
            props.write_text("storePassword=s3cret\nkeyPassword=s3cret\nkeyAlias=upload\n", encoding="utf-8")
            self.assertEqual(read_passwords(props), ("s3cret", "s3cret"))

    def test_read_passwords_requires_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            props = Path(tmp) / "key.properties"
            with self.assertRaises(KeystoreError) as ctx:
                read_passwords(props)
            self.assertIn("key.properties.example", str(ctx.exception))

            props.write_text("storePassword=\nkeyPassword=x\n", encoding="utf-8")
            with self.assertRaises(KeystoreError) as ctx:
                read_passwords(props)
            self.assertIn("storePassword is missing or empty", str(ctx.exception))

    def test_read_alias_from_toml(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = Path(tmp) / "app.toml"
            config.write_text('[android.template_vars]\nkey_alias = "upload"\n', encoding="utf-8")
            self.assertEqual(read_key_alias(config), "upload")

    def test_read_alias_from_pkl(self):
        runner = ExpressionRunner('"upload"\n')
        self.assertEqual(read_key_alias(Path("app.pkl"), runner), "upload")
        self.assertEqual(
            runner.calls[0],
            ["pkl", "eval", "--expression", "android.template_vars.key_alias", "app.pkl"],
        )

    def test_empty_alias(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = Path(tmp) / "app.json"
            config.write_text('{"android": {}}', encoding="utf-8")
            with self.assertRaises(KeystoreError):
                read_key_alias(config)


class TestGenerate(unittest.TestCase):
    def test_keystore_round_trips_with_password(self):
        now = datetime.datetime(2026, 1, 1, tzinfo=datetime.timezone.utc)
        with tempfile.TemporaryDirectory() as tmp:
            output = Path(tmp) / "android" / "keystore.jks"
            generate_keystore(output, "upload", "s3cret", now=now)

            store = pkcs12.load_pkcs12(output.read_bytes(), b"s3cret")

        self.assertEqual(store.key.key_size, 2048)
        self.assertEqual(store.cert.friendly_name, b"upload")
        cert = store.cert.certificate
        self.assertEqual(cert.subject, cert.issuer)
        self.assertEqual(
            cert.not_valid_after_utc - cert.not_valid_before_utc,
            datetime.timedelta(days=VALIDITY_DAYS),
        )

    def test_wrong_password_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            output = Path(tmp) / "keystore.jks"
            generate_keystore(output, "upload", "s3cret")
            with self.assertRaises(ValueError):
                pkcs12.load_pkcs12(output.read_bytes(), b"other")


class TestCli(unittest.TestCase):
    def _props(self, directory: Path, store="s3cret", key="s3cret") -> Path:
        props = directory / "key.properties"
        props.write_text(f"storePassword={store}\nkeyPassword={key}\n", encoding="utf-8")
        return props

    def _run(self, *argv):
        out = io.StringIO()
        err = io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            ret = cli.main(list(argv))
        return ret, out.getvalue(), err.getvalue()

    def test_generates_keystore(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            output = root / "keystore.jks"
            ret, out, _ = self._run("--props", str(self._props(root)), "--output", str(output), "--alias", "upload")
            self.assertEqual(ret, 0)
            self.assertIn("Keystore generated at", out)
            self.assertIsNotNone(pkcs12.load_pkcs12(output.read_bytes(), b"s3cret").key)

    def test_existing_keystore_kept_without_force(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            output = root / "keystore.jks"
            output.write_bytes(b"existing")
            args = ["--props", str(self._props(root)), "--output", str(output), "--alias", "upload"]

            ret, out, _ = self._run(*args)
            self.assertEqual(ret, 0)
            self.assertIn("Use --force to overwrite", out)
            self.assertEqual(output.read_bytes(), b"existing")

            ret, _, _ = self._run(*args, "--force")
            self.assertEqual(ret, 0)
            self.assertNotEqual(output.read_bytes(), b"existing")

    def test_alias_from_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            config = root / "app.yaml"
            config.write_text("android:\n  template_vars:\n    key_alias: release\n", encoding="utf-8")
            output = root / "keystore.jks"
            ret, _, _ = self._run("--props", str(self._props(root)), "--output", str(output), "--config", str(config))
            self.assertEqual(ret, 0)
            store = pkcs12.load_pkcs12(output.read_bytes(), b"s3cret")
            self.assertEqual(store.cert.friendly_name, b"release")

    def test_differing_passwords_use_store_password(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            output = root / "keystore.jks"
            ret, _, err = self._run(
                "--props", str(self._props(root, key="other")), "--output", str(output), "--alias", "upload"
            )
            self.assertEqual(ret, 0)
            self.assertIn("[WARN] storePassword and keyPassword differ", err)
            self.assertIsNotNone(pkcs12.load_pkcs12(output.read_bytes(), b"s3cret").key)


if __name__ == "__main__":
    unittest.main()
