"""Command line interface for gen_keystore."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from core.console import Console

from .src.keystore import DEFAULT_DNAME, generate_keystore, read_key_alias, read_passwords


def main(args: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="gen_keystore", description="Generate Android release keystore")
    parser.add_argument("--props", default="platforms/android/key.properties", help="Path to key.properties")
    parser.add_argument("--output", default="platforms/android/keystore.jks", help="Output path for the keystore")
    parser.add_argument("--alias", help="Key alias; read from the app config when omitted")
    parser.add_argument("--config", default="app.toml", help="App config holding android.template_vars.key_alias")
    parser.add_argument("--dname", default=DEFAULT_DNAME, help="Distinguished name for the certificate")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing keystore")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")

    parsed_args = parser.parse_args(sys.argv[1:] if args is None else args)
    console = Console.from_flags(quiet=parsed_args.quiet)
    output = Path(parsed_args.output)

    try:
        store_password, key_password = read_passwords(Path(parsed_args.props))
        if store_password != key_password:
            console.warning(
                "storePassword and keyPassword differ; PKCS#12 keystores use a single password, using storePassword"
            )
        alias = parsed_args.alias or read_key_alias(Path(parsed_args.config))

        if output.exists() and not parsed_args.force:
            console.info(f"Keystore already exists at {output}. Skipping. Use --force to overwrite.")
            return 0

        generate_keystore(output, alias, store_password, parsed_args.dname)
    except (OSError, RuntimeError, TypeError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    console.info(f"Keystore generated at: {output}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
