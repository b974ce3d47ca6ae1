"""App configuration model for platform generation."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from core.command_runner import CommandRunner, SubprocessCommandRunner
from core.config_loader import FILE_LOADERS, load_config_file, supported_suffixes
from core.pkl import eval_json
from core.template import expand_env_vars


@dataclass
class PubspecConfig:
    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None


@dataclass
class FlutterCreateConfig:
    platforms: Optional[List[str]] = None
    android_language: Optional[str] = None


@dataclass
class AndroidTemplateVars:
    namespace: Optional[str] = None
    application_id: Optional[str] = None
    output_file_name: Optional[str] = None
    key_alias: Optional[str] = None
    store_file: Optional[str] = None


@dataclass
class AndroidConfig:
    distribution_url: Optional[str] = None
    template_vars: AndroidTemplateVars = field(default_factory=AndroidTemplateVars)


@dataclass
class IosConfig:
    pass


@dataclass
class WindowsConfig:
    enabled: bool = False
    window_width: Optional[int] = None
    window_height: Optional[int] = None


@dataclass
class AppConfig:
    project_name: str
    android: AndroidConfig
    org: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    pubspec: Optional[PubspecConfig] = None
    platforms_dir: Optional[str] = None
    create: FlutterCreateConfig = field(default_factory=FlutterCreateConfig)
    ios: Optional[IosConfig] = None
    windows: Optional[WindowsConfig] = None


def _section(data: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise TypeError(f"'{key}' must be a table/mapping")
    return value


def _opt_str(data: Mapping[str, Any], key: str, *, context: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{context}{key} must be a string")
    return value


def _opt_int(data: Mapping[str, Any], key: str, *, context: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise TypeError(f"{context}{key} must be a non-negative integer")
    return value


def parse_config(data: Mapping[str, Any]) -> AppConfig:
    """Build an :class:`AppConfig` from a decoded mapping."""

    project_name = data.get("project_name")
    if not isinstance(project_name, str) or not project_name.strip():
        raise ValueError("project_name is required")

    android_data = _section(data, "android")
    if android_data is None:
        raise ValueError("android section is required")
    wrapper = _section(android_data, "gradle_wrapper") or {}
    template_vars = _section(android_data, "template_vars") or {}
    ctx = "android.template_vars."
    android = AndroidConfig(
        distribution_url=_opt_str(wrapper, "distribution_url", context="android.gradle_wrapper."),
        template_vars=AndroidTemplateVars(
            namespace=_opt_str(template_vars, "namespace", context=ctx),
            application_id=_opt_str(template_vars, "application_id", context=ctx),
            output_file_name=_opt_str(template_vars, "output_file_name", context=ctx),
            key_alias=_opt_str(template_vars, "key_alias", context=ctx),
            store_file=_opt_str(template_vars, "store_file", context=ctx),
        ),
    )

    pubspec = None
    pubspec_data = _section(data, "pubspec")
    if pubspec_data is not None:
        pubspec = PubspecConfig(
            **{key: _opt_str(pubspec_data, key, context="pubspec.") for key in PubspecConfig.__dataclass_fields__}
        )

    create_data = _section(data, "create") or {}
    platforms = create_data.get("platforms")
    if platforms is not None and (
        not isinstance(platforms, list) or not all(isinstance(item, str) for item in platforms)
    ):
        raise TypeError("create.platforms must be a list of strings")

    windows = None
    windows_data = _section(data, "windows")
    if windows_data is not None:
        windows = WindowsConfig(
            enabled=bool(windows_data.get("enabled", False)),
            window_width=_opt_int(windows_data, "window_width", context="windows."),
            window_height=_opt_int(windows_data, "window_height", context="windows."),
        )

    return AppConfig(
        project_name=project_name,
        android=android,
        org=_opt_str(data, "org", context=""),
        description=_opt_str(data, "description", context=""),
        version=_opt_str(data, "version", context=""),
        pubspec=pubspec,
        platforms_dir=_opt_str(data, "platforms_dir", context=""),
        create=FlutterCreateConfig(
            platforms=list(platforms) if platforms is not None else None,
            android_language=_opt_str(create_data, "android_language", context="create."),
        ),
        ios=IosConfig() if _section(data, "ios") is not None else None,
        windows=windows,
    )


def load_config(path: Path, runner: Optional[CommandRunner] = None) -> AppConfig:
    """Load an app config from TOML, JSON, YAML or Pkl."""

    suffix = path.suffix.lower()
    if suffix == ".pkl":
        data = eval_json(runner or SubprocessCommandRunner(), path)
    elif suffix in FILE_LOADERS:
        data = load_config_file(path)
    else:
        raise ValueError(f"Unsupported config format: {path}. Supported: .pkl, {supported_suffixes()}")
    return parse_config(data)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def expand_config(cfg: AppConfig, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Expand environment references in place and derive Android identifiers."""

    cfg.project_name = expand_env_vars(cfg.project_name, environ)
    if cfg.org is not None:
        cfg.org = expand_env_vars(cfg.org, environ)
    if cfg.description is not None:
        cfg.description = expand_env_vars(cfg.description, environ)
    if cfg.platforms_dir is not None:
        cfg.platforms_dir = expand_env_vars(cfg.platforms_dir, environ)
    if cfg.create.android_language is not None:
        cfg.create.android_language = expand_env_vars(cfg.create.android_language, environ)
    if cfg.create.platforms is not None:
        cfg.create.platforms = [expand_env_vars(item, environ) for item in cfg.create.platforms]

    tv = cfg.android.template_vars
    if _blank(tv.application_id):
        org = (cfg.org or "").strip()
        if not org:
            raise ValueError("android.template_vars.application_id is required when org is not set")
        tv.application_id = f"{org.rstrip('.')}.{cfg.project_name}"
    if _blank(tv.namespace):
        tv.namespace = tv.application_id

    if cfg.android.distribution_url is not None:
        cfg.android.distribution_url = expand_env_vars(cfg.android.distribution_url, environ)

    return cfg


def build_template_vars(cfg: AppConfig) -> Dict[str, str]:
    """Map of ``{{key}}`` names to values for Android template rendering."""

    tv = cfg.android.template_vars
    candidates = {
        "namespace": tv.namespace,
        "application_id": tv.application_id,
        "output_file_name": tv.output_file_name,
        "key_alias": tv.key_alias,
        "store_file": tv.store_file,
    }
    return {key: value for key, value in candidates.items() if value is not None}


def pubspec_overrides(cfg: AppConfig) -> Dict[str, str]:
    """Top-level pubspec fields to rewrite; ``pubspec.*`` wins over top-level values."""

    fields: Dict[str, str] = {}
    if cfg.description is not None:
        fields["description"] = cfg.description
    if cfg.version is not None:
        fields["version"] = cfg.version
    if cfg.pubspec is not None:
        for key in PubspecConfig.__dataclass_fields__:
            value = getattr(cfg.pubspec, key)
            if value is not None:
                fields[key] = value
    return fields
