"""
Flutter device discovery and selection by index or ID.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Mapping

from core.command_runner import ChildFailure, CommandRunner, SpawnError


class DeviceSelectionError(RuntimeError):
    """Raised when a device spec cannot be resolved to a device ID."""


@dataclass(frozen=True)
class Device:
    id: str
    name: str
    target_platform: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Device":
        try:
            return cls(
                id=str(data["id"]),
                name=str(data["name"]),
                target_platform=str(data["targetPlatform"]),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"device entry is missing field {e}") from e


def extract_device_json(output: str) -> str:
    """Return the JSON array embedded in ``flutter devices --machine`` output.

    Flutter may print banners (upgrade notices, analytics) around the array.
    """
    start = output.find("[")
    end = output.rfind("]")
    if start == -1 or end == -1 or start >= end:
        return "[]"
    return output[start:end + 1]


def parse_devices(output: str) -> List[Device]:
    try:
        data = json.loads(extract_device_json(output))
        if not isinstance(data, list):
            raise ValueError("expected a JSON array")
        return [Device.from_mapping(item) for item in data]
    except (ValueError, TypeError) as e:
        raise DeviceSelectionError(f"Error parsing device list: {e}") from e


def list_devices(runner: CommandRunner, flutter: str = "flutter") -> List[Device]:
    try:
        result = runner.run([flutter, "devices", "--machine"], check=True)
    except SpawnError as e:
        raise DeviceSelectionError(f"Error running flutter devices: {e}") from e
    except ChildFailure as e:
        raise DeviceSelectionError("flutter devices command failed") from e
    return parse_devices(result.stdout)


def is_device_index(spec: str) -> bool:
    return spec.isascii() and spec.isdigit()


def select_device(spec: str, runner: CommandRunner, flutter: str = "flutter") -> str:
    """Resolve ``spec`` to a device ID.

    An empty spec means auto-select and yields an empty string, a 0-based
    number picks from the connected devices, and anything else is already an ID.
    """
    if not spec:
        return ""
    if not is_device_index(spec):
        return spec

    index = int(spec)
    devices = list_devices(runner, flutter)
    if index >= len(devices):
        raise DeviceSelectionError(
            f"Device index {index} out of range (found {len(devices)} devices)"
        )
    return devices[index].id
