"""
settings.py

Persistent settings management for bpmnplus.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/bpmnplus/settings.toml
    - macOS: ~/Library/Application Support/bpmnplus/settings.toml
    - Linux: ~/.config/bpmnplus/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "bpmnplus"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


def set_settings(manager: Optional["SettingsManager"]) -> None:
    """Replace the global settings manager (``None`` resets to lazy default)."""
    global _settings_manager
    _settings_manager = manager


# =============================================================================
# Conversion Settings
# =============================================================================

@dataclass
class ConversionSettings:
    """Identifier placeholders and output naming.

    Defaults:
        default_definitions_id: "Definitions_1"
        default_process_name: "Process_Name"
        output_suffix: "_camunda"
        input_extension: ".bpmn"
    """
    default_definitions_id: str = "Definitions_1"  # Default: "Definitions_1"
    default_process_name: str = "Process_Name"     # Default: "Process_Name"
    output_suffix: str = "_camunda"                # Default: "_camunda"
    input_extension: str = ".bpmn"                 # Default: ".bpmn"


# =============================================================================
# Layout Settings
# =============================================================================

@dataclass
class LayoutSettings:
    """Diagram geometry settings.

    Defaults:
        margin: 100.0
        jog_threshold: 10.0
    """
    margin: float = 100.0        # Default: 100.0 units from the diagram origin
    jog_threshold: float = 10.0  # Default: 10.0 units of tolerated misalignment


# =============================================================================
# Target Platform Settings
# =============================================================================

@dataclass
class TargetSettings:
    """Metadata written on the output ``definitions`` element.

    Defaults:
        target_namespace: "http://bpmn.io/schema/bpmn"
        exporter: "Camunda Modeler"
        exporter_version: "5.42.0"
        execution_platform: "Camunda Cloud"
        execution_platform_version: "8.8.0"
    """
    target_namespace: str = "http://bpmn.io/schema/bpmn"
    exporter: str = "Camunda Modeler"
    exporter_version: str = "5.42.0"
    execution_platform: str = "Camunda Cloud"
    execution_platform_version: str = "8.8.0"


# =============================================================================
# Trace Settings
# =============================================================================

@dataclass
class TraceSettings:
    """Diagnostic logging settings.

    Defaults:
        enabled: False
        log_file: ""
        level: "INFO"
    """
    enabled: bool = False  # Default: False
    log_file: str = ""     # Default: "" (stderr only)
    level: str = "INFO"    # Default: "INFO"


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        conversion: Placeholder ids and output naming.
        layout: Diagram geometry settings.
        target: Target platform metadata.
        trace: Diagnostic logging settings.
    """
    conversion: ConversionSettings = field(default_factory=ConversionSettings)
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    target: TargetSettings = field(default_factory=TargetSettings)
    trace: TraceSettings = field(default_factory=TraceSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_file: Explicit settings file, overriding the platform location.
    """

    def __init__(self, app_name: str = APP_NAME,
                 settings_file: Optional[Union[str, Path]] = None):
        if settings_file is not None:
            self.settings_file = Path(settings_file)
            self.settings_dir = self.settings_file.parent
        else:
            self.settings_dir = Path(platformdirs.user_config_dir(app_name))
            self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except (OSError, tomllib.TOMLDecodeError, AttributeError, TypeError, ValueError):
            # If file is corrupted or invalid, return defaults
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # Conversion section
        conv = data.get("conversion", {})
        settings.conversion.default_definitions_id = conv.get("default_definitions_id", settings.conversion.default_definitions_id)
        settings.conversion.default_process_name = conv.get("default_process_name", settings.conversion.default_process_name)
        settings.conversion.output_suffix = conv.get("output_suffix", settings.conversion.output_suffix)
        settings.conversion.input_extension = conv.get("input_extension", settings.conversion.input_extension)

        # Layout section
        layout = data.get("layout", {})
        settings.layout.margin = float(layout.get("margin", settings.layout.margin))
        settings.layout.jog_threshold = float(layout.get("jog_threshold", settings.layout.jog_threshold))

        # Target section
        target = data.get("target", {})
        settings.target.target_namespace = target.get("target_namespace", settings.target.target_namespace)
        settings.target.exporter = target.get("exporter", settings.target.exporter)
        settings.target.exporter_version = target.get("exporter_version", settings.target.exporter_version)
        settings.target.execution_platform = target.get("execution_platform", settings.target.execution_platform)
        settings.target.execution_platform_version = target.get("execution_platform_version", settings.target.execution_platform_version)

        # Trace section
        tr = data.get("trace", {})
        settings.trace.enabled = tr.get("enabled", settings.trace.enabled)
        settings.trace.log_file = tr.get("log_file", settings.trace.log_file)
        settings.trace.level = tr.get("level", settings.trace.level)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        # Ensure directory exists
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        # Convert settings to TOML structure
        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "conversion": {
                "default_definitions_id": s.conversion.default_definitions_id,
                "default_process_name": s.conversion.default_process_name,
                "output_suffix": s.conversion.output_suffix,
                "input_extension": s.conversion.input_extension,
            },
            "layout": {
                "margin": s.layout.margin,
                "jog_threshold": s.layout.jog_threshold,
            },
            "target": {
                "target_namespace": s.target.target_namespace,
                "exporter": s.target.exporter,
                "exporter_version": s.target.exporter_version,
                "execution_platform": s.target.execution_platform,
                "execution_platform_version": s.target.execution_platform_version,
            },
            "trace": {
                "enabled": s.trace.enabled,
                "log_file": s.trace.log_file,
                "level": s.trace.level,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        data = self._to_toml_dict()
        return tomli_w.dumps(data)

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
