"""TOML config loading for egg.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "egg.toml"


@dataclass
class PackageConfig:
    name: str = "untitled"
    version: str = "0.0.0"


@dataclass
class AnalysisConfig:
    warnings_as_errors: bool = False


@dataclass
class UnparseConfig:
    indent: int = 4
    annotate: bool = True


@dataclass
class EggConfig:
    package: PackageConfig = field(default_factory=PackageConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    unparse: UnparseConfig = field(default_factory=UnparseConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find egg.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> EggConfig:
    """Parse an egg.toml file into an EggConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = EggConfig()

    if "package" in data:
        pkg = data["package"]
        config.package = PackageConfig(
            name=pkg.get("name", "untitled"),
            version=pkg.get("version", "0.0.0"),
        )

    if "analysis" in data:
        config.analysis = AnalysisConfig(
            warnings_as_errors=data["analysis"].get("warnings_as_errors", False),
        )

    if "unparse" in data:
        unp = data["unparse"]
        config.unparse = UnparseConfig(
            indent=unp.get("indent", 4),
            annotate=unp.get("annotate", True),
        )

    return config
