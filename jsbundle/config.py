"""
Option models for printing, normalisation and whole unbundling runs.
"""
from typing import Tuple

from pydantic import BaseModel, Field

ENTRY_NAMES = ("main", "browser")
REGISTRY_URL = "https://registry.npmjs.org"


class OutputOptions(BaseModel):
    """How syntax trees are turned back into text."""
    beautify: bool = True
    ascii_only: bool = True
    bracketize: bool = True
    indent_level: int = 4
    one_var_per_line: bool = True


class DecompressOptions(BaseModel):
    """Which normalisation rules are enabled."""
    constants: bool = True
    sequences: bool = True
    conditionals: bool = True


class UnbundleOptions(BaseModel):
    """Settings for a complete unbrowserify run."""
    output: OutputOptions = Field(default_factory=OutputOptions)
    decompress: DecompressOptions = Field(default_factory=DecompressOptions)
    entry_names: Tuple[str, ...] = ENTRY_NAMES
    write_package: bool = True
    # relative to the working directory
    package_path: str = "package.json"
    registry_url: str = REGISTRY_URL
    request_timeout: float = 30.0
