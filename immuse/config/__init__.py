"""Configuration module: exports Settings and the YAML loader helpers."""

from immuse.config.loader import generation_params, load_config
from immuse.config.settings import Settings

__all__ = ["Settings", "generation_params", "load_config"]
