"""neuromono: perceptually aware stereo-to-mono downmixing."""

from __future__ import annotations

__version__ = "0.1.0"

from neuromono.core.converter import Converter, analyze, convert, create_converter

__all__ = ["__version__", "Converter", "analyze", "convert", "create_converter"]
