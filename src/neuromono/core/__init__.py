"""Core analysis and downmix components."""

from .analyzer import AnalysisResult, FrequencyDistribution, StereoAnalyzer, analyze_stereo
from .audio import StereoBuffer, read_stereo, write_mono
from .config import ConversionConfig
from .converter import Converter, analyze, convert, create_converter
from .downmix import Downmixer, DownmixResult
from .errors import ValidationError
from .presets import BUILTIN_PRESETS, Preset, load_presets, resolve_preset
from .weights import MixWeights, WeightMapper

__all__ = [
    "AnalysisResult",
    "FrequencyDistribution",
    "StereoAnalyzer",
    "analyze_stereo",
    "StereoBuffer",
    "read_stereo",
    "write_mono",
    "ConversionConfig",
    "Converter",
    "analyze",
    "convert",
    "create_converter",
    "Downmixer",
    "DownmixResult",
    "ValidationError",
    "BUILTIN_PRESETS",
    "Preset",
    "load_presets",
    "resolve_preset",
    "MixWeights",
    "WeightMapper",
]
