"""Stereo buffer model and soundfile-backed file handling."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import numpy as np
import soundfile as sf

from .errors import ValidationError


SUPPORTED_EXT = {".wav", ".flac", ".aiff", ".aif", ".rf64", ".caf", ".ogg"}


@dataclass(frozen=True, slots=True)
class StereoBuffer:
    """Two equal-length float32 channels plus their sample rate.

    Channel arrays are made read-only on construction so the core can never
    write through to caller data.
    """

    left: np.ndarray
    right: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        left = np.array(self.left, dtype=np.float32).reshape(-1)
        right = np.array(self.right, dtype=np.float32).reshape(-1)
        if left.shape[0] != right.shape[0]:
            raise ValidationError(
                f"Channel length mismatch: left={left.shape[0]} right={right.shape[0]}"
            )
        if left.shape[0] == 0:
            raise ValidationError("Stereo buffer must contain at least one sample")
        if int(self.sample_rate) <= 0:
            raise ValidationError(f"Sample rate must be positive, got {self.sample_rate!r}")
        left.flags.writeable = False
        right.flags.writeable = False
        object.__setattr__(self, "left", left)
        object.__setattr__(self, "right", right)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def num_samples(self) -> int:
        return int(self.left.shape[0])

    @property
    def duration_s(self) -> float:
        return float(self.num_samples / self.sample_rate)

    @classmethod
    def from_array(cls, samples: np.ndarray, sample_rate: int) -> "StereoBuffer":
        """Build from a sample-major `[n, channels]` array; mono input is duplicated."""
        x = np.asarray(samples, dtype=np.float32)
        if x.ndim == 1:
            x = x[:, None]
        if x.ndim != 2:
            raise ValidationError(f"Expected [samples, channels] array, got shape {x.shape}")
        if x.shape[1] == 1:
            return cls(left=x[:, 0], right=x[:, 0], sample_rate=sample_rate)
        if x.shape[1] != 2:
            raise ValidationError(f"Expected 1 or 2 channels, got {x.shape[1]}")
        return cls(left=x[:, 0], right=x[:, 1], sample_rate=sample_rate)

    def to_array(self) -> np.ndarray:
        return np.stack([self.left, self.right], axis=1)


def read_stereo(path: str | Path) -> StereoBuffer:
    """Decode an audio file into a StereoBuffer via soundfile."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Audio file not found: {p}")
    samples, sr = sf.read(str(p), always_2d=True, dtype="float32")
    return StereoBuffer.from_array(samples, int(sr))


def write_mono(
    path: str | Path,
    samples: np.ndarray,
    sample_rate: int,
    subtype: str | None = None,
) -> Path:
    """Write a mono float signal to disk, creating parent directories."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(p), np.asarray(samples, dtype=np.float32), int(sample_rate), subtype=subtype)
    return p


def iter_supported_files(root: str | Path, recursive: bool = True, patterns: Iterable[str] | None = None) -> list[Path]:
    """Collect decodable audio files from a directory."""
    r = Path(root)
    if not r.exists():
        return []
    globs = list(patterns) if patterns else [f"*{ext}" for ext in sorted(SUPPORTED_EXT)]
    files: list[Path] = []
    for pattern in globs:
        if recursive:
            files.extend(r.rglob(pattern))
        else:
            files.extend(r.glob(pattern))
    return sorted({f.resolve() for f in files if f.is_file()})
