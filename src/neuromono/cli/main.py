"""Command line interface for neuromono."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from neuromono.core import ConversionConfig, read_stereo, write_mono
from neuromono.core.audio import iter_supported_files
from neuromono.core.converter import Converter
from neuromono.core.presets import BUILTIN_PRESETS, Preset, load_presets, resolve_preset, with_preset
from neuromono.core.report import report_from_result
from neuromono.io import save_batch_csv, save_csv, save_json


def _mkdir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _extra_presets(args: argparse.Namespace) -> dict[str, Preset]:
    path = getattr(args, "presets_file", None)
    return load_presets(path) if path else {}


def _build_config(args: argparse.Namespace) -> ConversionConfig:
    cfg = ConversionConfig()
    if getattr(args, "preset", None):
        cfg = with_preset(cfg, resolve_preset(args.preset, _extra_presets(args)))

    overrides: dict[str, Any] = {}
    for name in ("preserve_width", "preserve_richness", "volume_compensation", "quality", "sample_rate", "seed"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if getattr(args, "resampler", None):
        overrides["resampler"] = args.resampler
    if getattr(args, "no_spectral", False):
        overrides["spectral_analysis"] = False
    return cfg.with_overrides(**overrides) if overrides else cfg


def _convert_file(
    input_path: Path,
    output_path: Path,
    cfg: ConversionConfig,
) -> dict[str, Any]:
    buffer = read_stereo(input_path)
    converter = Converter(cfg)
    result = converter.process(buffer)
    out_sr = converter.options.sample_rate or buffer.sample_rate
    write_mono(output_path, result.mono, out_sr)
    report = report_from_result(buffer, converter.options, result, source_path=str(input_path))
    return report


def _print_summary(report: dict[str, Any]) -> None:
    analysis = report["analysis"]
    print(
        "summary:",
        {
            "duration_s": round(float(report["metadata"]["duration_s"]), 3),
            "sample_rate": int(report["metadata"]["sample_rate"]),
            "width": round(float(analysis["width"]), 4),
            "richness": round(float(analysis["richness"]), 4),
            "phase_correlation": round(float(analysis["phase_correlation"]), 4),
            "rms_level": round(float(analysis["rms_level"]), 4),
        },
    )


def _print_debug(report: dict[str, Any], debug: int) -> None:
    if debug >= 1:
        print(f"config_hash: {report.get('config_hash')}")
        print(f"mix_weights: {report.get('mix_weights')}")
    if debug >= 2:
        print(json.dumps(report, indent=2))


def _run_analyze(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    out_dir = Path(args.out_dir)
    _mkdir(out_dir)

    cfg = _build_config(args)
    buffer = read_stereo(input_path)
    converter = Converter(cfg)
    result = converter.process(buffer)
    report = report_from_result(buffer, converter.options, result, source_path=str(input_path))

    json_path = Path(args.json) if args.json else out_dir / f"{input_path.stem}.json"
    save_json(report, json_path)
    if args.csv:
        save_csv(report, Path(args.csv))

    if args.verbosity >= 1:
        print(f"json: {json_path}")
        _print_summary(report)
    if args.verbosity >= 2:
        print(f"frequency_distribution: {report['analysis']['frequency_distribution']}")
    _print_debug(report, args.debug)
    return 0


def _run_convert(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    output_path = Path(args.output)

    cfg = _build_config(args)
    report = _convert_file(input_path, output_path, cfg)
    if args.report:
        save_json(report, Path(args.report))

    if args.verbosity >= 1:
        print(f"mono: {output_path}")
        _print_summary(report)
    if args.verbosity >= 2:
        print(f"output: {report['output']}")
    _print_debug(report, args.debug)
    return 0


def _run_batch(args: argparse.Namespace) -> int:
    in_dir = Path(args.input_dir)
    out_dir = Path(args.out)
    _mkdir(out_dir)
    in_root = in_dir.resolve()

    files = iter_supported_files(in_dir, recursive=not args.no_recursive)
    if not files:
        print("No supported files found.")
        return 0

    cfg = _build_config(args)
    rows: list[dict[str, Any]] = []
    for fp in files:
        rel = fp.relative_to(in_root)
        run_out = out_dir / rel.parent
        _mkdir(run_out)
        mono_path = run_out / f"{fp.stem}_mono.wav"

        report = _convert_file(fp, mono_path, cfg)
        if args.reports:
            save_json(report, run_out / f"{fp.stem}.json")

        analysis = report["analysis"]
        rows.append(
            {
                "input": str(fp),
                "output": str(mono_path),
                "width": analysis["width"],
                "richness": analysis["richness"],
                "phase_correlation": analysis["phase_correlation"],
                "rms_level": analysis["rms_level"],
                "output_rms": report["output"]["rms"],
            }
        )
        if args.verbosity >= 2:
            print(f"converted: {fp} -> {mono_path}")

    idx = save_batch_csv(rows, out_dir / "batch_summary.csv")
    if args.verbosity >= 1:
        print(f"batch complete: {len(rows)} files -> {out_dir}")
        print(f"index: {idx}")
    return 0


def _run_presets(args: argparse.Namespace) -> int:
    catalog = {**BUILTIN_PRESETS, **_extra_presets(args)}
    for name in sorted(catalog):
        preset = catalog[name]
        print(f"{name}: {preset.overrides()}")
        if preset.description:
            print(f"  {preset.description}")
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--verbosity",
        type=int,
        default=1,
        choices=[0, 1, 2, 3],
        help="Verbosity level: 0=silent, 1=summary, 2=detailed, 3=full diagnostic",
    )
    p.add_argument(
        "--debug",
        type=int,
        default=0,
        choices=[0, 1, 2],
        help="Debug level: 0=none, 1=config hash and mix weights, 2=full report",
    )


def _add_conversion_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--preset", default=None, help="Preset name (built-in: voice, music, fast)")
    p.add_argument("--presets-file", dest="presets_file", default=None, help="Extra presets YAML/JSON path")
    p.add_argument("--preserve-width", dest="preserve_width", type=float, default=None, help="0..1 (default 0.7)")
    p.add_argument(
        "--preserve-richness", dest="preserve_richness", type=float, default=None, help="0..1 (default 0.8)"
    )
    p.add_argument(
        "--volume-compensation",
        dest="volume_compensation",
        type=float,
        default=None,
        help="0.5..2.0 (default 1.1)",
    )
    p.add_argument("--quality", type=float, default=None, help="0..1, recorded only (default 0.8)")
    p.add_argument("--no-spectral", action="store_true", help="Disable harmonic reinjection")
    p.add_argument("--sample-rate", dest="sample_rate", type=int, default=None, help="Resample before downmixing")
    p.add_argument("--resampler", default=None, choices=["linear", "polyphase"], help="Resampling method")
    p.add_argument("--seed", type=int, default=None, help="Use a seeded weight-network parameterization")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neuromono",
        description="neuromono CLI for perceptually aware stereo-to-mono conversion.",
        epilog=(
            "Decode behavior: files are read with soundfile; mono input is duplicated to both channels.\n"
            "Preset file keys: presets[].name, preserve_width, preserve_richness, volume_compensation, "
            "quality, spectral_analysis, sample_rate."
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # analyze
    pa = sub.add_parser("analyze", help="Analyze a stereo file and write a JSON report")
    pa.add_argument("input", help="Input audio file path")
    pa.add_argument("--json", dest="json", default=None, help="JSON output path (default: <out-dir>/<stem>.json)")
    pa.add_argument("--csv", dest="csv", default=None, help="Summary CSV output path")
    pa.add_argument("--out-dir", default=".")
    _add_conversion_options(pa)
    _add_common(pa)
    pa.set_defaults(func=_run_analyze)

    # convert
    pc = sub.add_parser("convert", help="Convert a stereo file to mono")
    pc.add_argument("input", help="Input audio file path")
    pc.add_argument("output", help="Output mono file path")
    pc.add_argument("--report", default=None, help="Optional JSON report path")
    _add_conversion_options(pc)
    _add_common(pc)
    pc.set_defaults(func=_run_convert)

    # batch
    pb = sub.add_parser("batch", help="Convert every supported file in a directory")
    pb.add_argument("input_dir", help="Input directory")
    pb.add_argument("--out", required=True, help="Output directory")
    pb.add_argument("--no-recursive", action="store_true", help="Do not descend into subdirectories")
    pb.add_argument("--reports", action="store_true", help="Write a JSON report next to each output")
    _add_conversion_options(pb)
    _add_common(pb)
    pb.set_defaults(func=_run_batch)

    # presets
    pp = sub.add_parser("presets", help="List conversion presets")
    pp.add_argument("--presets-file", dest="presets_file", default=None, help="Extra presets YAML/JSON path")
    pp.set_defaults(func=_run_presets)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except Exception as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
