"""
SpectraMix - command-line interface

Example usage:
    # Combine recordings into one synthesized sample
    spectramix combine kick.wav snare.wav -o combined.wav
    spectramix combine a.wav b.wav -o out/mix.wav --summary out/session.json

    # Run one wire-level transform request
    spectramix transform request.json
    spectramix transform request.json -o response.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from spectramix import __version__
from spectramix.core.boundary import TransformWorker
from spectramix.core.models import AnalysisSession, ErrorDescriptor
from spectramix.core.pipeline import create_pipeline
from spectramix.core.transform import create_transform_engine
from spectramix.utils.config import load_config
from spectramix.utils.errors import SpectraMixError, TransformError
from spectramix.utils.logging import get_logger, setup_logging

logger = get_logger("cli")


def print_session(session: AnalysisSession) -> None:
    """Print a session summary to the console."""
    print("\n" + "=" * 60)
    print("SPECTRAMIX SESSION")
    print("=" * 60)
    for index, sample in enumerate(session):
        summary = sample.to_dict()
        peak = summary['peak_frequency']
        print(f"[{index}] {sample.name}")
        print(f"  Length: {summary['length']} samples ({summary['duration']:.3f}s @ {sample.sample_rate} Hz)")
        print(f"  Spectrum Bins: {summary['spectrum_length']}")
        print(f"  Peak Frequency: {'n/a' if peak is None else f'{peak:.1f} Hz'}")
    print("-" * 60)


async def _run_combine(inputs: List[Path], config: Dict[str, Any]) -> AnalysisSession:
    from spectramix.io.loader import create_sample_loader

    loader = create_sample_loader(config.get('audio', {}))
    loaded = [loader.load(path) for path in inputs]

    with create_pipeline(config) as pipeline:
        await pipeline.analyze_many([audio.as_pipeline_input() for audio in loaded])
        await pipeline.combine()
        return pipeline.session


def cmd_combine(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Load, analyze and combine the input files, then write the result."""
    from spectramix.io.writer import WavSampleWriter, create_session_writer

    session = asyncio.run(_run_combine(args.inputs, config))
    combined = session[len(session) - 1]

    WavSampleWriter(subtype=args.subtype).write(combined, args.output)
    print(f"Combined sample written to: {args.output}")

    if args.summary:
        fmt = "json" if args.summary.suffix.lower() == ".json" else "text"
        create_session_writer(fmt).write(session, args.summary)
        print(f"Session summary written to: {args.summary}")

    if not args.quiet:
        print_session(session)
    return 0


def cmd_transform(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Answer one wire-level transform request read from a JSON file."""
    try:
        with open(args.request, 'r', encoding='utf-8') as f:
            message = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read request {args.request}: {e}", file=sys.stderr)
        return 1

    worker = TransformWorker(create_transform_engine(config))
    response = worker.handle_message(message)
    try:
        text = json.dumps(response, indent=2, allow_nan=False)
    except ValueError:
        # Overflow in the transform; NaN/Infinity are not valid JSON
        error = TransformError("Transform produced non-finite values")
        response = {
            'id': response.get('id'),
            'operation': response.get('operation'),
            'result': None,
            'error': ErrorDescriptor.from_exception(error).to_dict(),
        }
        text = json.dumps(response, indent=2)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding='utf-8')
        print(f"Response written to: {args.output}")
    else:
        print(text)
    return 0 if response.get('error') is None else 1


def build_parser() -> argparse.ArgumentParser:
    """Construct and return the top-level ArgumentParser."""
    parser = argparse.ArgumentParser(
        prog="spectramix",
        description="Combine audio samples in the frequency domain",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Path to configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    sub = parser.add_subparsers(dest="command")

    p_combine = sub.add_parser(
        "combine",
        help="Combine recordings into one sample",
        description="Analyze each input and synthesize a new sample from their combined spectra.",
    )
    p_combine.add_argument("inputs", type=Path, nargs="+", help="Input audio files (first is the base)")
    p_combine.add_argument("-o", "--output", type=Path, required=True, help="Output audio file")
    p_combine.add_argument("--summary", type=Path, default=None, help="Write a session summary (.json or .txt)")
    p_combine.add_argument("--subtype", default="PCM_16", help="Output sample subtype (default: PCM_16)")
    p_combine.add_argument("--quiet", "-q", action="store_true", help="Do not print the session summary")
    p_combine.set_defaults(func=cmd_combine)

    p_transform = sub.add_parser(
        "transform",
        help="Run one JSON transform request",
        description="Read a transform request, run it and emit the response.",
    )
    p_transform.add_argument("request", type=Path, help="JSON request file")
    p_transform.add_argument("-o", "--output", type=Path, default=None, help="Write the response here instead of stdout")
    p_transform.set_defaults(func=cmd_transform)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = load_config(str(args.config) if args.config else None)
        log_config = config.get("logging", {})
        setup_logging(
            level="DEBUG" if args.verbose else log_config.get("level", "INFO"),
            log_format=log_config.get("format", "text"),
            log_file=log_config.get("file"),
        )
        return args.func(args, config)
    except SpectraMixError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
