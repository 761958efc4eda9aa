"""
Command-line interface for fiber detection.

Provides commands for detecting fibers in a skeleton image and for
writing a default configuration file.
"""

import argparse
import json
import sys

from fiberhough.config import load_config, save_default_config
from fiberhough.errors import InvalidParameterError
from fiberhough.tracer import configure_tracer, get_tracer


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fiberhough",
        description="Detect straight fiber segments in a binary skeleton image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    
    detect_parser = subparsers.add_parser("detect", help="Detect fiber segments")
    detect_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Skeleton image file (foreground is any pixel > 0)",
    )
    detect_parser.add_argument(
        "--roi",
        nargs=4,
        type=int,
        metavar=("X", "Y", "WIDTH", "HEIGHT"),
        default=None,
        help="Region of interest (whole image by default)",
    )
    detect_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    detect_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for anchor sampling (overrides config)",
    )
    detect_parser.add_argument(
        "--out", "-o",
        default=None,
        help="Write the result JSON to this file instead of stdout",
    )
    detect_parser.add_argument(
        "--full",
        action="store_true",
        help="Include selected lines and counts in the output",
    )
    detect_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    detect_parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    detect_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    detect_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )
    
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="fiberhough_config.yaml",
        help="Output path for config file",
    )
    
    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    if args.command is None:
        parser.print_help()
        return 0
    
    if args.command == "detect":
        return handle_detect(args)
    elif args.command == "init-config":
        return handle_init_config(args)
    
    return 0


def handle_detect(args):
    """Handle the detect command."""
    config = load_config(args.config)
    if args.seed is not None:
        config.sampling.seed = args.seed
    
    configure_tracer(
        enabled=args.trace or config.tracing.enabled,
        level=args.trace_level if args.trace else config.tracing.level,
        file_path=args.trace_file or config.tracing.file_path,
        json_output=args.trace_json or config.tracing.json_output,
    )
    
    tracer = get_tracer()
    
    try:
        from fiberhough.geometry.foreground import Roi
        from fiberhough.io.load_raster import load_raster
        from fiberhough.pipeline import run_detection
        
        with tracer.span("cli_detect", module="cli"):
            raster = load_raster(args.input)
            roi = Roi(*args.roi) if args.roi else None
            result = run_detection(raster, roi=roi, config=config)
        
        if args.full:
            payload = result.model_dump()
        else:
            payload = {"segments": [s.model_dump() for s in result.segments]}
        text = json.dumps(payload, indent=2)
        
        if args.out:
            with open(args.out, "w", encoding="utf-8") as f:
                f.write(text + "\n")
            print(f"Detected {len(result.segments)} segments, saved to: {args.out}")
        else:
            print(text)
        
        return 0
    
    except InvalidParameterError as e:
        tracer.event(f"Invalid parameter: {e.parameter}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 2
    
    except Exception as e:
        tracer.event(f"Detection failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    
    finally:
        get_tracer().config.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
