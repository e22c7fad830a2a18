from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from .config import AppConfig
from .errors import (
    RasterizationError,
    RasterizerUnavailableError,
    SerializationError,
)
from .file_ops import ICNS, ICO, OutputTarget, atomic_write, resolve_targets
from .icns import encode_icns
from .ico import encode_ico
from .rasterizer import CairoRasterizer, Rasterizer


EXIT_OK = 0
EXIT_USAGE = 2
EXIT_RASTERIZATION = 3
EXIT_SERIALIZATION = 4

ENCODERS: dict[str, Callable[..., bytes]] = {
    ICO: encode_ico,
    ICNS: encode_icns,
}


def _configure_logging(log_path: str | None, verbose: bool) -> None:
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_path:
        log_file = Path(log_path).expanduser()
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))
        except OSError as exc:  # pragma: no cover - filesystem permissions
            print(f"Warning: failed to open log file {log_file}: {exc}", file=sys.stderr)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=handlers,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="svg2icon",
        description="Convert an SVG file to Windows .ico and macOS .icns icons.",
    )
    parser.add_argument("svg", help="Path to the source SVG file.")
    parser.add_argument(
        "output",
        help=(
            "Output directory (writes both formats), a .ico or .icns file, "
            "or a .icon/extensionless path (writes both formats)."
        ),
    )
    parser.add_argument(
        "--jobs",
        "-j",
        dest="jobs",
        type=int,
        help="Render sizes in parallel with this many workers (0 = one per CPU, default 1).",
    )
    parser.add_argument(
        "--dedupe",
        dest="dedupe",
        action="store_true",
        default=None,
        help="Render each pixel size once and reuse it for ICNS Retina entries.",
    )
    parser.add_argument("--log-file", dest="log_file", help="Write detailed logs to this file.")
    parser.add_argument(
        "--dry-run", dest="dry_run", action="store_true", help="Encode but do not write files."
    )
    parser.add_argument(
        "--verbose", dest="verbose", action="store_true", help="Enable verbose logging."
    )
    return parser.parse_args(argv)


def _validate_svg_path(path: Path) -> None:
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")
    if not path.is_file():
        raise FileNotFoundError(f"Input path is not a file: {path}")
    if path.suffix.lower() != ".svg":
        raise ValueError("Only SVG files are supported.")


def _write_target(
    target: OutputTarget,
    svg_path: Path,
    rasterizer: Rasterizer,
    config: AppConfig,
    dry_run: bool,
) -> int:
    encoder = ENCODERS[target.kind]
    try:
        data = encoder(
            svg_path,
            rasterizer=rasterizer,
            max_workers=config.jobs,
            dedupe=config.dedupe_renders,
        )
    except RasterizationError as exc:
        logging.error("%s encoding failed: %s", target.kind.upper(), exc)
        return EXIT_RASTERIZATION
    except SerializationError as exc:
        logging.error("%s encoding failed: %s", target.kind.upper(), exc)
        return EXIT_SERIALIZATION

    if dry_run:
        logging.info("Dry run enabled. Would write %d bytes to %s", len(data), target.path)
        return EXIT_OK

    try:
        atomic_write(target.path, data)
    except SerializationError as exc:
        logging.error("Writing %s failed: %s", target.path, exc)
        return EXIT_SERIALIZATION

    logging.info("Wrote %s (%d bytes)", target.path, len(data))
    print(target.path)
    return EXIT_OK


def main(argv: list[str] | None = None, rasterizer: Optional[Rasterizer] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    try:
        config = AppConfig.from_env(
            jobs=args.jobs,
            dedupe_renders=args.dedupe,
            log_path=args.log_file,
        )
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    _configure_logging(config.log_path, args.verbose)

    svg_path = Path(args.svg).expanduser()
    try:
        _validate_svg_path(svg_path)
        targets = resolve_targets(svg_path, Path(args.output).expanduser())
    except (FileNotFoundError, ValueError) as exc:
        logging.error("%s", exc)
        return EXIT_USAGE

    logging.info(
        "Converting %s → %s (workers=%d, dedupe=%s)",
        svg_path,
        ", ".join(str(target.path) for target in targets),
        config.jobs,
        config.dedupe_renders,
    )

    if rasterizer is None:
        try:
            rasterizer = CairoRasterizer()
        except RasterizerUnavailableError as exc:
            logging.error("%s", exc)
            return EXIT_RASTERIZATION

    # Each target stands alone: a failed .icns does not cancel the .ico.
    status = EXIT_OK
    for target in targets:
        result = _write_target(target, svg_path, rasterizer, config, args.dry_run)
        status = max(status, result)
    return status


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
