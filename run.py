from __future__ import annotations

import argparse
import os
import time
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from tqdm import tqdm

from autobgremover.config import (
    DEFAULT_MODEL,
    ENV_DEVICE,
    ENV_LOG_LEVEL,
    ENV_MODEL,
    ENV_SEVERITY,
    LOG_LEVEL,
    MIN_CONFIDENCE,
)
from autobgremover.contracts import RemovalReport
from autobgremover.errors import EmptyTrimRegion, ForegroundNotFound, SegmenterFailure
from autobgremover.io import iter_images, load_image, save_rgba_png, write_json
from autobgremover.log import init_logging
from autobgremover.pipeline import BackgroundRemover
from autobgremover.segmenter import Segmenter


def _build_segmenter(model_spec: str, device: Optional[str]) -> Segmenter:
    from autobgremover.birefnet import BiRefNetSegmenter

    return BiRefNetSegmenter(model_spec, device=device)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove photo backgrounds into RGBA PNGs.")
    parser.add_argument("--input", required=True, type=str, help="Input image or directory of images.")
    parser.add_argument("--output", required=True, type=str, help="Output directory (creates rgba/ + metadata/).")
    parser.add_argument(
        "--model",
        default=os.getenv(ENV_MODEL, DEFAULT_MODEL),
        type=str,
        help=f"Model spec. 'hf:<repo>' or a TorchScript file path (default: {DEFAULT_MODEL}).",
    )
    parser.add_argument(
        "--severity",
        default=os.getenv(ENV_SEVERITY, str(MIN_CONFIDENCE)),
        type=float,
        help="Confidence below which a pixel is background, in [0,1].",
    )
    parser.add_argument("--trim", action="store_true", help="Crop each result to its non-transparent content.")
    parser.add_argument("--device", default=os.getenv(ENV_DEVICE), type=str, help="Torch device (default: auto).")
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Record segmenter failures in metadata instead of aborting.",
    )
    parser.add_argument("--log-level", default=os.getenv(ENV_LOG_LEVEL, LOG_LEVEL), type=str)
    return parser.parse_args(argv)


def _output_stem(img_path: Path, input_path: Path) -> Path:
    if input_path.is_file():
        return Path(img_path.stem)
    return img_path.relative_to(input_path).with_suffix("")


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = _parse_args(argv)
    init_logging(args.log_level)

    input_path = Path(args.input)
    output_dir = Path(args.output)
    if not input_path.exists():
        raise FileNotFoundError(f"Input not found: {input_path}")

    images = list(iter_images(input_path))
    if not images:
        print(f"No images found under {input_path}")
        return 0

    stats = {"total": 0, "ok": 0, "no_foreground": 0, "segmenter_failure": 0, "empty_trim": 0}

    t0 = time.perf_counter()
    with BackgroundRemover(
        _build_segmenter(args.model, args.device),
        severity=args.severity,
        trim_empty_part=args.trim,
    ) as remover:
        for img_path in tqdm(images, desc="Removing backgrounds", unit="img"):
            stem = _output_stem(img_path, input_path)
            out_path = output_dir / "rgba" / stem.with_suffix(".png")
            meta_path = output_dir / "metadata" / stem.with_suffix(".json")

            image = load_image(str(img_path))
            report = dict(
                source_path=str(img_path.resolve()),
                width=image.width,
                height=image.height,
                severity=args.severity,
                trimmed=args.trim,
            )
            try:
                result = remover.remove(image)
            except ForegroundNotFound as e:
                report.update(status="no_foreground", transparency_ratio=e.transparency_ratio, error=str(e))
            except EmptyTrimRegion as e:
                report.update(status="empty_trim", error=str(e))
            except SegmenterFailure as e:
                if not args.keep_going:
                    raise
                report.update(status="segmenter_failure", error=str(e))
            else:
                save_rgba_png(result.image, str(out_path))
                report.update(
                    status="ok",
                    output_path=str(out_path.resolve()),
                    output_width=result.image.width,
                    output_height=result.image.height,
                    transparency_ratio=result.transparency_ratio,
                    bbox=result.bbox.as_tuple() if result.bbox is not None else None,
                    total_s=result.timings.total_s,
                )

            rec = RemovalReport(**report)
            stats["total"] += 1
            stats[rec.status] += 1
            write_json(str(meta_path), rec.model_dump())

    t1 = time.perf_counter()
    print(
        "Done.\n"
        f"- total: {stats['total']}\n"
        f"- ok: {stats['ok']}\n"
        f"- no_foreground: {stats['no_foreground']}\n"
        f"- empty_trim: {stats['empty_trim']}\n"
        f"- segmenter_failure: {stats['segmenter_failure']}\n"
        f"- elapsed_s: {t1 - t0:.2f}\n"
        f"- output: {output_dir.resolve()}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
