"""
Command-line front end.

    pixert plan  IMAGE --splits 4 --ratio 4:5           # print rectangles
    pixert split IMAGE --splits 4 --ratio 4:5 --gallery ~/Pictures/pixert

Exit codes: 0 complete, 1 error or failed export, 2 saved but not all
tiles attached to the collection.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pixert import __version__
from pixert.config import ExportConfig, load_config
from pixert.core.errors import PixertError
from pixert.core.models import ExportStatus, ImageSize, LayoutParameters
from pixert.export import DirectoryGallery, MemoryGallery, export_carousel, probe_image_size
from pixert.geometry import ASPECT_RATIO_PRESETS, Alignment, compute_grid, layout_parameters, resolve

logger = logging.getLogger("pixert")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixert",
        description="Split a photo into a row of carousel tiles",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_layout_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("image", type=Path, help="Source image")
        p.add_argument("--splits", "-n", type=int, required=True, help="Number of tiles (>= 2)")
        p.add_argument(
            "--ratio", "-r", default="4:5",
            help=f"Tile aspect ratio, preset {sorted(ASPECT_RATIO_PRESETS)} or any W:H",
        )
        p.add_argument("--scale", type=float, default=1.0, help="Grid scale in (0, 1]")
        p.add_argument(
            "--align", choices=[a.value for a in Alignment], default=Alignment.TOP.value,
            help="Vertical alignment of the row",
        )
        p.add_argument("--drag-offset", type=float, default=None,
                       help="Custom alignment: dragged grid top in preview pixels (default centred)")
        p.add_argument("--preview-width", type=float, default=None,
                       help="Custom alignment: preview width in pixels (default image width)")
        p.add_argument("--preview-height", type=float, default=None,
                       help="Custom alignment: preview height in pixels (default image height)")
        p.add_argument("--vertical-offset", type=float, default=None,
                       help="Vertical offset ratio [0, 1]; overrides --align")
        p.add_argument("--horizontal-offset", type=float, default=0.0,
                       help="Horizontal offset ratio [0, 1]")

    plan = sub.add_parser("plan", help="Print the crop rectangles as JSON")
    add_layout_args(plan)

    split = sub.add_parser("split", help="Crop, save and collect the tiles")
    add_layout_args(split)
    target = split.add_mutually_exclusive_group(required=True)
    target.add_argument("--gallery", type=Path, help="Gallery root directory")
    target.add_argument("--dry-run", action="store_true",
                        help="Encode tiles in memory without writing anything")
    split.add_argument("--collection", default=None, help="Collection name (default from config)")
    split.add_argument("--config", type=Path, default=None, help="ExportConfig JSON file")

    return parser


def _layout_from_args(args: argparse.Namespace, size: ImageSize) -> LayoutParameters:
    # Without a preview, the source image stands in for it
    params = layout_parameters(
        args.splits,
        args.ratio,
        scale_percent=args.scale,
        alignment=Alignment(args.align),
        drag_offset=args.drag_offset,
        preview_width=args.preview_width or size.width,
        preview_height=args.preview_height or size.height,
        horizontal_offset_ratio=args.horizontal_offset,
    )
    if args.vertical_offset is not None:
        params = LayoutParameters(
            split_count=params.split_count,
            aspect_ratio=params.aspect_ratio,
            scale_percent=params.scale_percent,
            vertical_offset_ratio=args.vertical_offset,
            horizontal_offset_ratio=params.horizontal_offset_ratio,
        )
    return params


def _cmd_plan(args: argparse.Namespace) -> int:
    size = probe_image_size(args.image)
    params = _layout_from_args(args, size)
    grid = compute_grid(size, params)
    crops = resolve(size, params)
    print(json.dumps({
        "image": {"width": size.width, "height": size.height},
        "constraint": grid.axis.value,
        "tile": {"width": grid.tile_width, "height": grid.tile_height},
        "rectangles": crops.to_list(),
    }, indent=2))
    return EXIT_OK


def _cmd_split(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else ExportConfig()
    size = probe_image_size(args.image)
    params = _layout_from_args(args, size)
    crops = resolve(size, params)
    logger.info(f"Source {args.image.name} is {size.width}x{size.height}; {len(crops)} tiles")

    adapter = MemoryGallery() if args.dry_run else DirectoryGallery(args.gallery)

    def report(percent: float) -> None:
        logger.info(f"{percent:5.1f}%")

    result = export_carousel(
        args.image,
        crops,
        args.collection,
        adapter=adapter,
        config=config,
        on_progress=report,
    )
    print(json.dumps(result.to_dict(), indent=2))
    for issue in result.issues:
        logger.warning(str(issue))

    if result.status is ExportStatus.COMPLETE:
        return EXIT_OK
    if result.status is ExportStatus.PARTIAL_ATTACH:
        return EXIT_PARTIAL
    return EXIT_ERROR


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "plan":
            return _cmd_plan(args)
        return _cmd_split(args)
    except (PixertError, ValueError, OSError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
