from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# ---- sys.path bootstrap ----
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
# ----------------------------

from ipm_packager.core.errors import PackageBuildError  # noqa: E402
from ipm_packager.core.packager import IpmPackager  # noqa: E402
from ipm_packager.core.providers.filesystem import FilesystemContentProvider  # noqa: E402


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Package a directory as a BagIt-style zip")
    ap.add_argument("content_dir", help="Directory whose files become the payload")
    ap.add_argument("--metadata", help="Package metadata properties file")
    ap.add_argument("--params", help="Package generation parameters properties file")
    ap.add_argument("--name", help="Package name (overrides defaults, not the params file)")
    ap.add_argument("--location", help="Output directory (overrides defaults, not the params file)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    content_dir = Path(args.content_dir)
    if not content_dir.is_dir():
        print(f"ERROR: not a directory: {content_dir}", file=sys.stderr)
        return 2

    packager = IpmPackager()
    if args.name:
        packager.package_name = args.name
    if args.location:
        packager.package_location = args.location

    metadata = Path(args.metadata).read_bytes() if args.metadata else None
    params = Path(args.params).read_bytes() if args.params else None

    try:
        pkg = packager.build_package(FilesystemContentProvider(content_dir), metadata, params)
    except PackageBuildError as e:
        print(f"ERROR: package build failed at {e.stage}: {e}", file=sys.stderr)
        return 1

    print(f"Wrote: {pkg.path} ({pkg.size} bytes)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
