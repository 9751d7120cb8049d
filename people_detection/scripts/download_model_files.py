#!/usr/bin/env python3
"""Download the MobileNet-SSD model files and class labels."""
from __future__ import annotations

import argparse
from pathlib import Path

import requests

MODEL_FILES = {
    "deploy.prototxt": "https://raw.githubusercontent.com/chuanqi305/MobileNet-SSD/master/deploy.prototxt",
    "mobilenet_iter_73000.caffemodel": "https://raw.githubusercontent.com/chuanqi305/MobileNet-SSD/master/mobilenet_iter_73000.caffemodel",
    "coco.names": "https://raw.githubusercontent.com/pjreddie/darknet/master/data/coco.names",
}


def download_file(url: str, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    response = requests.get(url, timeout=60)
    response.raise_for_status()
    target.write_bytes(response.content)
    print(f"Downloaded {url} to {target}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Download people detection model files")
    parser.add_argument("--output", type=Path, default=Path("."), help="Destination directory")
    parser.add_argument("--only", choices=MODEL_FILES.keys(), default=None, help="Download a single file")
    parser.add_argument("--force", action="store_true", help="Overwrite files that already exist")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    names = [args.only] if args.only else list(MODEL_FILES)
    for name in names:
        target = args.output / name
        if target.exists() and not args.force:
            print(f"{target} already exists, skipping")
            continue
        download_file(MODEL_FILES[name], target)


if __name__ == "__main__":
    main()
