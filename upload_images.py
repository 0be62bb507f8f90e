"""
Upload Images

Helper script to push local images to a running imagehost service.

Usage:
    python upload_images.py image1.jpg image2.jpg image3.jpg

The script will:
    1. Check that every path exists and has an image extension.
    2. Upload the files to /api/upload in batches of at most 5.
    3. Print the outcome reported for each file.

Set IMAGEHOST_URL to target another server and UPLOAD_SECRET when the
server requires one.
"""

import os
import sys
from pathlib import Path

import requests
from dotenv import load_dotenv

load_dotenv()

SERVICE_URL = os.getenv("IMAGEHOST_URL", "http://localhost:5000").rstrip("/")
UPLOAD_SECRET = os.getenv("UPLOAD_SECRET")

BATCH_SIZE = 5

CONTENT_TYPE_MAP = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


def batched(paths: list[Path], size: int = BATCH_SIZE) -> list[list[Path]]:
    return [paths[i:i + size] for i in range(0, len(paths), size)]


def upload_batch(paths: list[Path]) -> dict:
    """Upload one batch and return the service's JSON report."""
    headers = {}
    if UPLOAD_SECRET:
        headers["Authorization"] = f"Bearer {UPLOAD_SECRET}"

    handles = [open(p, "rb") for p in paths]
    try:
        files = [
            ("images", (p.name, fh, CONTENT_TYPE_MAP[p.suffix.lower()]))
            for p, fh in zip(paths, handles)
        ]
        resp = requests.post(
            f"{SERVICE_URL}/api/upload",
            headers=headers,
            files=files,
            timeout=120,
        )
    finally:
        for fh in handles:
            fh.close()
    resp.raise_for_status()
    return resp.json()


def main():
    if len(sys.argv) < 2:
        print("Usage: python upload_images.py <image1.jpg> [image2.jpg ...]")
        print("\nUpload one or more images to the imagehost service.")
        sys.exit(1)

    image_paths = [Path(p) for p in sys.argv[1:]]

    # Validate all files before starting
    for path in image_paths:
        if not path.is_file():
            print(f"Error: File not found: {path}")
            sys.exit(1)
        if path.suffix.lower() not in CONTENT_TYPE_MAP:
            print(f"Error: Unsupported format '{path.suffix}'. Use: .jpg, .jpeg, .png, .webp")
            sys.exit(1)

    uploaded = 0
    for batch in batched(image_paths):
        print(f"\nUploading {len(batch)} file(s)...")
        report = upload_batch(batch)
        for item in report["results"]:
            line = f"  {item['filename']}: {item['status']}"
            if item.get("error"):
                line += f" ({item['error']})"
            elif not item.get("preview", True):
                line += " (no preview)"
            print(line)
            if item["status"] == "success":
                uploaded += 1

    print("\n" + "=" * 50)
    print(f"Images uploaded: {uploaded}/{len(image_paths)}")
    print("=" * 50)
    print(f"\nBrowse them at: {SERVICE_URL}/api/imgs")


if __name__ == "__main__":
    main()
