#!/usr/bin/env python3
import sys
from pathlib import Path

from cquant.errors import ImageIOError
from cquant.file_utils import read_cquant_metadata


def print_png_metadata(filepath: Path) -> int:
    """
    Prints the cquant metadata block of a PNG written by cquantgen.
    """
    print(f"--- cquant Metadata for PNG: {filepath.name} ---")
    try:
        metadata = read_cquant_metadata(filepath)
    except ImageIOError as e:
        print(f"Error: {e}")
        return 1

    if metadata:
        for key, value in metadata.items():
            print(f"  {key}: {value}")
    else:
        print("  No cquant-specific metadata found.")
    print("-" * (30 + len(filepath.name)))
    return 0


def main():
    if len(sys.argv) < 2:
        print("Usage: python extract_cquant_meta.py <filename.png>")
        sys.exit(1)

    filepath = Path(sys.argv[1])
    if not filepath.is_file():
        print(f"Error: File not found: {filepath}")
        sys.exit(1)

    if filepath.suffix.lower() != ".png":
        print(f"Error: Unsupported file type '{filepath.suffix}'. Metadata is only embedded in .png files.")
        sys.exit(1)

    sys.exit(print_png_metadata(filepath))


if __name__ == "__main__":
    main()
