#!/usr/bin/env python3
"""Search an image corpus for faces matching a query photo.

Runs the same search pipeline as the HTTP API from the command line and
prints the ranked matches with the diagnostic counters.

Usage:
    python scripts/run_search.py --image query.jpg
    python scripts/run_search.py --image query.jpg --corpus images --threshold 0.45
    python scripts/run_search.py --image query.jpg --workers 4 --json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from face_search.backends import create_descriptor_source
from face_search.config import Config
from face_search.corpus import DirectoryCorpus
from face_search.errors import FaceSearchError
from face_search.logging_config import setup_logging
from face_search.schemas import SearchResponse
from face_search.services.search import SearchService

logger = setup_logging(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Find stored images containing a face from the query image",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--image",
        type=str,
        required=True,
        help="Path to query image file",
    )

    parser.add_argument(
        "--corpus",
        type=str,
        default=None,
        help="Directory of stored images (default: IMAGE_DIR from .env)",
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Euclidean distance threshold, lower=stricter (default: THRESH from .env)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Parallel candidate evaluations (default: MAX_WORKERS from .env)",
    )

    parser.add_argument(
        "--detector-model",
        type=str,
        choices=["hog", "cnn"],
        default=None,
        help="Face detector model (hog=faster, cnn=more accurate)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the API-shaped JSON response instead of a table",
    )

    return parser.parse_args()


def print_section(title: str) -> None:
    """Print a section divider."""
    print()
    print("=" * 70)
    print(f"  {title}")
    print("=" * 70)


def main() -> int:
    """Main function."""
    args = parse_args()
    config = Config.from_env()

    corpus_dir = Path(args.corpus) if args.corpus else config.image_dir
    threshold = args.threshold if args.threshold is not None else config.thresh
    workers = args.workers if args.workers is not None else config.max_workers

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"Error: Image not found: {image_path}")
        return 1

    overrides = {}
    if args.detector_model:
        overrides["detector_model"] = args.detector_model

    try:
        service = SearchService(
            descriptor_source=create_descriptor_source(config.backend, config, **overrides),
            corpus=DirectoryCorpus(corpus_dir),
            threshold=threshold,
            max_workers=workers,
        )
        outcome = service.search(image_path.read_bytes())
    except (FaceSearchError, ValueError) as e:
        logger.error(f"Search failed: {e}")
        print(f"Error: {e}")
        return 1

    if args.json:
        print(json.dumps(SearchResponse.from_outcome(outcome).to_payload(), indent=2))
        return 0

    print_section("Face Search")
    print(f"Query:      {image_path}")
    print(f"Corpus:     {corpus_dir}")
    print(f"Threshold:  {threshold}")

    if not outcome.found_faces:
        print()
        print(outcome.error)
        return 0

    print_section(f"Matches ({outcome.successful_comparisons})")
    if not outcome.matches:
        print("No matching images")
    for rank, match in enumerate(outcome.matches, 1):
        print(f"{rank:3d}. {match.candidate_id:<40} {match.similarity:3d}%  (d={match.distance:.3f})")

    print_section("Summary")
    print(f"Detected faces:  {outcome.detected_faces}")
    print(f"Compared files:  {outcome.compared_files}")
    print(f"Matches:         {outcome.successful_comparisons}")
    if outcome.failed_files:
        print(f"Failed files:    {', '.join(outcome.failed_files)}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
