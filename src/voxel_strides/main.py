"""Command-line interface for photo-proof task verification."""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from .verification.exceptions import ImageAnalysisError
from .verification.image_analysis.detectors import download_pose_model
from .verification.logging_utils import configure_logging
from .verification.models import (
    TaskCategory,
    TaskDescriptor,
    TaskPriority,
    VerificationProgress,
    VerificationResult,
)
from .verification.nltk_tagger import download_resources
from .verification.service import TaskVerificationService, create_default_service

EXIT_VERIFIED = 0
EXIT_USAGE_ERROR = 1
EXIT_REJECTED = 2

PROGRESS_BAR_WIDTH = 20


class VerificationCLI:
    """Command-line front end for the verification service."""

    def __init__(
        self,
        service: TaskVerificationService | None = None,
        seed: int | None = None,
        enable_pose: bool = True,
        pose_model_path: str | None = None,
        output_json: bool = False,
    ) -> None:
        """
        Initialize the CLI.

        Args:
            service: Optional TaskVerificationService. If None, creates the default one.
            seed: Seed for filler-label sampling
            enable_pose: Whether to run pose detection
            pose_model_path: Optional MediaPipe pose model file
            output_json: Print the result as JSON instead of text
        """
        self._service = service or create_default_service(
            seed=seed, pose_model_path=pose_model_path, enable_pose=enable_pose
        )
        self._output_json = output_json

    def _on_progress(self, progress: VerificationProgress) -> None:
        if self._output_json:
            return
        filled = round(progress.fraction * PROGRESS_BAR_WIDTH)
        bar = "█" * filled + "░" * (PROGRESS_BAR_WIDTH - filled)
        label = progress.phase.value.replace("_", " ")
        print(f"\r{bar} {progress.fraction:>4.0%} {label:<22}", end="", flush=True)
        if progress.fraction >= 1.0:
            print()

    async def verify(self, task: TaskDescriptor, image_path: Path) -> VerificationResult | None:
        """
        Verify a task against an image file, printing progress as it goes.

        Args:
            task: Task to verify
            image_path: Proof image file

        Returns:
            The final VerificationResult, or None if the stream ended without one
        """
        result: VerificationResult | None = None
        async for event in self._service.verify_stream(task, image_path):
            if isinstance(event, VerificationProgress):
                self._on_progress(event)
            else:
                result = event
        if result is None:
            logging.error("Verification ended without a result")
        return result

    def print_result(self, result: VerificationResult) -> None:
        """Print a verification result as text or JSON."""
        if self._output_json:
            print(json.dumps(asdict(result), indent=2, default=str))
            return

        icon = "✅" if result.completed else "❌"
        print(f"{icon} {result.status.value.upper()} (confidence {result.confidence:.0%})")
        print(result.feedback)
        if result.matched_elements:
            print("Evidence:")
            for element in result.matched_elements:
                print(f"  • {element}")


async def main(
    task: TaskDescriptor,
    image_path: Path,
    seed: int | None = None,
    enable_pose: bool = True,
    pose_model_path: str | None = None,
    output_json: bool = False,
) -> int:
    """
    Main entry point for a single verification.

    Returns:
        Process exit code
    """
    cli = VerificationCLI(
        seed=seed,
        enable_pose=enable_pose,
        pose_model_path=pose_model_path,
        output_json=output_json,
    )
    result = await cli.verify(task, image_path)
    if result is None:
        return EXIT_USAGE_ERROR
    cli.print_result(result)
    return EXIT_VERIFIED if result.completed else EXIT_REJECTED


class VerifierArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit code 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE_ERROR, f"{self.prog}: error: {message}\n")


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = VerifierArgumentParser(
        prog="voxel-strides-verify",
        description="Voxel Strides Verifier - Check a photo as proof of task completion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  voxel-strides-verify desk.jpg --title "Clean my desk" --category home
  voxel-strides-verify gym.jpg --title "Leg day" --category exercise --json
  voxel-strides-verify photo.png --title "Study notes" --seed 42 -v
  voxel-strides-verify --download-models       # Fetch NLTK data and the pose model

Exit codes:
  0  task verified
  1  usage error
  2  task not verified (including unreadable images)
        """,
    )

    parser.add_argument("image", nargs="?", type=Path, help="Proof image file")

    parser.add_argument("--title", type=str, help="Task title")

    parser.add_argument("--notes", type=str, default="", help="Task notes")

    parser.add_argument(
        "--category",
        type=str,
        choices=[c.value for c in TaskCategory],
        default=TaskCategory.OTHER.value,
        help="Task category (default: other)",
    )

    parser.add_argument(
        "--priority",
        type=str,
        choices=[p.value for p in TaskPriority],
        default=TaskPriority.MEDIUM.value,
        help="Task priority (default: medium)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for filler-label sampling, for reproducible results",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the verification result as JSON",
    )

    parser.add_argument(
        "--no-pose",
        action="store_true",
        help="Skip human pose detection",
    )

    parser.add_argument(
        "--pose-model",
        type=str,
        default=None,
        metavar="PATH",
        help="MediaPipe pose landmarker model (default: ~/.cache/voxel_strides/verification/models)",
    )

    parser.add_argument(
        "--download-models",
        action="store_true",
        help="Download NLTK tagger data and the pose model, then exit unless an image is given",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging and debug information",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable trace logging (most verbose, includes per-rule scoring)",
    )

    return parser


def download_models(pose_model_path: str | None = None) -> bool:
    """
    Download NLTK data and the MediaPipe pose model.

    Returns:
        True if every download succeeded
    """
    success = download_resources()
    try:
        download_pose_model(Path(pose_model_path) if pose_model_path else None)
    except ImageAnalysisError as e:
        logging.error(f"Error downloading pose model: {e}")
        success = False
    return success


def handle_arguments(args: argparse.Namespace) -> tuple[bool, bool]:
    """
    Handle parsed command-line arguments.

    Args:
        args: Parsed arguments from argparse

    Returns:
        Tuple of (success, should_continue):
        - success: True if all operations succeeded, False if any failed
        - should_continue: True if a verification should run
    """
    configure_logging(verbose=args.verbose, trace=args.trace)

    if args.download_models:
        if download_models(args.pose_model):
            print("✅ Models downloaded successfully.")
        else:
            print("❌ Failed to download some models.")
            return False, False
        if args.image is None:
            return True, False

    if args.image is None:
        print("❌ An image file is required.", file=sys.stderr)
        return False, False

    if not args.title or not args.title.strip():
        print("❌ --title is required.", file=sys.stderr)
        return False, False

    if not args.image.is_file():
        print(f"❌ Image file not found: {args.image}", file=sys.stderr)
        return False, False

    return True, True


def build_task(args: argparse.Namespace) -> TaskDescriptor:
    return TaskDescriptor(
        title=args.title.strip(),
        notes=args.notes,
        category=TaskCategory(args.category),
        priority=TaskPriority(args.priority),
    )


def cli_entry_with_args(argv: list[str] | None = None) -> None:
    """CLI entry point with argument parsing."""
    parser = create_argument_parser()

    try:
        args = parser.parse_args(argv)

        success, should_continue = handle_arguments(args)

        if not success:
            sys.exit(EXIT_USAGE_ERROR)

        if not should_continue:
            sys.exit(EXIT_VERIFIED)

        exit_code = asyncio.run(
            main(
                task=build_task(args),
                image_path=args.image,
                seed=args.seed,
                enable_pose=not args.no_pose,
                pose_model_path=args.pose_model,
                output_json=args.json,
            )
        )
        sys.exit(exit_code)

    except KeyboardInterrupt:
        sys.exit(EXIT_USAGE_ERROR)


if __name__ == "__main__":
    cli_entry_with_args()
