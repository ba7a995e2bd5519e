"""CLI for posepointer: ``posepointer replay`` and ``posepointer config``."""

import argparse
import logging
import sys
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def _parse_size(value: str) -> Tuple[float, float]:
    """Parse ``WIDTHxHEIGHT`` (e.g. 1920x1080)."""
    try:
        w, h = value.lower().split("x")
        return float(w), float(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {value!r}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="posepointer",
        description="Turn recorded pose keypoints into smoothed pointer positions",
    )
    sub = parser.add_subparsers(dest="command")

    # posepointer replay
    replay_p = sub.add_parser("replay", help="Replay a recorded pose stream (JSON Lines)")
    replay_p.add_argument("input", help="Pose stream file, or - for stdin")
    replay_p.add_argument(
        "--viewport",
        type=_parse_size,
        required=True,
        help="Viewport size as WIDTHxHEIGHT (e.g. 1920x1080)",
    )
    replay_p.add_argument(
        "--config", "-c",
        default=None,
        help="YAML configuration file",
    )
    replay_p.add_argument(
        "--stack-size",
        type=int,
        default=None,
        help="Override pose_stack_size",
    )
    replay_p.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop after N processed frames",
    )
    replay_p.add_argument(
        "-o", "--output",
        default=None,
        help="Output file for enriched frames (default: stdout)",
    )
    replay_p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    # posepointer config
    config_p = sub.add_parser("config", help="Print the effective configuration")
    config_p.add_argument(
        "--config", "-c",
        default=None,
        help="YAML configuration file",
    )

    return parser


def _load_config(path: Optional[str], stack_size: Optional[int] = None):
    from dataclasses import replace

    from posepointer.config import PointerConfig

    config = PointerConfig.from_yaml(path) if path else PointerConfig()
    if stack_size is not None:
        config = replace(config, pose_stack_size=stack_size)
    return config


def _cmd_replay(args: argparse.Namespace) -> None:
    """Handle ``posepointer replay``."""
    from posepointer.codec import read_pose_frames, write_pose_frame
    from posepointer.pointer import PosePointer

    config = _load_config(args.config, args.stack_size)
    pointer = PosePointer(config, viewport=args.viewport)

    source = sys.stdin if args.input == "-" else args.input
    out = open(args.output, "w") if args.output else sys.stdout

    def on_frame(frame, poses):
        write_pose_frame(out, frame.frame_id, frame.t_ns, frame.surface, poses)

    try:
        result = pointer.run(
            read_pose_frames(source),
            max_frames=args.max_frames,
            on_frame=on_frame,
        )
    finally:
        if out is not sys.stdout:
            out.close()

    logger.info("Replayed %d frames", result.frame_count)


def _cmd_config(args: argparse.Namespace) -> None:
    """Handle ``posepointer config``."""
    import yaml

    config = _load_config(args.config)
    print(yaml.safe_dump(config.to_dict(), sort_keys=False), end="")


def main(argv=None):
    """Entry point for ``posepointer`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    try:
        if args.command == "replay":
            _cmd_replay(args)
        elif args.command == "config":
            _cmd_config(args)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
