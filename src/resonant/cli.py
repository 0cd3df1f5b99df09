"""
CLI entry point.

Usage:
    resonant info [--user ID] [--date YYYY-MM-DD] [--time T]
    resonant slice out.png [options]
    resonant sonify out.wav [options]
    resonant gesture swipe --intensity 0.8 --direction 1
    resonant freeze | share | battle <token-or-url>
    resonant token [--hours H] | redeem <token>
"""

import argparse
import datetime
import json
import sys
import time
from pathlib import Path

from resonant.audio.extractor import create_harmonic_series
from resonant.audio.synth import note_names, render_chord, write_wav
from resonant.config import load_config
from resonant.engine import FrameDriver
from resonant.fractals import get_name
from resonant.io.preview import render_slice, save_image
from resonant.io.messages import MessageBoard
from resonant.io.share import (
    ShareDecodeError,
    create_share_url,
    create_temporary_share_token,
    decode_snapshot,
    parse_share_url,
    validate_share_token,
)
from resonant.user.state import JsonStateStore, UserState


def _parse_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date (expected YYYY-MM-DD): {value}"
        ) from None


def _now_ms() -> int:
    return int(time.time() * 1000)


def _load_board(store: JsonStateStore, user_id: str) -> MessageBoard:
    items = store.load().get("pending_messages", [])
    try:
        return MessageBoard.from_list(user_id, items)
    except (TypeError, ValueError) as e:
        print(f"Invalid pending_messages: {e}. Starting fresh.")
        return MessageBoard(user_id)


def _save_board(store: JsonStateStore, board: MessageBoard):
    data = store.load()
    data["pending_messages"] = board.to_list()
    store.save(data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resonant",
        description="Seeded 4D fractal fields and their sonification",
    )
    parser.add_argument("--user", type=str, default=None, help="User id (default: saved or new)")
    parser.add_argument(
        "--date", type=_parse_date, default=None,
        help="Calendar day for the seed (default: today)",
    )
    parser.add_argument("-t", "--time", type=float, default=0.0, help="Field time (default: 0.0)")
    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument("--state", type=Path, default=None, help="State file (overrides config)")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="Print today's fractal and its frequencies")

    p_slice = sub.add_parser("slice", help="Render a planar slice preview to PNG")
    p_slice.add_argument("output", type=Path)
    p_slice.add_argument("--width", type=int, default=None)
    p_slice.add_argument("--height", type=int, default=None)
    p_slice.add_argument("-z", type=float, default=0.0, help="Slice z coordinate")
    p_slice.add_argument("-w", type=float, default=0.0, help="Slice w coordinate")

    p_sonify = sub.add_parser("sonify", help="Render the frame's frequencies to WAV")
    p_sonify.add_argument("output", type=Path)
    p_sonify.add_argument("--duration", type=float, default=None, help="Seconds (default: config)")
    p_sonify.add_argument(
        "--harmonics", action="store_true",
        help="Add the harmonic series of the lowest frequency",
    )

    p_gesture = sub.add_parser("gesture", help="Apply a gesture to today's transform")
    p_gesture.add_argument("gesture", choices=["swipe", "pinch", "tilt", "smile"])
    p_gesture.add_argument("--intensity", type=float, default=1.0)
    p_gesture.add_argument("--direction", type=float, default=1.0)

    sub.add_parser("freeze", help="Freeze today's fractal and print its snapshot")
    sub.add_parser("share", help="Print a share URL for today's fractal")

    p_token = sub.add_parser("token", help="Print a time-limited token for today's seed")
    p_token.add_argument("--hours", type=float, default=None, help="Lifetime (default: config)")

    p_redeem = sub.add_parser("redeem", help="Validate a time-limited token")
    p_redeem.add_argument("token", type=str)

    p_battle = sub.add_parser("battle", help="Battle today's fractal against a shared one")
    p_battle.add_argument("opponent", type=str, help="Share token or share URL")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config is not None and not args.config.exists():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    date = args.date or datetime.date.today()
    store = JsonStateStore(args.state or config.state_path)
    user = UserState.load(store, date, user_id=args.user)
    driver = FrameDriver(user, time=args.time)
    frame = driver.step(0.0)

    if args.command == "info":
        print(driver.fractal_info())
        print(f"  Notes: {' '.join(note_names(frame.frequencies))}")

    elif args.command == "slice":
        width = args.width or config.preview_width
        height = args.height or config.preview_height
        print(f"Rendering {get_name(frame.field)} slice at {width}x{height} (z={args.z}, w={args.w})")
        t0 = time.time()
        image = render_slice(
            frame.field, width, height, z=args.z, w=args.w, extent=config.preview_extent,
        )
        output = save_image(image, args.output)
        print(f"  Took {time.time() - t0:.2f}s")
        print(f"  Output: {output}")

    elif args.command == "sonify":
        frequencies = list(frame.frequencies)
        if args.harmonics:
            frequencies += create_harmonic_series(min(frequencies), config.harmonics)[1:]
        duration = args.duration if args.duration is not None else config.tone_duration
        samples = render_chord(
            frequencies, duration=duration, sr=config.sample_rate,
            master_volume=config.master_volume,
        )
        output = write_wav(args.output, samples, sr=config.sample_rate)
        print(f"Frequencies: {', '.join(f'{f:.1f}' for f in frequencies)}")
        print(f"  Output: {output}")

    elif args.command == "gesture":
        user.apply_gesture(args.gesture, args.intensity, args.direction)
        print(f"Applied {args.gesture}: complexity {user.complexity_score():.3f}, "
              f"interactions {user.interactions}")

    elif args.command == "freeze":
        frozen = user.freeze(_now_ms())
        print(frozen.to_json())

    elif args.command == "share":
        now = _now_ms()
        snapshot = user.snapshot(now)
        board = _load_board(store, user.user_id)
        board.clear_old_messages(config.message_max_age_hours, now)
        board.broadcast_morning(snapshot, now)
        _save_board(store, board)
        print(create_share_url(snapshot, user.user_id, config.share_domain))

    elif args.command == "token":
        hours = args.hours if args.hours is not None else config.share_token_hours
        now = _now_ms()
        print(create_temporary_share_token(user.snapshot(now), user.user_id, hours, now))

    elif args.command == "redeem":
        try:
            seed = validate_share_token(args.token, _now_ms())
        except ShareDecodeError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Token grants seed {seed}")

    elif args.command == "battle":
        try:
            if "?" in args.opponent:
                opponent, sender = parse_share_url(args.opponent, _now_ms())
            else:
                opponent, sender = decode_snapshot(args.opponent, _now_ms()), ""
        except ShareDecodeError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        result = user.battle_against(opponent, _now_ms())
        if sender:
            print(f"Battling {sender}'s {opponent.fractal_type}")
        print(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    main()
