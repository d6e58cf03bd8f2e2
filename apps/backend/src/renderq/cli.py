"""renderq command-line interface with subcommands.

Usage:
    renderq-cli serve [--host HOST] [--port PORT]
    renderq-cli render <request.json> [--poll-interval 1.0]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from renderq.config import settings
from renderq.jobs.models import CompletedJob, FailedJob, InProgressJob, JobData, is_terminal


# --- Serve subcommand ---

def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP API."""
    from renderq.main import main as run_server

    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port
    run_server()


# --- Render subcommand ---

def _load_request(path: Path) -> JobData:
    """Read a render request (tracks, durationInFrames, fps, width, height)."""
    try:
        return JobData.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"Error: invalid render request {path}: {e}", file=sys.stderr)
        sys.exit(1)


async def cmd_render(args: argparse.Namespace) -> None:
    """Render one request in-process and print the resulting URL."""
    from renderq.api.deps import build_render_queue

    request_path = Path(args.input).resolve()
    if not request_path.exists():
        print(f"Error: file not found: {request_path}", file=sys.stderr)
        sys.exit(1)

    data = _load_request(request_path)
    settings.ensure_directories()
    queue = build_render_queue(settings)
    queue.start()

    job_id = queue.create_job(data)
    print(f"Job {job_id} queued ({len(data.tracks)} tracks, {data.duration_in_frames} frames)")

    try:
        while True:
            state = queue.get_job(job_id)
            if isinstance(state, InProgressJob):
                bar_width = 30
                filled = int(bar_width * state.progress)
                bar = "=" * filled + "-" * (bar_width - filled)
                print(f"\r  [{bar}] {state.progress*100:.0f}%", end="", flush=True)
            if is_terminal(state):
                break
            await asyncio.sleep(args.poll_interval)
    except (KeyboardInterrupt, asyncio.CancelledError):
        queue.cancel_job(job_id)
        raise
    finally:
        await queue.stop()
    print()  # newline after progress bar

    if isinstance(state, CompletedJob):
        print(f"Completed: {state.video_url}")
    elif isinstance(state, FailedJob):
        print(f"Failed: {state.error_type}: {state.error}", file=sys.stderr)
        sys.exit(1)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="renderq-cli",
        description="renderq - serialized video composition renderer",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", type=str, help=f"Bind host (default: {settings.host})")
    p_serve.add_argument("--port", type=int, help=f"Bind port (default: {settings.port})")

    # --- render ---
    p_render = subparsers.add_parser("render", help="Render a single request")
    p_render.add_argument("input", type=str, help="Render request JSON file")
    p_render.add_argument("--poll-interval", type=float, default=1.0, help="Status poll interval in seconds")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Dispatch
    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "render":
        asyncio.run(cmd_render(args))


if __name__ == "__main__":
    main()
