# main.py
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from vocalflow.ConfigLoader import load_config
from vocalflow.DictationApp import DictationApp
from vocalflow.LoggingSetup import setup_logging
from vocalflow.PathResolver import PathResolver
from vocalflow.analytics.TimeSavingsCalculator import format_time_savings

CONFIG_FILE_NAME = "vocalflow_config.json"

_path_resolver = PathResolver(Path(__file__))
PATHS = _path_resolver.paths


def _parse_args(argv: list[str]) -> tuple[bool, Optional[Path], Optional[Path]]:
    """Parse CLI arguments.

    Returns:
        Tuple of (verbose, config_path, input_file).
    """
    verbose = "-v" in argv
    config_path: Optional[Path] = None
    input_file: Optional[Path] = None

    for arg in argv[1:]:
        if arg.startswith("--config="):
            config_path = Path(arg.split("=", 1)[1])
        elif arg.startswith("--input-file="):
            input_file = Path(arg.split("=", 1)[1])

    return verbose, config_path, input_file


async def _run(app: DictationApp, input_file: Optional[Path]) -> int:
    await app.start()

    exit_code = 0
    if input_file is not None:
        outcome = await app.transcribe_file(input_file)
        if outcome.succeeded:
            print(outcome.session.transcription_text)
        else:
            print(outcome.message, file=sys.stderr)
            exit_code = 2
        await app.refresh_stats()

    await app.startup_queue.wait_until_idle()

    stats = app.latest_stats or app.get_stats()
    print(json.dumps(stats.to_dict(), indent=2, default=str))
    print(f"Time saved: {format_time_savings(stats.estimated_time_saved_ms)}")
    for insight in app.get_insights():
        print(f"- {insight}")
    return exit_code


def main(argv: list[str]) -> int:
    verbose, config_path, input_file = _parse_args(argv)
    is_frozen = getattr(sys, 'frozen', False)

    _path_resolver.ensure_local_dir_structure()
    setup_logging(PATHS.logs_dir, verbose=verbose, is_frozen=is_frozen)

    config = load_config(config_path or _path_resolver.get_config_path(CONFIG_FILE_NAME))
    app = DictationApp(config, PATHS)
    return asyncio.run(_run(app, input_file))


if __name__ == "__main__":
    try:
        sys.exit(main(sys.argv))
    except KeyboardInterrupt:
        logging.info("Interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"ERROR: {type(e).__name__}: {e}", exc_info=True)
        sys.exit(1)
