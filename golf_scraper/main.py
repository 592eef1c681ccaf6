"""
Command line entry point: run one golf-store scrape job to completion.
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import STATE_BACKENDS, RateLimitConfig, RetryConfig, ScraperConfig
from .errors import SetupError
from .jobs import build_catalogue
from .logging_setup import LOGGER_NAME, setup_logging
from .models import JobOutcome
from .scraper_controller import ScraperController
from .storage_factory import create_checkpoint_store, create_result_sink

logger = logging.getLogger(f"{LOGGER_NAME}.cli")


def build_config(args) -> ScraperConfig:
    return ScraperConfig(
        concurrency=args.concurrency,
        data_dir=args.data_dir,
        state_dir=args.state_dir,
        state_backend=args.state_backend,
        rate_limit=RateLimitConfig(delay=args.delay, more_delay=args.more_delay),
        retry=RetryConfig(max_attempts=args.retries),
    )


def install_stop_handlers(controller: ScraperController, job_id: str):
    """Turn SIGINT/SIGTERM into a cooperative stop request."""

    def request_stop(*_):
        if controller.status.request_stop(job_id):
            logger.warning("Stop signal received, waiting for in-flight units to finish...")

    if sys.platform == 'win32':
        signal.signal(signal.SIGINT, request_stop)
        return

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, request_stop)


async def run_job(controller: ScraperController, job, resume: bool):
    install_stop_handlers(controller, job.job_id)
    return await controller.run(job, resume=resume)


def print_summary(result):
    print("\n" + "=" * 60)
    print(f"JOB {result.outcome.value.upper()}")
    print("=" * 60)
    print(f"Job:         {result.job_id}")
    print(f"Duration:    {result.duration_seconds / 60:.1f} minutes")
    print(f"Processed:   {result.units_processed}")
    print(f"Skipped:     {result.units_skipped}")
    print(f"Failed:      {result.units_failed}")
    print(f"New records: {result.records_added}")
    print(f"Rejected:    {result.records_rejected}")
    print(f"Total saved: {result.total_records}")
    print(f"Speed:       {result.records_per_hour:.1f} records/hour")

    if result.failed_units:
        print(f"\nFailed units ({len(result.failed_units)}):")
        for label in result.failed_units[:10]:
            print(f"  - {label}")
        if len(result.failed_units) > 10:
            print(f"  ... and {len(result.failed_units) - 10} more")


def main(argv=None):
    env_path = Path.cwd() / '.env'
    if env_path.exists():
        load_dotenv(env_path)

    catalogue = build_catalogue()

    parser = argparse.ArgumentParser(
        description='Resumable golf screen store directory scraper',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run a job, resuming where the last run stopped
  golf-scraper --job okgolf

  # Start over from the first unit
  golf-scraper --job citeezon --no-resume

  # Forget stored progress without running
  golf-scraper --job friendgolf --reset
"""
    )

    parser.add_argument('--job', type=str, choices=sorted(catalogue), help='Job to run')
    parser.add_argument('--list', action='store_true', help='List available jobs and exit')
    parser.add_argument('--no-resume', action='store_true',
                        help='Start fresh instead of resuming from saved progress')
    parser.add_argument('--reset', action='store_true',
                        help='Delete saved progress for the job and exit')

    parser.add_argument('--concurrency', type=int, default=5,
                        help='Units processed at once (default: 5)')
    parser.add_argument('--delay', type=float, default=1.0,
                        help='Delay after each fetched unit in seconds (default: 1.0)')
    parser.add_argument('--more-delay', type=float, default=2.0,
                        help='Delay between follow-up pages of one unit in seconds (default: 2.0)')
    parser.add_argument('--retries', type=int, default=3,
                        help='Attempts per unit (default: 3)')

    parser.add_argument('--data-dir', type=str, default='data/stores',
                        help='Directory for collected records (default: data/stores)')
    parser.add_argument('--state-dir', type=str, default='data/state',
                        help='Directory for saved progress (default: data/state)')
    parser.add_argument('--state-backend', type=str, default='json', choices=STATE_BACKENDS,
                        help='Progress store backend (default: json)')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Log level (default: INFO)')

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.list:
        for job_id, job in catalogue.items():
            print(f"{job_id:<20} {job.title}")
        return 0

    if not args.job:
        parser.error('--job is required unless --list is given')

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    controller = ScraperController(
        checkpoints=create_checkpoint_store(config),
        sink=create_result_sink(config),
        config=config,
    )

    if args.reset:
        controller.reset_progress(args.job)
        print(f"Progress for {args.job} cleared")
        return 0

    print(f"Starting {args.job}...")
    print("Press Ctrl+C to stop (progress is saved automatically)\n")

    try:
        result = asyncio.run(run_job(controller, catalogue[args.job], resume=not args.no_resume))
    except SetupError as e:
        logger.error(f"Job {args.job} could not run: {e}")
        return 1

    print_summary(result)
    return 0 if result.outcome in (JobOutcome.COMPLETED, JobOutcome.STOPPED) else 1


if __name__ == '__main__':
    sys.exit(main())
