"""
Entry point for the data refresh.

Usage:
    python -m marketsnap
    marketsnap  # if installed via pip
"""

import asyncio
import logging
import sys


logger = logging.getLogger("marketsnap")


def main() -> int:
    """
    Run one data refresh.

    Returns:
        Exit code (0 for success, 1 on an unrecoverable failure).
    """
    from marketsnap.config.settings import get_settings
    from marketsnap.core.engine import RefreshEngine
    from marketsnap.storage.snapshot import SnapshotWriter
    from marketsnap.telemetry.logger import setup_logging

    try:
        settings = get_settings()
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    async_logger = setup_logging(
        level=settings.log_level, log_file=settings.log_file, component="refresh"
    )

    logger.info("Configuration:")
    logger.info(f"  API:        {settings.api_base_url}")
    logger.info(f"  API key:    {'set' if settings.api_key else 'not set'}")
    logger.info(f"  Data dir:   {settings.data_dir}")
    logger.info(f"  Coins:      {len(settings.coins)}")
    logger.info(f"  Exchanges:  {len(settings.exchanges)}")
    logger.info(f"  Threshold:  {settings.arbitrage_threshold_pct:.2f}%")

    async def run_refresh() -> int:
        engine = RefreshEngine(settings)

        try:
            await engine.setup()
            await engine.run()
            return 0

        except Exception as e:
            logger.exception(f"Data refresh failed: {e}")
            SnapshotWriter(settings.data_dir).write_error_report(e)
            return 1

        finally:
            await engine.shutdown()

    try:
        return asyncio.run(run_refresh())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    finally:
        async_logger.stop()


if __name__ == "__main__":
    sys.exit(main())
