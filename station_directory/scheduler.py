"""
APScheduler wrapper for Station Directory

Background jobs:
- Nightly bulk quality recalculation (cron, default 03:00)
- Rate-limit store pruning (interval, default every 10 minutes)

Key Principle: Simple wrapper around APScheduler - don't over-engineer.
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


class QualityScheduler:
    """Wrapper for APScheduler to run quality maintenance jobs

    Attributes:
        scheduler: BackgroundScheduler instance
        recalculator: QualityRecalculator used by the nightly job
        rate_limiter: RateLimitStore pruned by the interval job
    """

    RECALCULATE_JOB_ID = 'quality_recalculate_job'
    PRUNE_JOB_ID = 'rate_limit_prune_job'

    def __init__(self, recalculator, rate_limiter=None, scheduler=None):
        self.scheduler = scheduler or BackgroundScheduler()
        self.recalculator = recalculator
        self.rate_limiter = rate_limiter

    def _run_recalculation(self):
        """Run the bulk recalculation (errors are logged, never raised)"""
        try:
            logger.info("Starting scheduled quality recalculation")
            summary = self.recalculator.recalculate_all()
            logger.info(f"Scheduled quality recalculation complete: {summary['updated']} updated, "
                        f"{summary['failed']} failed, {summary['hidden']} hidden")
        except Exception as e:
            logger.error(f"Error during scheduled quality recalculation: {e}", exc_info=True)

    def _run_prune(self):
        try:
            removed = self.rate_limiter.prune()
            if removed:
                logger.debug(f"Rate-limit prune removed {removed} entries")
        except Exception as e:
            logger.error(f"Error pruning rate-limit store: {e}")

    def add_recalculation_job(self, hour=3, minute=0):
        """Add the daily bulk recalculation job

        Args:
            hour: Hour to run (default: 3)
            minute: Minute to run (default: 0)

        Returns:
            True if added, False if already exists
        """
        if self.scheduler.get_job(self.RECALCULATE_JOB_ID):
            logger.info("Quality recalculation job already exists")
            return False

        self.scheduler.add_job(
            self._run_recalculation,
            'cron',
            hour=hour,
            minute=minute,
            id=self.RECALCULATE_JOB_ID,
            name='Daily Quality Recalculation'
        )
        logger.info(f"Quality recalculation job scheduled for {hour:02d}:{minute:02d} daily")
        return True

    def add_prune_job(self, minutes=10):
        """Add the rate-limit pruning job

        Returns:
            True if added, False if already exists or no rate limiter
        """
        if self.rate_limiter is None:
            return False

        if self.scheduler.get_job(self.PRUNE_JOB_ID):
            logger.info("Rate-limit prune job already exists")
            return False

        self.scheduler.add_job(
            self._run_prune,
            'interval',
            minutes=minutes,
            id=self.PRUNE_JOB_ID,
            name='Rate Limit Pruning'
        )
        logger.info(f"Rate-limit prune job scheduled every {minutes} minutes")
        return True

    def start(self):
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started")

    def shutdown(self, wait=True):
        """Shutdown scheduler (graceful shutdown)

        Args:
            wait: Wait for running jobs to complete (default: True)
        """
        try:
            if self.scheduler.running:
                logger.info("Shutting down scheduler...")
                self.scheduler.shutdown(wait=wait)
                logger.info("Scheduler shut down")
        except Exception as e:
            logger.error(f"Error shutting down scheduler: {e}")


def create_scheduler(recalculator, rate_limiter, settings):
    """Build a scheduler with jobs configured from settings

    Args:
        recalculator: QualityRecalculator
        rate_limiter: RateLimitStore
        settings: Settings dict

    Returns:
        QualityScheduler (not started)
    """
    quality = settings.get('quality', {})
    rate_limits = settings.get('rate_limits', {})

    scheduler = QualityScheduler(recalculator, rate_limiter)

    if quality.get('enabled', True):
        scheduler.add_recalculation_job(
            hour=quality.get('recalculate_hour', 3),
            minute=quality.get('recalculate_minute', 0)
        )
    else:
        logger.info("Scheduled quality recalculation disabled in settings")

    scheduler.add_prune_job(minutes=rate_limits.get('prune_interval_minutes', 10))
    return scheduler
