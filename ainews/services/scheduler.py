from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from datetime import datetime
import logging

from ainews.config import settings

logger = logging.getLogger(__name__)

JOB_DEFAULTS = {
    'coalesce': True,  # Combine multiple missed runs into one
    'max_instances': 1,
    'misfire_grace_time': 600
}


class ContentScheduler:
    def __init__(self, pipeline=None, orchestrator=None, excerpts=None, run_immediately: bool = True):
        self.scheduler = BackgroundScheduler(job_defaults=JOB_DEFAULTS)
        self._pipeline = pipeline
        self._orchestrator = orchestrator
        self._excerpts = excerpts
        self.run_immediately = run_immediately

    @property
    def pipeline(self):
        if self._pipeline is None:
            from ainews.services.pipeline import ingestion_pipeline
            self._pipeline = ingestion_pipeline
        return self._pipeline

    @property
    def orchestrator(self):
        if self._orchestrator is None:
            from ainews.services.translation_orchestrator import translation_orchestrator
            self._orchestrator = translation_orchestrator
        return self._orchestrator

    @property
    def excerpts(self):
        if self._excerpts is None:
            from ainews.services.excerpt_generator import excerpt_generator
            self._excerpts = excerpt_generator
        return self._excerpts

    def _run_family_task(self, family: str):
        logger.info(f"🤖 [SCHEDULER] Running {family} ingestion...")

        try:
            report = self.pipeline.run_family(family)
            if report.skipped_busy:
                logger.info(f"[SCHEDULER] {family} still running from previous trigger")
        except Exception as e:
            logger.error(f"❌ [SCHEDULER] {family} ingestion failed: {e}")

    def scrape_news_task(self):
        """All news sources, every NEWS_INTERVAL_MINUTES"""
        self._run_family_task('news')

    def scrape_known_events_task(self):
        self._run_family_task('events_known')

    def scrape_event_apis_task(self):
        self._run_family_task('events_api')

    def translate_pending_task(self):
        """Claim and translate a batch of Pending international articles"""
        logger.info("🤖 [SCHEDULER] Starting translation task...")

        try:
            self.orchestrator.run_translation_sweep()
        except Exception as e:
            logger.error(f"❌ [SCHEDULER] Translation failed: {e}")

    def requeue_failed_task(self):
        logger.info("🤖 [SCHEDULER] Requeueing failed translations...")

        try:
            self.orchestrator.requeue_failed()
        except Exception as e:
            logger.error(f"❌ [SCHEDULER] Requeue failed: {e}")

    def generate_excerpts_task(self):
        logger.info("🤖 [SCHEDULER] Generating excerpts...")

        try:
            self.excerpts.run_excerpt_sweep()
        except Exception as e:
            logger.error(f"❌ [SCHEDULER] Excerpt generation failed: {e}")

    def _add_interval_job(self, func, job_id: str, name: str, **interval):
        options = {}
        if self.run_immediately:
            # First run right away instead of one interval after startup
            options['next_run_time'] = datetime.now()

        self.scheduler.add_job(
            func,
            IntervalTrigger(**interval),
            id=job_id,
            name=name,
            replace_existing=True,
            **options
        )

    def register_jobs(self):
        self._add_interval_job(
            self.scrape_news_task, 'scrape_news',
            f'Scrape news sources (every {settings.NEWS_INTERVAL_MINUTES} min)',
            minutes=settings.NEWS_INTERVAL_MINUTES
        )
        self._add_interval_job(
            self.translate_pending_task, 'translate_pending',
            f'Translate pending articles (every {settings.TRANSLATION_INTERVAL_MINUTES} min)',
            minutes=settings.TRANSLATION_INTERVAL_MINUTES
        )
        self._add_interval_job(
            self.requeue_failed_task, 'requeue_failed_translations',
            f'Requeue failed translations (every {settings.TRANSLATION_RETRY_INTERVAL_MINUTES} min)',
            minutes=settings.TRANSLATION_RETRY_INTERVAL_MINUTES
        )
        self._add_interval_job(
            self.scrape_known_events_task, 'scrape_known_events',
            f'Load known AI conferences (every {settings.EVENTS_KNOWN_INTERVAL_HOURS} h)',
            hours=settings.EVENTS_KNOWN_INTERVAL_HOURS
        )
        self._add_interval_job(
            self.scrape_event_apis_task, 'scrape_event_apis',
            f'Fetch event APIs (every {settings.EVENTS_API_INTERVAL_HOURS} h)',
            hours=settings.EVENTS_API_INTERVAL_HOURS
        )
        if settings.EXCERPTS_ENABLED:
            self._add_interval_job(
                self.generate_excerpts_task, 'generate_excerpts',
                f'Generate excerpts (every {settings.EXCERPT_INTERVAL_MINUTES} min)',
                minutes=settings.EXCERPT_INTERVAL_MINUTES
            )

    def start(self):
        """Register every family's job and start (idempotent)"""
        if self.scheduler.running:
            logger.info("Scheduler already running, skipping start")
            return

        self.register_jobs()
        self.scheduler.start()

        logger.info("=" * 60)
        logger.info("✅ AI NEWS INGESTION - SCHEDULER RUNNING")
        logger.info("=" * 60)
        logger.info(f"   • News: every {settings.NEWS_INTERVAL_MINUTES} min")
        logger.info(f"   • Translation: every {settings.TRANSLATION_INTERVAL_MINUTES} min")
        logger.info(f"   • Translation retries: every {settings.TRANSLATION_RETRY_INTERVAL_MINUTES} min")
        logger.info(f"   • Known events: every {settings.EVENTS_KNOWN_INTERVAL_HOURS} h")
        logger.info(f"   • Event APIs: every {settings.EVENTS_API_INTERVAL_HOURS} h")
        if settings.EXCERPTS_ENABLED:
            logger.info(f"   • Excerpts: every {settings.EXCERPT_INTERVAL_MINUTES} min")
        logger.info("=" * 60)

    def stop(self, wait: bool = True):
        """Stop the scheduler (idempotent)"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("Scheduler stopped")
        else:
            logger.info("Scheduler already stopped")

    def get_jobs(self):
        """Get list of scheduled jobs"""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, 'next_run_time', None)
            jobs.append({
                'id': job.id,
                'name': job.name,
                'next_run': next_run.isoformat() if next_run else None,
                'trigger': str(job.trigger)
            })
        return jobs


content_scheduler = ContentScheduler()
