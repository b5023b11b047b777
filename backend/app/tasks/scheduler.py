import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.services.daily_reset import DailyResetJob, RESET_DAYS_OF_WEEK, RESET_HOUR, RESET_MINUTE

logger = logging.getLogger(__name__)

SCHEDULER_TIMEZONE = "Asia/Shanghai"


class SchedulerWrapper:
    def __init__(self, reset_job: DailyResetJob) -> None:
        self._scheduler = AsyncIOScheduler(timezone=SCHEDULER_TIMEZONE)
        self._reset_job = reset_job
        self._job_id = "daily_reset"
        self._is_configured = False

    def _configure_jobs(self) -> None:
        if self._is_configured:
            return

        # 工作日 12:00 执行，停机期间错过的不补跑
        self._scheduler.add_job(
            self._reset_job.run,
            "cron",
            day_of_week=RESET_DAYS_OF_WEEK,
            hour=RESET_HOUR,
            minute=RESET_MINUTE,
            id=self._job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self._is_configured = True

    @property
    def running(self) -> bool:
        return self._scheduler.running

    async def start(self) -> None:
        if not self._scheduler.running:
            self._configure_jobs()
            self._scheduler.start()
            logger.info("定时任务已启动（工作日 %02d:%02d %s）", RESET_HOUR, RESET_MINUTE, SCHEDULER_TIMEZONE)

    async def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("定时任务已停止")
