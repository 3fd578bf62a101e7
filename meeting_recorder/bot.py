"""
Meeting Recorder Bot.
Turns a meeting request into one scheduled recording job.
"""

import asyncio
from typing import Optional

from playwright.async_api import async_playwright, Error as PlaywrightError

from meeting_recorder.config import settings, get_logger, job_logger, BrowserSettings
from meeting_recorder.core.exceptions import CaptureError
from meeting_recorder.capture import PlaywrightCaptureSource
from meeting_recorder.models import MeetingRequest
from meeting_recorder.recording import FileVideoSink, RecordingParams, RecordingResult, recording_name
from meeting_recorder.scheduler import AddJobResult, JobScheduler
from meeting_recorder.services import StatusReporter, WebhookPayload
from meeting_recorder.tasks import RecordingTask

logger = get_logger("bot")

CHROMIUM_ARGS = [
    "--enable-usermedia-screen-capturing",
    "--allow-http-screen-capture",
    "--auto-accept-this-tab-capture",
    "--use-fake-ui-for-media-stream",
    "--autoplay-policy=no-user-gesture-required",
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-infobars",
]


class MeetingRecorderBot:
    """
    Submits recording jobs to the scheduler and runs them.

    One job = launch browser, open the meeting, record until a stop trigger,
    close the browser, report the outcome.
    """

    def __init__(
        self,
        scheduler: JobScheduler,
        reporter: Optional[StatusReporter] = None,
        browser_settings: Optional[BrowserSettings] = None
    ):
        self.scheduler = scheduler
        self.reporter = reporter or StatusReporter()
        self._browser_settings = browser_settings or settings.browser

    def submit(self, request: MeetingRequest) -> AddJobResult:
        """Submit a recording job; returns immediately."""
        log = job_logger("bot", **request.log_context)
        return self.scheduler.add_job(lambda: self._attempt(request), log)

    async def _attempt(self, request: MeetingRequest) -> RecordingResult:
        log = job_logger("bot", **request.log_context)
        try:
            result = await self.record_meeting(request)
        except Exception as e:
            if not self.scheduler.will_retry(e):
                await self.reporter.report(
                    self._payload(request, "failed", error=str(e)),
                    bearer_token=request.bearer_token,
                    reporter_logger=log,
                )
            raise

        await self.reporter.report(
            self._payload(
                request, "completed",
                stop_reason=result.stop_reason.value if result.stop_reason else None,
            ),
            bearer_token=request.bearer_token,
            reporter_logger=log,
        )
        return result

    @staticmethod
    def _payload(request: MeetingRequest, status: str, **extra) -> WebhookPayload:
        return WebhookPayload(
            status=status,
            user_id=request.user_id,
            team_id=request.team_id,
            meeting_url=request.url,
            bot_id=request.bot_id,
            event_id=request.event_id,
            **extra,
        )

    async def record_meeting(self, request: MeetingRequest) -> RecordingResult:
        """
        Run one recording attempt.

        Raises:
            CaptureError: If the browser cannot be launched or the meeting page cannot be opened
        """
        log = job_logger("bot", **request.log_context)
        browser_settings = self._browser_settings

        async with async_playwright() as playwright:
            try:
                browser = await playwright.chromium.launch(
                    headless=browser_settings.headless,
                    executable_path=browser_settings.executable_path,
                    ignore_default_args=["--enable-automation"],
                    args=CHROMIUM_ARGS,
                )
            except PlaywrightError as e:
                raise CaptureError(f"Failed to launch browser: {e}", cause=e) from e

            try:
                context = await browser.new_context(
                    permissions=["microphone", "camera"],
                    ignore_https_errors=True,
                    viewport={"width": 1280, "height": 720},
                )
                page = await context.new_page()

                log.info(f"Navigating to {request.url}...")
                try:
                    await page.goto(request.url, wait_until="load")
                except PlaywrightError as e:
                    raise CaptureError(f"Failed to open meeting page: {e}", cause=e) from e

                # Joining and lobby handling are platform specific; give the page time to settle
                await asyncio.sleep(browser_settings.join_wait_seconds)

                capture = PlaywrightCaptureSource(
                    page,
                    sample_rate=settings.audio_streaming.sample_rate,
                    channels=settings.audio_streaming.channels,
                    capture_logger=log,
                )
                params = RecordingParams.from_settings(
                    request.user_id,
                    request.team_id,
                    bot_id=request.bot_id,
                    event_id=request.event_id,
                    audio_session_id=request.audio_session_id,
                )
                task = RecordingTask(
                    params,
                    capture,
                    FileVideoSink(request.recording_id),
                    logger=log,
                    shutdown_probe=self.scheduler.is_shutdown_requested,
                )

                log.info(f"Begin recording '{recording_name(request.provider.value)}'...")
                result = await task.run(None)
                log.info(f"All done, recording lasted {result.duration_seconds:.0f}s")
                return result
            finally:
                log.info("Closing the browser...")
                try:
                    await browser.close()
                except PlaywrightError as e:
                    log.warning(f"Error closing browser: {e}")
