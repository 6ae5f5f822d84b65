"""Email and Slack notification services."""
import logging
import smtplib
from concurrent.futures import ThreadPoolExecutor
from email.header import Header
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Callable, List, Optional, Tuple

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from slack_sdk.webhook import WebhookClient

from timesheet_monitor.transformers import report_builder
from timesheet_monitor.utilities import config
from timesheet_monitor.utilities.config import Settings
from timesheet_monitor.utilities.exceptions import DispatchError
from timesheet_monitor.utilities.models import DispatchOutcome, WindowAnalysis

logger = logging.getLogger(__name__)

EMAIL_CHANNEL = "email"
SLACK_WEBHOOK_CHANNEL = "slack_webhook"
SLACK_DM_CHANNEL = "slack_dm"

# (channel, recipient, send callable)
DeliveryTask = Tuple[str, Optional[str], Callable[[], None]]


class NotificationDispatcher:
    """
    Sends analysis results through every configured channel.

    Channels without configuration are skipped silently. Each delivery runs
    as its own task; a failure is logged and returned as an outcome, never
    raised to the caller.
    """

    def __init__(
        self,
        settings: Settings,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        webhook_client: Optional[WebhookClient] = None,
        web_client: Optional[WebClient] = None,
        max_workers: int = 8,
    ):
        self.settings = settings
        self.smtp_factory = smtp_factory
        self.max_workers = max_workers
        # Built once here; delivery tasks share them across worker threads
        if webhook_client is None and settings.slack_webhook_enabled:
            webhook_client = WebhookClient(settings.slack_webhook_url)
        if web_client is None and settings.slack_dm_enabled:
            web_client = WebClient(token=settings.slack_bot_token)
        self.webhook_client = webhook_client
        self.web_client = web_client

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def send_report(self, analysis: WindowAnalysis) -> List[DispatchOutcome]:
        """
        Send the window report to the email recipients and the Slack channel.

        Args:
            analysis: Completed window analysis

        Returns:
            One outcome per attempted delivery
        """
        tasks: List[DeliveryTask] = []

        if self.settings.email_enabled:
            subject, body = report_builder.build_email_report(analysis)
            for recipient in self.settings.report_recipients:
                tasks.append((
                    EMAIL_CHANNEL,
                    recipient,
                    lambda recipient=recipient: self._send_email(recipient, subject, body),
                ))
        else:
            logger.info("Email not configured; skipping email report")

        if self.settings.slack_webhook_enabled:
            payload = report_builder.build_slack_report(analysis, self.settings.slack_channel)
            tasks.append((
                SLACK_WEBHOOK_CHANNEL,
                self.settings.slack_channel,
                lambda: self._send_webhook(payload),
            ))
        else:
            logger.info("Slack webhook not configured; skipping Slack report")

        return self._run_tasks(tasks)

    def send_reminders(self, analysis: WindowAnalysis) -> List[DispatchOutcome]:
        """
        Direct-message each employee once per issue type.

        Args:
            analysis: Completed window analysis

        Returns:
            One outcome per attempted direct message
        """
        if not self.settings.slack_dm_enabled:
            logger.info("Slack bot token not configured; skipping reminders")
            return []

        week_info = analysis.week_info
        tasks: List[DeliveryTask] = []

        for entry in analysis.no_submission:
            text = report_builder.build_no_submission_reminder(entry, week_info)
            tasks.append((
                SLACK_DM_CHANNEL,
                entry.employee_id,
                lambda user=entry.employee_id, text=text: self._send_direct_message(user, text),
            ))

        for entry in analysis.flagged:
            text = report_builder.build_flagged_reminder(entry, week_info)
            tasks.append((
                SLACK_DM_CHANNEL,
                entry.employee_id,
                lambda user=entry.employee_id, text=text: self._send_direct_message(user, text),
            ))

        return self._run_tasks(tasks)

    def send_all(self, analysis: WindowAnalysis) -> List[DispatchOutcome]:
        """Run the report and the reminders side by side and collect all outcomes."""
        with ThreadPoolExecutor(max_workers=2) as executor:
            report_future = executor.submit(self.send_report, analysis)
            reminders_future = executor.submit(self.send_reminders, analysis)
            return report_future.result() + reminders_future.result()

    # ------------------------------------------------------------------
    # Task group
    # ------------------------------------------------------------------

    def _attempt(self, channel: str, recipient: Optional[str], send: Callable[[], None]) -> DispatchOutcome:
        try:
            send()
        except Exception as exc:
            error = exc if isinstance(exc, DispatchError) else DispatchError(channel, recipient, exc)
            logger.error("✗ %s", error.message)
            return DispatchOutcome(channel=channel, recipient=recipient, success=False, error=error.message)

        logger.info("✓ Sent %s notification to %s", channel, recipient)
        return DispatchOutcome(channel=channel, recipient=recipient, success=True)

    def _run_tasks(self, tasks: List[DeliveryTask]) -> List[DispatchOutcome]:
        if not tasks:
            return []

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(tasks))) as executor:
            futures = [
                executor.submit(self._attempt, channel, recipient, send)
                for channel, recipient, send in tasks
            ]
            outcomes = [future.result() for future in futures]

        failed = sum(1 for outcome in outcomes if not outcome.success)
        logger.info("Deliveries complete: %d/%d succeeded", len(outcomes) - failed, len(outcomes))
        return outcomes

    # ------------------------------------------------------------------
    # Channel senders
    # ------------------------------------------------------------------

    def _send_email(self, recipient: str, subject: str, html_body: str) -> None:
        """
        Send an HTML email via SMTP.

        Raises:
            DispatchError: If email sending fails
        """
        settings = self.settings
        sender = settings.email_from or settings.smtp_user

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((str(Header(config.EMAIL_FROM_NAME, "utf-8")), sender))
        msg["To"] = recipient
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            logger.debug("Connecting to SMTP server %s:%s", settings.smtp_host, settings.smtp_port)
            with self.smtp_factory(settings.smtp_host, settings.smtp_port, timeout=settings.request_timeout) as server:
                server.starttls()
                server.login(settings.smtp_user, settings.smtp_password)
                server.sendmail(sender, recipient, msg.as_string())
        except smtplib.SMTPAuthenticationError as exc:
            raise DispatchError(EMAIL_CHANNEL, recipient, f"SMTP authentication failed: {exc}") from exc
        except (smtplib.SMTPException, OSError) as exc:
            raise DispatchError(EMAIL_CHANNEL, recipient, f"{type(exc).__name__} - {exc}") from exc

    def _send_webhook(self, payload: dict) -> None:
        """
        Post the report to the Slack incoming webhook.

        Raises:
            DispatchError: If Slack does not accept the message
        """
        response = self.webhook_client.send_dict(payload)
        if response.status_code != 200:
            raise DispatchError(
                SLACK_WEBHOOK_CHANNEL,
                self.settings.slack_channel,
                f"webhook returned {response.status_code}: {response.body}",
            )

    def _send_direct_message(self, user_id: str, text: str) -> None:
        """
        Send a Slack direct message.

        Raises:
            DispatchError: If the Slack API rejects the message
        """
        try:
            self.web_client.chat_postMessage(channel=user_id, text=text)
        except SlackApiError as exc:
            raise DispatchError(SLACK_DM_CHANNEL, user_id, exc.response.get("error", str(exc))) from exc
