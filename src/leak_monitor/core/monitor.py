"""
Monitoring loop: fetch posts, detect leaks, alert, summarize.

A ``Monitor`` owns its own ``MonitorState``. In single-shot mode it runs one
check cycle and prints a summary. In continuous mode it arms one APScheduler
interval job that triggers a new cycle on each tick until ``stop()`` is called.
Cycles never overlap: a tick arriving while a cycle is still running is skipped.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from rich.markup import escape

from .fetcher import SOCIAL_SOURCES, fetch_source
from .scanner import DEFAULT_SCANNER, CredentialScanner, match_domains
from .schemas import AlertsConfig, Finding, MonitorResult, MonitorState, Post, Source
from .utils import console, send_slack_notification, send_teams_notification, truncate

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30 * 60  # seconds
SNIPPET_LENGTH = 200
SUMMARY_TITLE_LENGTH = 50
CHECK_JOB_ID = "leak_monitor_check"


class Monitor:
    """Runs fetch/detect/alert cycles over the configured sources."""

    def __init__(
        self,
        domains: Sequence[str],
        interval: int = DEFAULT_INTERVAL,
        verbose: bool = False,
        once: bool = False,
        alerts: Optional[AlertsConfig] = None,
        sources: Sequence[Source] = SOCIAL_SOURCES,
        scanner: CredentialScanner = DEFAULT_SCANNER,
    ):
        if interval <= 0:
            raise ValueError(f"Interval must be a positive number of seconds, got {interval}")
        self.domains = list(domains)
        self.interval = interval
        self.verbose = verbose
        self.once = once
        self.alerts = alerts or AlertsConfig()
        self.sources = list(sources)
        self.scanner = scanner
        self.state = MonitorState()
        self.total_scanned = 0
        self._stopped: Optional[asyncio.Event] = None

    # --- Lifecycle ---

    async def start(self) -> None:
        """Runs one check immediately, then finishes (single-shot) or arms the timer."""
        self.state.running = True
        self._stopped = asyncio.Event()
        console.print("[bold cyan]🚀 Starting social media monitoring...[/bold cyan]\n")

        await self.check()

        if self.once:
            console.print("\n[bold green]✅ Single scan completed[/bold green]")
            self.print_summary()
            self.state.running = False
            self._stopped.set()
            return
        if not self.state.running:
            return

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self.interval),
            id=CHECK_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self.state.timer = scheduler
        logger.info("Armed check timer every %s seconds", self.interval)

        console.print(
            f"\n⏳ Continuous monitoring active. Checking every {self.interval / 60:g} minutes..."
        )
        console.print("Press Ctrl+C to stop.\n")

    def stop(self) -> None:
        """Cancels the timer and marks the monitor as not running. Safe to call twice."""
        scheduler = self.state.timer
        if scheduler is not None:
            if scheduler.running:
                scheduler.shutdown(wait=False)
            self.state.timer = None
            logger.info("Check timer cancelled")
        self.state.running = False
        if self._stopped is not None:
            self._stopped.set()

    async def run(self) -> MonitorResult:
        """Starts the monitor and, in continuous mode, waits until it is stopped."""
        try:
            await self.start()
            if self.state.running and self._stopped is not None:
                await self._stopped.wait()
        finally:
            self.stop()
        return self.result()

    async def tick(self) -> None:
        if not self.state.running:
            return
        await self.check()

    # --- Check cycle ---

    async def check(self) -> List[Finding]:
        """
        Runs one fetch/detect/alert cycle over every source.

        Returns the findings produced by this cycle. When a cycle is already in
        flight the call is skipped and returns an empty list.
        """
        if self.state.check_in_progress:
            logger.warning("Previous check still in progress; skipping this one.")
            return []

        self.state.check_in_progress = True
        try:
            return await self._run_cycle()
        finally:
            self.state.check_in_progress = False

    async def _run_cycle(self) -> List[Finding]:
        now = datetime.now(timezone.utc)
        self.state.last_check = now
        self.state.cycles += 1
        console.print(f"\n{escape(f'[{now.isoformat()}]')} Checking social media...")

        scanned = 0
        found: List[Finding] = []
        for source in self.sources:
            try:
                if self.verbose:
                    console.print(f"  📂 Checking {escape(source.name)}...")

                result = await fetch_source(source, self.domains, verbose=self.verbose)
                if self.domains and len(result.errors) == len(self.domains):
                    logger.warning(
                        "All %d request(s) to %s failed", len(self.domains), source.name
                    )
                    console.print(
                        f"  [bold red]❌ Error checking {escape(source.name)}:[/bold red] "
                        f"all {len(self.domains)} request(s) failed"
                    )
                scanned += len(result.posts)

                for post in result.posts:
                    finding = self.analyze_post(post, source)
                    if finding is not None:
                        found.append(finding)
                        self.state.findings.append(finding)
                        self.alert(finding)
            except Exception as e:
                logger.error("Error checking %s: %s", source.name, e)
                console.print(
                    f"  [bold red]❌ Error checking {escape(source.name)}:[/bold red] {escape(str(e))}"
                )

        self.total_scanned += scanned
        console.print(f"  ✅ Scanned {scanned} posts, found {len(found)} potential leak(s)")
        return found

    def analyze_post(self, post: Post, source: Source) -> Optional[Finding]:
        """
        Returns a Finding when the post mentions its own domain and contains at
        least one credential pattern, otherwise None.
        """
        content = post.title
        matched = match_domains(content, [post.domain])
        if not matched:
            return None

        credentials = self.scanner.detect_credential_types(content)
        if not credentials:
            return None

        return Finding(
            source=source.name,
            title=post.title,
            url=post.url,
            matched_domains=matched,
            credentials=credentials,
            snippet=content[:SNIPPET_LENGTH],
        )

    # --- Output ---

    def alert(self, finding: Finding) -> None:
        """Reports a finding on every enabled alert channel."""
        domains = ", ".join(sorted(finding.matched_domains))
        credentials = ", ".join(sorted(finding.credentials))

        if self.alerts.console:
            console.print("\n[bold red]🚨 ALERT: Potential Credential Leak Detected![/bold red]")
            console.print("=" * 50)
            console.print(f"Source: {escape(finding.source)}")
            console.print(f"Title: {escape(finding.title)}")
            console.print(f"URL: {escape(finding.url)}")
            console.print(f"Matched Domains: {domains}")
            console.print(f"Credential Types: {credentials}")
            console.print(f"\nSnippet: {escape(finding.snippet)}...")
            console.print("=" * 50)

        message = (
            f"🚨 Potential credential leak on {finding.source} for {domains} "
            f"({credentials}): {finding.url}"
        )
        if self.alerts.slack_webhook_url:
            send_slack_notification(self.alerts.slack_webhook_url, message=message)
        if self.alerts.teams_webhook_url:
            send_teams_notification(
                self.alerts.teams_webhook_url,
                title=f"Credential Leak Alert: {domains}",
                message=message,
            )
        logger.info("Alerted finding from %s: %s", finding.source, finding.url)

    def print_summary(self) -> None:
        findings = self.state.findings
        console.print("\n[bold]📊 Summary[/bold]")
        console.print("=" * 30)
        console.print(f"Total findings: {len(findings)}")

        if findings:
            console.print("\nDetails:")
            for finding in findings:
                stamp = escape(f"[{finding.timestamp.isoformat()}]")
                title = escape(truncate(finding.title, SUMMARY_TITLE_LENGTH, suffix=""))
                console.print(f"  - {stamp} {escape(finding.source)}: {title}")

    def result(self) -> MonitorResult:
        return MonitorResult(
            domains=self.domains,
            cycles=self.state.cycles,
            total_scanned=self.total_scanned,
            last_check=self.state.last_check,
            findings=list(self.state.findings),
            total_findings=len(self.state.findings),
        )
