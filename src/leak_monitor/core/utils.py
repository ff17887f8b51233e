"""
Utility functions for the leak monitor, including domain validation, text
truncation, formatted output of results, and sending alert notifications to
Slack and Teams.
"""

import json
import re
from rich.console import Console
from rich.json import JSON
from typing import Dict, Any
import logging

from .http_client import sync_client

# Get a logger instance for this specific file


logger = logging.getLogger(__name__)

# Initialize a single console instance, primarily for beautiful user-facing output.


console = Console()

DOMAIN_REGEX = re.compile(
    r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$"
)


def truncate(text: str, limit: int, suffix: str = "...") -> str:
    """Cuts *text* to *limit* characters and appends *suffix* when it was longer."""
    if len(text) <= limit:
        return text
    return text[:limit] + suffix


def save_or_print_results(data: Dict[str, Any], output_file: str | None) -> None:
    """
    Handles the output of monitoring results.

    This function saves the provided data to a JSON file if an output path is given.
    Otherwise, it prints the data to the console in a formatted and
    syntax-highlighted way using the rich library.

    Args:
        data (Dict[str, Any]): The dictionary containing the results.
        output_file (str | None): The file path to save the JSON output.
                                  If None, prints to the console.
    """
    try:
        json_str = json.dumps(data, indent=4, ensure_ascii=False, default=str)

        if output_file:
            logger.info("Saving results to %s", output_file)
            try:
                with open(output_file, "w", encoding="utf-8") as f:
                    f.write(json_str)
                console.print(
                    f"[bold green]Successfully saved to {output_file}[/bold green]"
                )
            except OSError as e:
                logger.error("Error saving file to %s: %s", output_file, e)
        else:
            console.print(JSON(json_str))
    except (TypeError, ValueError) as e:
        logger.error(
            "An unexpected error occurred while preparing results for output: %s", e
        )


def is_valid_domain(domain: str) -> bool:
    """
    Validates if the given string is a plausible hostname.

    Labels are 1-63 alphanumerics or hyphens (no leading or trailing hyphen),
    separated by dots, and the final label is alphabetic with at least two
    characters.
    """
    return bool(domain) and DOMAIN_REGEX.match(domain) is not None


def send_slack_notification(webhook_url: str, message: str) -> None:
    """
    Sends a message to a Slack channel using an incoming webhook.

    Args:
        webhook_url (str): The Slack incoming webhook URL.
        message (str): The message to send.
    """
    if not webhook_url:
        logger.warning("Slack webhook URL not configured. Skipping notification.")
        return
    try:
        payload = {"text": message}
        response = sync_client.post(webhook_url, json=payload)
        response.raise_for_status()
        logger.info("Successfully sent Slack notification.")
    except Exception as e:
        logger.error("Failed to send Slack notification: %s", e)


def send_teams_notification(webhook_url: str, title: str, message: str) -> None:
    """
    Sends a message to a Microsoft Teams channel using an incoming webhook.

    Args:
        webhook_url (str): The Teams incoming webhook URL.
        title (str): The title of the notification card.
        message (str): The message content to send (supports Markdown).
    """
    if not webhook_url:
        logger.warning("Teams webhook URL not configured. Skipping notification.")
        return
    try:
        # Teams uses a structured format called "MessageCard"

        payload = {
            "@type": "MessageCard",
            "@context": "http://schema.org/extensions",
            "themeColor": "D70000",
            "summary": title,
            "sections": [
                {"activityTitle": f"**{title}**", "text": message, "markdown": True}
            ],
        }
        response = sync_client.post(webhook_url, json=payload)
        response.raise_for_status()
        logger.info("Successfully sent Teams notification.")
    except Exception as e:
        logger.error("Failed to send Teams notification: %s", e)
