import unittest
from unittest.mock import patch, mock_open, MagicMock
from leak_monitor.core.utils import (
    save_or_print_results,
    is_valid_domain,
    send_slack_notification,
    send_teams_notification,
    truncate,
)


class TestUtils(unittest.TestCase):
    """Tests for utility functions in utils.py."""

    def test_is_valid_domain(self):
        """Tests the hostname grammar."""
        self.assertTrue(is_valid_domain("google.com"))
        self.assertTrue(is_valid_domain("sub-1.example.museum"))
        self.assertFalse(is_valid_domain("not a domain"))
        self.assertFalse(is_valid_domain("google..com"))
        self.assertFalse(is_valid_domain("-google.com"))
        self.assertFalse(is_valid_domain("example.c0m"))
        self.assertFalse(is_valid_domain("a" * 64 + ".com"))
        self.assertFalse(is_valid_domain(""))

    def test_truncate(self):
        self.assertEqual(truncate("short", 10), "short")
        self.assertEqual(truncate("x" * 60, 50), "x" * 50 + "...")
        self.assertEqual(truncate("x" * 60, 50, suffix=""), "x" * 50)

    @patch("builtins.open", new_callable=mock_open)
    def test_save_or_print_results_saves_to_file(self, mock_file):
        """Tests if the function saves to a file when a path is provided."""
        data = {"key": "value"}
        output_file = "test.json"

        with patch("rich.console.Console.print") as mock_print:
            save_or_print_results(data, output_file)

            mock_file.assert_called_once_with(output_file, "w", encoding="utf-8")
            mock_file().write.assert_called_once_with('{\n    "key": "value"\n}')
            mock_print.assert_any_call(
                f"[bold green]Successfully saved to {output_file}[/bold green]"
            )

    def test_save_or_print_results_prints_to_console(self):
        """Tests if the function prints to the console when no file is provided."""
        with patch("rich.console.Console.print") as mock_print:
            save_or_print_results({"key": "value"}, None)

            self.assertTrue(mock_print.called)

    @patch("leak_monitor.core.http_client.sync_client.post")
    def test_send_slack_notification_success(self, mock_post):
        """Tests a successful Slack notification dispatch."""
        mock_response = MagicMock()
        mock_response.raise_for_status.return_value = None
        mock_post.return_value = mock_response

        send_slack_notification("http://fake.webhook.url", "Test message")
        mock_post.assert_called_once_with(
            "http://fake.webhook.url", json={"text": "Test message"}
        )

    @patch("leak_monitor.core.http_client.sync_client.post")
    def test_send_slack_notification_failure(self, mock_post):
        """A failed dispatch is logged, never raised."""
        mock_post.side_effect = Exception("Network Error")

        with self.assertLogs("leak_monitor.core.utils", level="ERROR"):
            send_slack_notification("http://fake.webhook.url", "Test message")
        mock_post.assert_called_once()

    @patch("leak_monitor.core.http_client.sync_client.post")
    def test_send_slack_notification_without_url(self, mock_post):
        send_slack_notification("", "Test message")
        mock_post.assert_not_called()

    @patch("leak_monitor.core.http_client.sync_client.post")
    def test_send_teams_notification_payload(self, mock_post):
        send_teams_notification("http://fake.teams.url", "Leak", "Details")

        payload = mock_post.call_args.kwargs["json"]
        self.assertEqual(payload["@type"], "MessageCard")
        self.assertEqual(payload["summary"], "Leak")
        self.assertEqual(payload["sections"][0]["text"], "Details")


if __name__ == "__main__":
    unittest.main()
