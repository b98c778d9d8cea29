"""Tests for the permission-error channel."""

from progress_kernel.domain.notifications import PermissionErrorChannel, PermissionErrorEvent
from progress_kernel.exceptions import StoragePermissionError


class TestPermissionErrorChannel:

    def test_publish_delivers_to_subscriber(self):
        received = []
        channel = PermissionErrorChannel(received.append)
        event = PermissionErrorEvent(path="projects/p1", operation="update")
        channel.publish(event)
        assert received == [event]

    def test_subscribe_replaces_previous_subscriber(self):
        first, second = [], []
        channel = PermissionErrorChannel(first.append)
        channel.subscribe(second.append)
        channel.publish(PermissionErrorEvent(path="p", operation="create"))
        assert first == []
        assert len(second) == 1

    def test_publish_without_subscriber_is_noop(self):
        channel = PermissionErrorChannel()
        assert not channel.has_subscriber
        channel.publish(PermissionErrorEvent(path="p", operation="delete"))

    def test_subscriber_failure_is_logged_not_raised(self, captured_logs):
        def broken(event):
            raise RuntimeError("toast failed")

        channel = PermissionErrorChannel(broken)
        channel.publish(PermissionErrorEvent(path="projects/p1", operation="delete"))

        failures = [r for r in captured_logs() if r["message"] == "permission_error_subscriber_failed"]
        assert len(failures) == 1
        assert failures[0]["exc_type"] == "RuntimeError"

    def test_event_from_error(self):
        error = StoragePermissionError(
            path="projects/p1/weeklyReports/r1",
            operation="create",
            attempted_data={"week": 2},
            reason="denied by rule 'projects/*'",
        )
        event = PermissionErrorEvent.from_error(error)
        assert event.path == "projects/p1/weeklyReports/r1"
        assert event.operation == "create"
        assert event.attempted_data == {"week": 2}

    def test_event_from_error_with_override(self):
        error = StoragePermissionError(path="projects/p1", operation="delete")
        event = PermissionErrorEvent.from_error(
            error, path="projects/p1 and its subcollections"
        )
        assert event.path == "projects/p1 and its subcollections"
        assert event.operation == "delete"
