"""
Tests for ddhub/sync/engine.py with mocked Datadog clients.
"""

from unittest.mock import MagicMock

import pytest

from ddhub.datadog import DatadogAPIError, DatadogClient
from ddhub.sync import (
    STATUS_FAILED,
    STATUS_SUCCESS,
    replay_dashboards,
    replay_monitors,
    sync_dashboards,
    sync_monitors,
)


def _mock_client(name="target"):
    client = MagicMock(spec=DatadogClient)
    client.base_url = f"https://{name}.example/api/v1"
    return client


@pytest.fixture
def target():
    t = _mock_client()
    t.create_dashboard.side_effect = lambda payload: {"id": f"new-{payload['title']}", **payload}
    t.create_monitor.side_effect = lambda payload: {"id": 100, **payload}
    return t


@pytest.fixture
def source():
    return _mock_client("source")


class TestReplayDashboards:
    def test_all_succeed(self, target):
        payloads = [{"title": f"D{i}", "widgets": []} for i in range(4)]

        report = replay_dashboards(payloads, target).to_dict()

        assert report["totalCount"] == 4
        assert report["successCount"] == 4
        assert report["failureCount"] == 0
        assert [d["status"] for d in report["data"]["dashboards"]] == [STATUS_SUCCESS] * 4
        assert report["data"]["dashboards"][0]["targetId"] == "new-D0"

    def test_partial_failures_are_recorded_and_loop_continues(self, target):
        def create(payload):
            if payload["title"] in ("D1", "D3"):
                raise DatadogAPIError("Datadog API returned 400: Invalid widget", status_code=400)
            return {"id": "ok", **payload}

        target.create_dashboard.side_effect = create
        payloads = [{"title": f"D{i}"} for i in range(5)]

        report = replay_dashboards(payloads, target)

        assert report.success_count == 3
        assert report.failure_count == 2
        failed = [item for item in report.items if item.status == STATUS_FAILED]
        assert [item.title for item in failed] == ["D1", "D3"]
        assert all(item.error_message for item in failed)
        assert target.create_dashboard.call_count == 5

    def test_read_only_fields_not_sent(self, target, sample_dashboard):
        replay_dashboards([sample_dashboard], target)

        sent = target.create_dashboard.call_args[0][0]
        assert "id" not in sent
        assert "author_handle" not in sent

    def test_non_object_payload_fails_that_item(self, target):
        report = replay_dashboards(["garbage", {"title": "ok"}], target)

        assert report.items[0].status == STATUS_FAILED
        assert report.items[0].title == "(untitled)"
        assert report.items[1].status == STATUS_SUCCESS

    def test_empty_input(self, target):
        report = replay_dashboards([], target).to_dict()

        assert report == {"data": {"dashboards": []}, "totalCount": 0, "successCount": 0, "failureCount": 0}


class TestSyncDashboards:
    def test_filter_is_case_sensitive_substring(self, source, target):
        source.list_dashboards.return_value = [
            {"id": "1", "title": "Prod API"},
            {"id": "2", "title": "prod worker"},
            {"id": "3", "title": "Staging API"},
        ]
        source.get_dashboard.side_effect = lambda i: {"id": i, "title": f"full-{i}"}

        report = sync_dashboards(source, target, filter_title="Prod")

        assert report.total_count == 1
        source.get_dashboard.assert_called_once_with("1")

    def test_definition_fetch_failure_is_per_item(self, source, target):
        source.list_dashboards.return_value = [{"id": "1", "title": "A"}, {"id": "2", "title": "B"}]

        def fetch(dashboard_id):
            if dashboard_id == "1":
                raise DatadogAPIError("Datadog API returned 404: Not found", status_code=404)
            return {"id": dashboard_id, "title": "B"}

        source.get_dashboard.side_effect = fetch

        report = sync_dashboards(source, target)

        assert [i.status for i in report.items] == [STATUS_FAILED, STATUS_SUCCESS]
        assert report.items[0].title == "A"
        assert "404" in report.items[0].error_message

    def test_non_object_definition_fails_that_item(self, source, target):
        source.list_dashboards.return_value = [{"id": "1", "title": "A"}, {"id": "2", "title": "B"}]
        source.get_dashboard.side_effect = lambda i: [] if i == "1" else {"id": i, "title": "B"}

        report = sync_dashboards(source, target)

        assert [i.status for i in report.items] == [STATUS_FAILED, STATUS_SUCCESS]
        assert report.items[0].error_message

    def test_non_object_create_response_is_a_failure(self, source, target):
        source.list_dashboards.return_value = [{"id": "1", "title": "A"}]
        source.get_dashboard.return_value = {"id": "1", "title": "A"}
        target.create_dashboard.side_effect = None
        target.create_dashboard.return_value = None

        report = sync_dashboards(source, target)

        assert report.failure_count == 1
        assert "NoneType" in report.items[0].error_message

    def test_listing_failure_propagates(self, source, target):
        source.list_dashboards.side_effect = DatadogAPIError("forbidden", status_code=403)

        with pytest.raises(DatadogAPIError):
            sync_dashboards(source, target)

        target.create_dashboard.assert_not_called()


class TestMonitors:
    def test_replay_cleans_monitors(self, target, sample_monitor):
        report = replay_monitors([sample_monitor], target)

        assert report.success_count == 1
        sent = target.create_monitor.call_args[0][0]
        assert "variables" in sent["options"]
        assert "overall_state" not in sent

    def test_sync_filters_by_tag_substring(self, source, target):
        source.list_monitors.return_value = [
            {"name": "a", "type": "metric alert", "tags": ["team:payments", "env:prod"]},
            {"name": "b", "type": "metric alert", "tags": ["team:search"]},
            {"name": "c", "type": "metric alert"},
        ]

        report = sync_monitors(source, target, filter_tag="payments")

        assert [i.title for i in report.items] == ["a"]
        assert report.to_dict()["data"]["monitors"][0]["status"] == STATUS_SUCCESS

    def test_failures_counted(self, source, target):
        source.list_monitors.return_value = [{"name": "a"}, {"name": "b"}]
        target.create_monitor.side_effect = [
            DatadogAPIError("Datadog API returned 400: The value provided for parameter 'query' is invalid", 400),
            {"id": 2, "name": "b"},
        ]

        report = sync_monitors(source, target)

        assert report.failure_count == 1
        assert report.items[0].error_message

    def test_unexpected_error_on_one_monitor_does_not_stop_the_run(self, target):
        payloads = [
            {"name": "bad", "type": ["metric alert"]},
            {"name": "good", "type": "metric alert", "query": "avg(last_5m):avg:cpu{*} > 90"},
        ]

        report = replay_monitors(payloads, target)

        assert report.total_count == 2
        assert [i.status for i in report.items] == [STATUS_FAILED, STATUS_SUCCESS]
        assert report.items[0].title == "bad"
        assert report.items[0].error_message
        target.create_monitor.assert_called_once()
