"""
Unit tests for lambdas/post_sync_dashboards.py and post_sync_monitors.py.

Datadog is never called: the sync engine entry points are patched where
the handlers import them, or the client's HTTP session is patched.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from ddhub.artifacts import ArtifactStore
from ddhub.datadog import DatadogAPIError
from ddhub.sync import SyncItemResult, SyncReport
from lambdas.post_sync_dashboards import lambda_handler as sync_dashboards_handler
from lambdas.post_sync_monitors import lambda_handler as sync_monitors_handler

SOURCE_TARGET = {
    "sourceApiKey": "src-api",
    "sourceAppKey": "src-app",
    "sourceRegion": "US1",
    "targetApiKey": "tgt-api",
    "targetAppKey": "tgt-app",
    "targetApiUrl": "https://api.datadoghq.eu",
}

SINGLE_ACCOUNT = {"apiKey": "api", "appKey": "app", "region": "US5"}


def _report(kind, *statuses):
    return SyncReport(
        kind=kind,
        items=[
            SyncItemResult(title=f"item-{i}", status=s, error_message="" if s == "success" else "400")
            for i, s in enumerate(statuses)
        ],
    )


def _ok_response(payload):
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    response.content = b"x"
    response.json.return_value = payload
    return response


class TestSyncDashboardsEndpoint:
    def test_source_target_mode(self, make_event):
        with patch(
            "lambdas.post_sync_dashboards.sync_dashboards",
            return_value=_report("dashboards", "success", "failed"),
        ) as sync:
            response = sync_dashboards_handler(
                make_event("POST", body={**SOURCE_TARGET, "filterTitle": "Prod"}), None
            )

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["totalCount"] == 2
        assert body["successCount"] == 1
        assert body["failureCount"] == 1
        assert body["data"]["dashboards"][1]["errorMessage"] == "400"

        source, target = sync.call_args[0]
        assert source.base_url == "https://api.datadoghq.com/api/v1"
        assert target.base_url == "https://api.datadoghq.eu/api/v1"
        assert sync.call_args[1] == {"filter_title": "Prod"}

    def test_source_listing_failure_returns_502(self, make_event):
        with patch(
            "lambdas.post_sync_dashboards.sync_dashboards",
            side_effect=DatadogAPIError("Datadog API returned 403: Forbidden", status_code=403),
        ):
            response = sync_dashboards_handler(make_event("POST", body=SOURCE_TARGET), None)

        assert response["statusCode"] == 502
        assert json.loads(response["body"])["error_code"] == "SOURCE_UNAVAILABLE"

    def test_non_string_filter_title_returns_400(self, make_event):
        with patch("lambdas.post_sync_dashboards.sync_dashboards") as sync:
            response = sync_dashboards_handler(
                make_event("POST", body={**SOURCE_TARGET, "filterTitle": 42}), None
            )

        assert response["statusCode"] == 400
        assert json.loads(response["body"])["error_code"] == "INVALID_REQUEST"
        sync.assert_not_called()

    def test_missing_target_keys_returns_400(self, make_event):
        body = {k: v for k, v in SOURCE_TARGET.items() if not k.startswith("target")}

        response = sync_dashboards_handler(make_event("POST", body=body), None)

        assert response["statusCode"] == 400

    def test_single_payload_mode_posts_to_target(self, make_event, sample_dashboard):
        with patch("requests.Session.request", return_value=_ok_response({"id": "new", "title": "T"})) as request:
            response = sync_dashboards_handler(
                make_event("POST", body={**SINGLE_ACCOUNT, "dashboardData": sample_dashboard}), None
            )

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["successCount"] == 1
        assert body["data"]["dashboards"][0]["targetId"] == "new"

        method, url = request.call_args[0]
        assert (method, url) == ("POST", "https://api.us5.datadoghq.com/api/v1/dashboard")
        assert "author_handle" not in request.call_args[1]["json"]

    def test_stored_payloads_mode(self, aws, make_event, sample_dashboard):
        store = ArtifactStore("dashboard", s3=aws.s3, table=aws.dashboards, bucket=aws.bucket)
        created = store.upload(sample_dashboard, {"title": "T", "contributor": "dev@example.com"})

        with patch(
            "lambdas.post_sync_dashboards.replay_dashboards",
            return_value=_report("dashboards", "success"),
        ) as replay:
            response = sync_dashboards_handler(
                make_event("POST", body={**SINGLE_ACCOUNT, "s3Keys": [created["s3Key"]]}), None
            )

        assert response["statusCode"] == 200
        assert replay.call_args[0][0] == [sample_dashboard]

    def test_stored_payload_missing_returns_404(self, aws, make_event):
        response = sync_dashboards_handler(
            make_event("POST", body={**SINGLE_ACCOUNT, "s3Keys": ["dashboards/ghost.json"]}), None
        )

        assert response["statusCode"] == 404

    @pytest.mark.parametrize(
        "body",
        [
            SINGLE_ACCOUNT,
            {"apiKey": "a", "appKey": "b", "region": "US1", "s3Keys": []},
            {"appKey": "b", "region": "US1", "dashboardData": {"title": "t"}},
            {"apiKey": "a", "appKey": "b", "region": "MOON", "dashboardData": {"title": "t"}},
        ],
    )
    def test_bad_single_account_requests(self, make_event, body):
        assert sync_dashboards_handler(make_event("POST", body=body), None)["statusCode"] == 400

    def test_invalid_json(self, make_event):
        event = make_event("POST")
        event["body"] = "[1, 2]"

        assert sync_dashboards_handler(event, None)["statusCode"] == 400


class TestSyncMonitorsEndpoint:
    def test_source_target_mode_passes_filter_tag(self, make_event):
        with patch(
            "lambdas.post_sync_monitors.sync_monitors",
            return_value=_report("monitors", "success"),
        ) as sync:
            response = sync_monitors_handler(
                make_event("POST", body={**SOURCE_TARGET, "filterTag": "team:payments"}), None
            )

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["data"]["monitors"][0]["status"] == "success"
        assert sync.call_args[1] == {"filter_tag": "team:payments"}

    def test_non_string_filter_tag_returns_400(self, make_event):
        with patch("lambdas.post_sync_monitors.sync_monitors") as sync:
            response = sync_monitors_handler(
                make_event("POST", body={**SOURCE_TARGET, "filterTag": ["team:payments"]}), None
            )

        assert response["statusCode"] == 400
        sync.assert_not_called()

    def test_non_string_region_returns_400(self, make_event):
        response = sync_monitors_handler(
            make_event("POST", body={"apiKey": "api", "appKey": "app", "region": 1, "monitors": []}), None
        )

        assert response["statusCode"] == 400

    def test_single_monitor_is_cleaned_before_create(self, make_event, sample_monitor):
        with patch("requests.Session.request", return_value=_ok_response({"id": 7, "name": "m"})) as request:
            response = sync_monitors_handler(
                make_event("POST", body={**SINGLE_ACCOUNT, "monitorData": sample_monitor}), None
            )

        assert response["statusCode"] == 200
        sent = request.call_args[1]["json"]
        assert "variables" in sent["options"]
        assert "overall_state" not in sent
        assert "id" not in sent

    def test_target_rejection_is_a_failed_item_not_an_http_error(self, make_event, sample_monitor):
        rejected = MagicMock()
        rejected.ok = False
        rejected.status_code = 400
        rejected.text = ""
        rejected.json.return_value = {"errors": ["The value provided for parameter 'query' is invalid"]}

        with patch("requests.Session.request", return_value=rejected):
            response = sync_monitors_handler(
                make_event("POST", body={**SINGLE_ACCOUNT, "monitors": [sample_monitor]}), None
            )

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["failureCount"] == 1
        assert "query" in body["data"]["monitors"][0]["errorMessage"]

    def test_source_listing_failure_returns_502(self, make_event):
        with patch(
            "lambdas.post_sync_monitors.sync_monitors",
            side_effect=DatadogAPIError("Request to Datadog failed: timeout"),
        ):
            response = sync_monitors_handler(make_event("POST", body=SOURCE_TARGET), None)

        assert response["statusCode"] == 502

    def test_stored_key_of_wrong_kind_returns_400(self, aws, make_event):
        response = sync_monitors_handler(
            make_event("POST", body={**SINGLE_ACCOUNT, "s3Keys": ["dashboards/x.json"]}), None
        )

        assert response["statusCode"] == 400
