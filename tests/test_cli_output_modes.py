import csv
import io
import json
import unittest
from unittest.mock import patch

from click.testing import CliRunner

import ssc_approver.cli as cli_mod
from ssc_approver.errors import DecodeError, TransportError

ENV = {"FORTIFY_SSC_URL": "https://ssc.example.com", "FORTIFY_SSC_TOKEN": "k"}

VERSIONS = {
    "data": [
        {"id": 1, "name": "v1", "project": {"id": 100, "name": "MyProject"}},
        {"id": 2, "name": "main", "project": {"id": 200, "name": "Other"}},
        {"id": 3, "name": "gone", "project": {"id": 300, "name": "Deleted"}},
    ],
    "count": 3,
    "totalCount": 3,
}

ARTIFACTS = {
    1: [
        {
            "id": 11,
            "fileName": "a.fpr",
            "fileSize": 1048576,
            "status": "REQUIRE_AUTH",
            "uploadDate": "2024-03-01T08:30:05.000+0000",
            "uploadIP": "10.0.0.5",
            "messages": [{"code": "C1", "message": "m1"}, {"message": "m2"}],
            "processingMessages": "p",
        },
        {"id": 12, "fileName": "b.fpr", "fileSize": 10, "status": "PROCESSED"},
    ],
    2: [{"id": 21, "fileName": "c.fpr", "fileSize": 0, "status": "Requires Approval", "messages": "hold"}],
}


class FakeClient:
    def __init__(self, config, **kwargs):
        self.config = config
        self.closed = False

    def get(self, path: str, **params):
        if path == "projects":
            return {"data": [{"id": 100, "name": "MyProject", "description": "d" * 60}], "count": 1, "totalCount": 1}
        if path == "projects/100/versions":
            return {"data": [{"id": 1, "name": "v1"}], "count": 1, "totalCount": 1}
        if path == "projectVersions":
            return VERSIONS
        if path.startswith("projectVersions/") and path.endswith("/artifacts"):
            version_id = int(path.split("/")[1])
            if version_id == 3:
                raise TransportError("HTTP_ERROR", "API request failed with status 404: not found", 404)
            rows = ARTIFACTS.get(version_id, [])
            return {"data": rows, "count": len(rows), "totalCount": len(rows)}
        if path == "artifacts/11":
            return {"data": ARTIFACTS[1][0]}
        raise TransportError("HTTP_ERROR", f"API request failed with status 404: {path}", 404)

    def close(self):
        self.closed = True


class EmptyClient(FakeClient):
    def get(self, path: str, **params):
        if path == "projectVersions":
            return {"data": [{"id": 1, "name": "v1"}], "count": 1, "totalCount": 1}
        return {"data": [], "count": 0, "totalCount": 0}


class UnauthorizedClient(FakeClient):
    def get(self, path: str, **params):
        raise TransportError("HTTP_ERROR", "API request failed with status 401: Unauthorized", 401)


class BadShapeClient(FakeClient):
    def get(self, path: str, **params):
        raise DecodeError("Unexpected projects payload: 1 validation error(s)")


class RecordingClient(FakeClient):
    last_config = None

    def __init__(self, config, **kwargs):
        super().__init__(config, **kwargs)
        RecordingClient.last_config = config


class CliOutputModeTests(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()

    def _invoke(self, args, client=FakeClient, env=ENV):
        with patch.object(cli_mod, "SSCClient", client):
            with self.runner.isolated_filesystem():
                return self.runner.invoke(cli_mod.main, args, env=env)

    def test_list_defaults_to_table(self):
        result = self._invoke(["list"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Found 2 artifacts requiring approval", result.output)
        self.assertIn("MyProject - v1", result.output)
        self.assertIn("Other - main", result.output)
        self.assertIn("2024-03-01 08:30:05", result.output)
        self.assertNotIn("b.fpr", result.output)
        self.assertIn("Tip: Use -d or --details", result.output)

    def test_list_details_table(self):
        result = self._invoke(["list", "--details"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Processing Messages", result.output)
        self.assertIn("[C1] m1", result.output)
        self.assertIn("hold", result.output)
        self.assertNotIn("Tip:", result.output)

    def test_list_json(self):
        result = self._invoke(["list", "-o", "json", "-d"])

        self.assertEqual(result.exit_code, 0, result.output)
        records = json.loads(result.output)
        self.assertEqual([r["project"] for r in records], ["MyProject - v1", "Other - main"])
        self.assertEqual(records[0]["file_size_bytes"], 1048576)
        self.assertEqual(records[0]["file_size_mb"], "1.00")
        self.assertEqual(records[0]["messages"], "p\n[C1] m1\nm2")
        self.assertEqual(records[1]["file_size_mb"], "0.00")

    def test_list_csv(self):
        result = self._invoke(["list", "--output", "csv"])

        self.assertEqual(result.exit_code, 0, result.output)
        rows = list(csv.reader(io.StringIO(result.output)))
        self.assertEqual(rows[0][0], "Project")
        self.assertEqual([r[0] for r in rows[1:]], ["MyProject - v1", "Other - main"])
        self.assertEqual(rows[2][-1], "hold")

    def test_list_project_filter_is_case_insensitive(self):
        result = self._invoke(["list", "-p", "proj", "-o", "json"])

        self.assertEqual(result.exit_code, 0, result.output)
        records = json.loads(result.output)
        self.assertEqual([r["project"] for r in records], ["MyProject - v1"])

    def test_list_filter_without_match(self):
        result = self._invoke(["list", "-p", "nomatch"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("No artifacts requiring approval found.", result.output)

    def test_list_nothing_pending(self):
        result = self._invoke(["list"], client=EmptyClient)

        self.assertEqual(result.exit_code, 0)
        self.assertIn("No artifacts requiring approval found.", result.output)

    def test_list_parallel_matches_sequential(self):
        sequential = self._invoke(["list", "-o", "json"])
        parallel = self._invoke(["list", "-o", "json", "--max-concurrency", "4"])

        self.assertEqual(parallel.exit_code, 0, parallel.output)
        self.assertEqual(json.loads(parallel.output), json.loads(sequential.output))

    def test_missing_token_is_config_error(self):
        result = self._invoke(["list"], env={"FORTIFY_SSC_URL": "https://ssc.example.com", "FORTIFY_SSC_TOKEN": ""})

        self.assertEqual(result.exit_code, 2)
        self.assertIn("Error loading configuration", result.output)
        self.assertIn("FORTIFY_SSC_TOKEN", result.output)

    def test_flags_override_env(self):
        result = self._invoke(
            ["--url", "https://flag.example.com/", "--token", "flag-key", "--timeout", "5", "--insecure", "projects"],
            client=RecordingClient,
        )

        self.assertEqual(result.exit_code, 0, result.output)
        cfg = RecordingClient.last_config
        self.assertEqual(cfg.base_url, "https://flag.example.com")
        self.assertEqual(cfg.token, "flag-key")
        self.assertEqual(cfg.timeout, 5.0)
        self.assertFalse(cfg.verify_tls)

    def test_version_listing_failure_exits_nonzero(self):
        result = self._invoke(["list"], client=UnauthorizedClient)

        self.assertEqual(result.exit_code, 10)
        self.assertIn("Error fetching artifacts", result.output)
        self.assertIn("401", result.output)

    def test_decode_error_exit_code(self):
        result = self._invoke(["projects"], client=BadShapeClient)

        self.assertEqual(result.exit_code, 17)
        self.assertIn("Error fetching projects", result.output)

    def test_projects_command(self):
        result = self._invoke(["projects"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Found 1 projects", result.output)
        self.assertIn("d" * 47 + "...", result.output)

    def test_versions_command(self):
        result = self._invoke(["versions", "100"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Found 1 versions", result.output)
        self.assertIn("v1", result.output)

    def test_artifacts_command_lists_every_status(self):
        result = self._invoke(["artifacts", "1"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Found 2 artifacts", result.output)
        self.assertIn("a.fpr", result.output)
        self.assertIn("b.fpr", result.output)
        self.assertIn("PROCESSED", result.output)

    def test_artifacts_command_failure(self):
        result = self._invoke(["artifacts", "3"])

        self.assertEqual(result.exit_code, 12)
        self.assertIn("Error fetching artifacts", result.output)

    def test_artifacts_command_rejects_non_integer(self):
        result = self._invoke(["artifacts", "abc"])

        self.assertEqual(result.exit_code, 2)

    def test_artifact_detail_command(self):
        result = self._invoke(["artifact", "11"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Artifact 11: a.fpr", result.output)
        self.assertIn("[C1] m1", result.output)

    def test_help_without_configuration(self):
        result = self._invoke(["list", "--help"], env={"FORTIFY_SSC_URL": "", "FORTIFY_SSC_TOKEN": ""})

        self.assertEqual(result.exit_code, 0)
        self.assertIn("--project", result.output)


if __name__ == "__main__":
    unittest.main()
