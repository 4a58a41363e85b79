"""
Unit tests for ci_common.models.

Tests parsing of raw backing-store documents into records and jobs, and the
serialization of canonical builds.
"""

import pytest

from ci_common.errors import MalformedPayloadError, UnsupportedProviderError
from ci_common.models import (
    Build,
    BuildStatus,
    Job,
    JobStatus,
    Provider,
    RawIngestionRecord,
    parse_timestamp,
)


class TestParseTimestamp:
    """Test suite for parse_timestamp function."""

    def test_numbers_are_epoch_seconds(self):
        assert parse_timestamp(1700000000) == 1700000000.0
        assert parse_timestamp(12.5) == 12.5

    def test_none_stays_none(self):
        assert parse_timestamp(None) is None

    def test_iso_string_with_z_suffix(self):
        assert parse_timestamp("1970-01-01T00:01:00Z") == 60.0

    def test_naive_iso_string_is_utc(self):
        assert parse_timestamp("1970-01-01T00:00:10") == 10.0

    def test_garbage_string_is_malformed(self):
        with pytest.raises(MalformedPayloadError):
            parse_timestamp("yesterday", record_id=3)

    def test_boolean_is_malformed(self):
        with pytest.raises(MalformedPayloadError):
            parse_timestamp(True)


class TestJob:
    """Test suite for Job class."""

    def test_from_dict(self):
        job = Job.from_dict({"status": "running", "start_time": 5, "end_time": None})

        assert job.status == JobStatus.RUNNING
        assert job.start_time == 5.0
        assert job.end_time is None

    def test_unknown_status_is_malformed(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            Job.from_dict({"status": "idle"}, record_id=7)

        assert exc_info.value.record_id == 7

    def test_jobs_are_immutable(self):
        job = Job(status=JobStatus.QUEUED)

        with pytest.raises(AttributeError):
            job.status = JobStatus.RUNNING


class TestRawIngestionRecord:
    """Test suite for RawIngestionRecord.from_dict."""

    def test_parses_full_record(self, record_factory):
        doc = record_factory(
            record_id=12, pr=4, branch="main", repository={"full_name": "a/b"}
        )

        record = RawIngestionRecord.from_dict(doc)

        assert record.id == 12
        assert record.provider == Provider.GITHUB
        assert record.pr == 4
        assert record.branch == "main"
        assert record.repository == {"full_name": "a/b"}
        assert len(record.jobs) == 1
        assert record.payload == doc["data"]

    def test_provider_falls_back_to_repository(self, record_factory):
        doc = record_factory(provider=None)
        del doc["provider"]
        doc["repository"] = {"repository_provider": "bitbucket"}

        record = RawIngestionRecord.from_dict(doc)

        assert record.provider == Provider.BITBUCKET

    def test_payload_key_is_accepted(self, record_factory):
        doc = record_factory()
        doc["payload"] = doc.pop("data")

        record = RawIngestionRecord.from_dict(doc)

        assert record.payload == doc["payload"]

    def test_unknown_provider(self, record_factory):
        with pytest.raises(UnsupportedProviderError) as exc_info:
            RawIngestionRecord.from_dict(record_factory(record_id=9, provider="svn"))

        assert exc_info.value.provider == "svn"
        assert exc_info.value.record_id == 9

    def test_missing_provider(self, record_factory):
        doc = record_factory()
        del doc["provider"]

        with pytest.raises(UnsupportedProviderError):
            RawIngestionRecord.from_dict(doc)

    def test_gitlab_and_gogs_are_known_tags(self, record_factory):
        assert RawIngestionRecord.from_dict(record_factory(provider="gitlab")).provider == Provider.GITLAB
        assert RawIngestionRecord.from_dict(record_factory(provider="gogs")).provider == Provider.GOGS

    def test_missing_jobs_array(self, record_factory):
        doc = record_factory()
        del doc["jobs"]

        with pytest.raises(MalformedPayloadError, match="jobs"):
            RawIngestionRecord.from_dict(doc)

    def test_jobs_must_be_objects(self, record_factory):
        with pytest.raises(MalformedPayloadError):
            RawIngestionRecord.from_dict(record_factory(jobs=["success"]))

    def test_missing_payload(self, record_factory):
        doc = record_factory()
        del doc["data"]

        with pytest.raises(MalformedPayloadError, match="payload"):
            RawIngestionRecord.from_dict(doc)

    def test_missing_id(self, record_factory):
        doc = record_factory()
        del doc["id"]

        with pytest.raises(MalformedPayloadError):
            RawIngestionRecord.from_dict(doc)

    def test_not_an_object(self):
        with pytest.raises(MalformedPayloadError):
            RawIngestionRecord.from_dict(["not", "a", "record"])

    def test_pr_number_string_is_converted(self, record_factory):
        record = RawIngestionRecord.from_dict(record_factory(pr="42"))

        assert record.pr == 42

    @pytest.mark.parametrize("value", [None, "", 0])
    def test_empty_pr_number(self, record_factory, value):
        assert RawIngestionRecord.from_dict(record_factory(pr=value)).pr is None

    @pytest.mark.parametrize("value", ["abc", True, 4.5, {"number": 4}])
    def test_invalid_pr_number(self, record_factory, value):
        with pytest.raises(MalformedPayloadError, match="pull request number") as exc_info:
            RawIngestionRecord.from_dict(record_factory(record_id=3, pr=value))

        assert exc_info.value.record_id == 3

    def test_invalid_branch(self, record_factory):
        with pytest.raises(MalformedPayloadError, match="branch"):
            RawIngestionRecord.from_dict(record_factory(branch=["main"]))


class TestBuild:
    """Test suite for Build class."""

    def test_to_dict(self):
        build = Build(
            id=3,
            repository_name="octo/repo",
            status=BuildStatus.PASSED,
            provider=Provider.GITHUB,
            commit_sha="abc",
            build_duration_seconds=10.0,
        )

        result = build.to_dict()

        assert result["id"] == 3
        assert result["status"] == "passed"
        assert result["provider"] == "github"
        assert result["commit_sha"] == "abc"
        assert result["build_duration_seconds"] == 10.0
        assert result["display_name"] is None
