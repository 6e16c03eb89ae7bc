"""Tests for the boto3-backed RDS instance source."""

from datetime import datetime, timezone

import boto3
import pytest
from botocore.stub import Stubber

from rds_exporter.aws.client import RETRY_CONFIG, build_retry_config
from rds_exporter.aws.rds import DBInstance, RdsInstanceSource
from rds_exporter.core.errors import InstanceSourceError

RESTORABLE_AT = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


def api_instance(identifier: str, **overrides) -> dict:
    record = {
        "DBInstanceIdentifier": identifier,
        "DBInstanceClass": "db.m5.large",
        "Engine": "postgres",
        "EngineVersion": "11.22",
        "DBInstanceStatus": "available",
        "AllocatedStorage": 100,
        "StorageEncrypted": True,
        "PubliclyAccessible": False,
        "LatestRestorableTime": RESTORABLE_AT,
        "DBParameterGroups": [
            {"DBParameterGroupName": "default.postgres11", "ParameterApplyStatus": "in-sync"},
            {"DBParameterGroupName": "custom", "ParameterApplyStatus": "pending-reboot"},
        ],
    }
    record.update(overrides)
    return record


@pytest.fixture
def rds_client():
    return boto3.client(
        "rds",
        region_name="eu-west-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        config=build_retry_config(max_attempts=1),
    )


# ---------------------------------------------------------------------------
# DBInstance
# ---------------------------------------------------------------------------


class TestDBInstance:
    def test_from_api(self):
        instance = DBInstance.from_api(api_instance("orders-db"))

        assert instance.identifier == "orders-db"
        assert instance.instance_class == "db.m5.large"
        assert instance.engine == "postgres"
        assert instance.engine_version == "11.22"
        assert instance.status == "available"
        assert instance.allocated_storage == 100
        assert instance.storage_encrypted is True
        assert instance.publicly_accessible is False
        assert instance.latest_restorable_time == RESTORABLE_AT
        assert instance.parameter_groups == ("default.postgres11", "custom")
        assert instance.parameter_group == "default.postgres11"

    def test_from_api_creating_instance(self):
        """Instances still being created have no restorable time or groups yet."""
        instance = DBInstance.from_api({
            "DBInstanceIdentifier": "new-db",
            "DBInstanceClass": "db.t2.small",
            "DBInstanceStatus": "creating",
        })

        assert instance.latest_restorable_time is None
        assert instance.parameter_groups == ()
        assert instance.parameter_group is None
        assert instance.allocated_storage == 0
        assert instance.publicly_accessible is False
        assert instance.storage_encrypted is False


# ---------------------------------------------------------------------------
# RdsInstanceSource
# ---------------------------------------------------------------------------


class TestRdsInstanceSource:
    def test_first_page_sends_no_marker(self, rds_client):
        source = RdsInstanceSource(rds_client)

        with Stubber(rds_client) as stubber:
            stubber.add_response(
                "describe_db_instances",
                {"DBInstances": [api_instance("db-1"), api_instance("db-2")], "Marker": "page-2"},
                {},
            )
            instances, marker = source.describe_db_instances(None)
            stubber.assert_no_pending_responses()

        assert [i.identifier for i in instances] == ["db-1", "db-2"]
        assert marker == "page-2"

    def test_marker_is_forwarded(self, rds_client):
        source = RdsInstanceSource(rds_client)

        with Stubber(rds_client) as stubber:
            stubber.add_response(
                "describe_db_instances",
                {"DBInstances": [api_instance("db-3")]},
                {"Marker": "page-2"},
            )
            instances, marker = source.describe_db_instances("page-2")

        assert [i.identifier for i in instances] == ["db-3"]
        assert marker is None

    def test_page_size_sets_max_records(self, rds_client):
        source = RdsInstanceSource(rds_client, page_size=50)

        with Stubber(rds_client) as stubber:
            stubber.add_response(
                "describe_db_instances",
                {"DBInstances": []},
                {"MaxRecords": 50},
            )
            instances, marker = source.describe_db_instances(None)

        assert instances == []
        assert marker is None

    def test_client_error_is_wrapped(self, rds_client):
        source = RdsInstanceSource(rds_client)

        with Stubber(rds_client) as stubber:
            stubber.add_client_error(
                "describe_db_instances",
                service_error_code="AccessDenied",
                service_message="not authorized",
                http_status_code=403,
            )
            with pytest.raises(InstanceSourceError, match="DescribeDBInstances failed") as exc_info:
                source.describe_db_instances("page-3")

        assert exc_info.value.details == {"marker": "page-3"}


# ---------------------------------------------------------------------------
# Retry configuration
# ---------------------------------------------------------------------------


class TestRetryConfig:
    def test_default_allows_three_calls_in_total(self):
        assert RETRY_CONFIG.retries.get("total_max_attempts") == 3
        assert RETRY_CONFIG.retries.get("mode") == "standard"

    @pytest.mark.parametrize("attempts", [1, 5])
    def test_max_attempts_counts_the_first_call(self, attempts):
        config = build_retry_config(attempts)

        assert config.retries.get("total_max_attempts") == attempts
        assert "max_attempts" not in config.retries
