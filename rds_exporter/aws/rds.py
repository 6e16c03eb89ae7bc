"""RDS instance listing."""

from dataclasses import dataclass
from datetime import datetime

from botocore.exceptions import BotoCoreError, ClientError

from rds_exporter.core.errors import InstanceSourceError


@dataclass(frozen=True)
class DBInstance:
    """Read-only view of one DescribeDBInstances record."""

    identifier: str
    instance_class: str
    allocated_storage: int
    storage_encrypted: bool
    publicly_accessible: bool
    status: str
    engine: str
    engine_version: str
    latest_restorable_time: datetime | None = None
    parameter_groups: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, db: dict) -> "DBInstance":
        """Build a DBInstance from a raw boto3 DBInstances entry.

        Args:
            db: One element of the ``DBInstances`` list

        Returns:
            DBInstance with defaults for optional fields
        """
        return cls(
            identifier=db["DBInstanceIdentifier"],
            instance_class=db.get("DBInstanceClass", ""),
            allocated_storage=int(db.get("AllocatedStorage", 0)),
            storage_encrypted=bool(db.get("StorageEncrypted", False)),
            publicly_accessible=bool(db.get("PubliclyAccessible", False)),
            status=db.get("DBInstanceStatus", ""),
            engine=db.get("Engine", ""),
            engine_version=db.get("EngineVersion", ""),
            latest_restorable_time=db.get("LatestRestorableTime"),
            parameter_groups=tuple(
                group["DBParameterGroupName"]
                for group in db.get("DBParameterGroups", [])
                if "DBParameterGroupName" in group
            ),
        )

    @property
    def parameter_group(self) -> str | None:
        """Name of the first parameter group, or None if there is none."""
        return self.parameter_groups[0] if self.parameter_groups else None


class RdsInstanceSource:
    """InstanceSource backed by the RDS DescribeDBInstances API.

    Usage:
        source = RdsInstanceSource(get_client("rds", "eu-west-1"))
        instances, marker = source.describe_db_instances(None)
    """

    def __init__(self, rds_client, page_size: int | None = None) -> None:
        self._client = rds_client
        self._page_size = page_size

    def describe_db_instances(self, marker: str | None) -> tuple[list[DBInstance], str | None]:
        """Fetch one page of DB instances.

        Args:
            marker: Continuation marker from the previous page, None for the first

        Returns:
            Tuple of (instances on this page, next marker or None)

        Raises:
            InstanceSourceError: If the API call fails
        """
        params = {}
        if marker is not None:
            params["Marker"] = marker
        if self._page_size is not None:
            params["MaxRecords"] = self._page_size

        try:
            response = self._client.describe_db_instances(**params)
        except (ClientError, BotoCoreError) as e:
            raise InstanceSourceError(
                f"DescribeDBInstances failed: {e}",
                details={"marker": marker},
            ) from e

        instances = [DBInstance.from_api(db) for db in response.get("DBInstances", [])]
        return instances, response.get("Marker")
