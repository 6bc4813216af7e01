"""Tests for ResourceDeleter class.

Test coverage for AWS resource deletion with boto3 integration.
"""

from __future__ import annotations

from unittest.mock import Mock, call, patch

from botocore.exceptions import ClientError

from src.models.resource import Resource
from src.restore.deleter import ResourceDeleter
from tests.fixtures.resources import (
    create_bucket,
    create_db_instance,
    create_event_rule,
    create_event_source_mapping,
    create_function,
    create_queue,
    create_role,
    make_resource,
)


def _client_error(code: str, message: str = "error", operation: str = "Delete") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class TestResourceDeleter:
    """Test suite for ResourceDeleter class."""

    def test_init_creates_deleter_with_defaults(self) -> None:
        """Test initialization with default parameters."""
        deleter = ResourceDeleter()

        assert deleter.aws_profile is None
        assert deleter.max_retries == 3

    def test_init_with_custom_parameters(self) -> None:
        """Test initialization with custom parameters."""
        deleter = ResourceDeleter(aws_profile="prod", max_retries=5)

        assert deleter.aws_profile == "prod"
        assert deleter.max_retries == 5

    def test_supports(self) -> None:
        deleter = ResourceDeleter()

        assert deleter.supports(create_function("f"))
        assert not deleter.supports(make_resource("kinesis", "stream", "s"))

    @patch("src.restore.deleter.create_boto_client")
    def test_delete_lambda_function_success(self, mock_create_client: Mock) -> None:
        """Test successful Lambda function deletion."""
        mock_client = Mock()
        mock_create_client.return_value = mock_client

        result = ResourceDeleter().remove(create_function("ProcessOrders"))

        assert result.success is True
        assert result.error is None
        mock_create_client.assert_called_once_with(
            service_name="lambda",
            region_name="us-east-1",
            profile_name=None,
        )
        mock_client.delete_function.assert_called_once_with(FunctionName="ProcessOrders")

    @patch("src.restore.deleter.create_boto_client")
    def test_region_and_profile_overrides(self, mock_create_client: Mock) -> None:
        """Test that explicit region and profile override the resource and deleter defaults."""
        mock_create_client.return_value = Mock()

        ResourceDeleter(aws_profile="default").remove(
            create_function("f"), region="eu-west-1", profile="staging"
        )

        mock_create_client.assert_called_once_with(
            service_name="lambda",
            region_name="eu-west-1",
            profile_name="staging",
        )

    @patch("src.restore.deleter.create_boto_client")
    def test_global_resource_defaults_region(self, mock_create_client: Mock) -> None:
        """Test that resources without a region fall back to us-east-1."""
        mock_client = Mock()
        mock_client.get_paginator.return_value.paginate.return_value = []
        mock_create_client.return_value = mock_client

        ResourceDeleter(aws_profile="prod").remove(create_role("AppRole"))

        mock_create_client.assert_called_once_with(service_name="iam", region_name="us-east-1", profile_name="prod")

    @patch("src.restore.deleter.create_boto_client")
    def test_event_source_mapping_uses_uuid(self, mock_create_client: Mock) -> None:
        mock_client = Mock()
        mock_create_client.return_value = mock_client

        ResourceDeleter().remove(create_event_source_mapping("myFunc:abc-123"))

        mock_client.delete_event_source_mapping.assert_called_once_with(UUID="abc-123")

    @patch("src.restore.deleter.create_boto_client")
    def test_event_rule_removes_targets_first(self, mock_create_client: Mock) -> None:
        """Test that rule targets are removed before the rule itself."""
        mock_client = Mock()
        mock_client.list_targets_by_rule.return_value = {"Targets": [{"Id": "t1"}, {"Id": "t2"}]}
        mock_create_client.return_value = mock_client

        result = ResourceDeleter().remove(create_event_rule("custom-bus/NightlySchedule"))

        assert result.success is True
        mock_client.list_targets_by_rule.assert_called_once_with(Rule="NightlySchedule", EventBusName="custom-bus")
        mock_client.remove_targets.assert_called_once_with(
            Ids=["t1", "t2"], Rule="NightlySchedule", EventBusName="custom-bus"
        )
        mock_client.delete_rule.assert_called_once_with(Name="NightlySchedule", EventBusName="custom-bus")

    @patch("src.restore.deleter.create_boto_client")
    def test_event_rule_without_targets(self, mock_create_client: Mock) -> None:
        mock_client = Mock()
        mock_client.list_targets_by_rule.return_value = {"Targets": []}
        mock_create_client.return_value = mock_client

        ResourceDeleter().remove(create_event_rule("NightlySchedule"))

        mock_client.remove_targets.assert_not_called()
        mock_client.delete_rule.assert_called_once_with(Name="NightlySchedule")

    @patch("src.restore.deleter.create_boto_client")
    def test_iam_role_detaches_policies(self, mock_create_client: Mock) -> None:
        """Test IAM role preparation before deletion."""
        mock_client = Mock()
        paginators = {
            "list_attached_role_policies": [{"AttachedPolicies": [{"PolicyArn": "arn:aws:iam::aws:policy/P"}]}],
            "list_role_policies": [{"PolicyNames": ["inline"]}],
            "list_instance_profiles_for_role": [{"InstanceProfiles": [{"InstanceProfileName": "profile"}]}],
        }

        def get_paginator(name: str) -> Mock:
            paginator = Mock()
            paginator.paginate.return_value = paginators[name]
            return paginator

        mock_client.get_paginator.side_effect = get_paginator
        mock_create_client.return_value = mock_client

        result = ResourceDeleter().remove(create_role("AppRole"))

        assert result.success is True
        mock_client.detach_role_policy.assert_called_once_with(
            RoleName="AppRole", PolicyArn="arn:aws:iam::aws:policy/P"
        )
        mock_client.delete_role_policy.assert_called_once_with(RoleName="AppRole", PolicyName="inline")
        mock_client.remove_role_from_instance_profile.assert_called_once_with(
            InstanceProfileName="profile", RoleName="AppRole"
        )
        mock_client.delete_role.assert_called_once_with(RoleName="AppRole")

    @patch("src.restore.deleter.create_boto_client")
    def test_s3_bucket_emptied_first(self, mock_create_client: Mock) -> None:
        mock_client = Mock()
        mock_client.get_paginator.return_value.paginate.return_value = [
            {
                "Versions": [{"Key": "a.txt", "VersionId": "v1"}],
                "DeleteMarkers": [{"Key": "b.txt", "VersionId": "v2"}],
            },
            {},
        ]
        mock_create_client.return_value = mock_client

        result = ResourceDeleter().remove(create_bucket("assets"))

        assert result.success is True
        mock_client.delete_objects.assert_called_once_with(
            Bucket="assets",
            Delete={
                "Objects": [{"Key": "a.txt", "VersionId": "v1"}, {"Key": "b.txt", "VersionId": "v2"}],
                "Quiet": True,
            },
        )
        mock_client.delete_bucket.assert_called_once_with(Bucket="assets")

    @patch("src.restore.deleter.create_boto_client")
    def test_sqs_queue_resolves_url(self, mock_create_client: Mock) -> None:
        mock_client = Mock()
        mock_client.get_queue_url.return_value = {"QueueUrl": "https://sqs.us-east-1.amazonaws.com/1/jobs"}
        mock_create_client.return_value = mock_client

        ResourceDeleter().remove(create_queue("jobs"))

        mock_client.get_queue_url.assert_called_once_with(QueueName="jobs")
        mock_client.delete_queue.assert_called_once_with(QueueUrl="https://sqs.us-east-1.amazonaws.com/1/jobs")

    @patch("src.restore.deleter.create_boto_client")
    def test_rds_instance_skips_final_snapshot(self, mock_create_client: Mock) -> None:
        mock_client = Mock()
        mock_create_client.return_value = mock_client

        ResourceDeleter().remove(create_db_instance("orders-db-1"))

        mock_client.delete_db_instance.assert_called_once_with(
            DBInstanceIdentifier="orders-db-1",
            SkipFinalSnapshot=True,
            DeleteAutomatedBackups=True,
        )

    @patch("src.restore.deleter.create_boto_client")
    def test_cloudwatch_alarm_uses_list_parameter(self, mock_create_client: Mock) -> None:
        mock_client = Mock()
        mock_create_client.return_value = mock_client

        ResourceDeleter().remove(make_resource("cloudwatch", "alarm", "high-errors"))

        mock_client.delete_alarms.assert_called_once_with(AlarmNames=["high-errors"])

    @patch("src.restore.deleter.create_boto_client")
    def test_nat_gateway_from_discovered_arn(self, mock_create_client: Mock) -> None:
        """Test that a NAT gateway built from its AWS ARN is removable."""
        mock_client = Mock()
        mock_create_client.return_value = mock_client
        resource = Resource.from_arn("arn:aws:ec2:us-east-1:123456789012:natgateway/nat-0abc")

        deleter = ResourceDeleter()
        result = deleter.remove(resource)

        assert deleter.supports(resource) is True
        assert result.success is True
        mock_client.delete_nat_gateway.assert_called_once_with(NatGatewayId="nat-0abc")

    @patch("src.restore.deleter.create_boto_client")
    def test_not_found_counts_as_success(self, mock_create_client: Mock) -> None:
        """Test that an already-deleted resource is treated as removed."""
        mock_client = Mock()
        mock_client.delete_function.side_effect = _client_error("ResourceNotFoundException")
        mock_create_client.return_value = mock_client

        result = ResourceDeleter().remove(create_function("gone"))

        assert result.success is True

    @patch("src.restore.deleter.create_boto_client")
    def test_non_retryable_error_fails_immediately(self, mock_create_client: Mock) -> None:
        mock_client = Mock()
        mock_client.delete_function.side_effect = _client_error("AccessDeniedException", "not authorized")
        mock_create_client.return_value = mock_client

        result = ResourceDeleter().remove(create_function("f"))

        assert result.success is False
        assert result.error == "AccessDeniedException: not authorized"
        assert mock_client.delete_function.call_count == 1

    @patch("src.restore.deleter.time.sleep")
    @patch("src.restore.deleter.create_boto_client")
    def test_retryable_error_retries_with_backoff(self, mock_create_client: Mock, mock_sleep: Mock) -> None:
        """Test retry with exponential backoff, then success."""
        mock_client = Mock()
        mock_client.delete_table.side_effect = [_client_error("ResourceInUseException"), {}]
        mock_create_client.return_value = mock_client

        result = ResourceDeleter().remove(make_resource("dynamodb", "table", "orders"))

        assert result.success is True
        assert mock_client.delete_table.call_count == 2
        mock_sleep.assert_called_once_with(1)

    @patch("src.restore.deleter.time.sleep")
    @patch("src.restore.deleter.create_boto_client")
    def test_retries_exhausted(self, mock_create_client: Mock, mock_sleep: Mock) -> None:
        mock_client = Mock()
        mock_client.delete_subnet.side_effect = _client_error("DependencyViolation", "subnet has dependencies")
        mock_create_client.return_value = mock_client

        result = ResourceDeleter(max_retries=3).remove(make_resource("ec2", "subnet", "subnet-1"))

        assert result.success is False
        assert result.error == (
            "Failed to delete ec2/subnet subnet-1 after 3 attempts: DependencyViolation: subnet has dependencies"
        )
        assert mock_client.delete_subnet.call_count == 3
        assert mock_sleep.call_args_list == [call(1), call(2)]

    @patch("src.restore.deleter.time.sleep")
    @patch("src.restore.deleter.create_boto_client")
    def test_unexpected_exception_fails_after_retries(self, mock_create_client: Mock, mock_sleep: Mock) -> None:
        mock_create_client.side_effect = RuntimeError("no credentials")

        result = ResourceDeleter(max_retries=2).remove(create_function("f"))

        assert result.success is False
        assert "no credentials" in (result.error or "")
        assert mock_create_client.call_count == 2

    @patch("src.restore.deleter.create_boto_client")
    def test_unsupported_type_fails(self, mock_create_client: Mock) -> None:
        result = ResourceDeleter().remove(make_resource("kinesis", "stream", "s"))

        assert result.success is False
        assert result.error == "Unsupported resource type: kinesis/stream"
        mock_create_client.assert_not_called()

    @patch("src.restore.deleter.create_boto_client")
    def test_dry_run_makes_no_calls(self, mock_create_client: Mock) -> None:
        deleter = ResourceDeleter()

        assert deleter.remove(create_function("f"), dry_run=True).success is True
        assert deleter.remove(make_resource("kinesis", "stream", "s"), dry_run=True).success is True
        mock_create_client.assert_not_called()
