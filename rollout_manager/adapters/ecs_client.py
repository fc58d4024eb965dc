"""Amazon ECS orchestration client used by the rollout driver."""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Final

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from .interfaces import OrchestrationClientPort
from .orchestration_errors import (
    OrchestrationConnectionError,
    OrchestrationFailure,
    OrchestrationFailureError,
    OrchestrationRequestError,
    OrchestrationTimeoutError,
)

logger = logging.getLogger(__name__)


class EcsOrchestrationClient(OrchestrationClientPort):
    """ECS implementation of the orchestration client contract.

    Task definitions are append-only: every update registers a new revision
    cloned from the current one with only the container image replaced.
    """

    SERVICE_NAME: Final[str] = "rollout-manager"
    RESOURCE_TAG_KEY: Final[str] = "Ceramic"
    _SERVICE_DESIRED_COUNT: Final[int] = 1
    _DESCRIBE_TASKS_BATCH_SIZE: Final[int] = 100
    _REGISTRABLE_TASK_DEFINITION_FIELDS: Final[tuple[str, ...]] = (
        "family",
        "taskRoleArn",
        "executionRoleArn",
        "networkMode",
        "volumes",
        "placementConstraints",
        "requiresCompatibilities",
        "cpu",
        "memory",
        "pidMode",
        "ipcMode",
        "proxyConfiguration",
        "inferenceAccelerators",
        "ephemeralStorage",
        "runtimePlatform",
    )
    _REQUEST_ERROR_CODES: Final[frozenset[str]] = frozenset(
        {
            "ClientException",
            "InvalidParameterException",
            "ClusterNotFoundException",
            "ServiceNotFoundException",
            "ServiceNotActiveException",
            "ParameterNotFound",
            "AccessDeniedException",
        }
    )

    def __init__(
        self,
        environment_name: str,
        registry_uri: str,
        region_name: str,
        call_timeout_seconds: float = 5.0,
        endpoint_url: str | None = None,
        ecs_client: Any | None = None,
        ssm_client: Any | None = None,
    ):
        """Initialize ECS orchestration client.

        Args:
            environment_name: Environment label used for resource tags.
            registry_uri: Image registry prefix prepended to `repository:tag`.
            region_name: AWS region of the clusters.
            call_timeout_seconds: Connect and read deadline applied to each AWS request.
                One orchestration operation issues several requests (describe, register,
                update, list and one stop per stale task), so its total duration is
                bounded per request rather than as a whole. Retries are disabled so a
                request never runs past one deadline.
            endpoint_url: Optional custom AWS endpoint.
            ecs_client: Optional preconfigured ECS client.
            ssm_client: Optional preconfigured SSM client.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_environment_name = environment_name.strip()
        if not normalized_environment_name:
            raise ValueError("environment_name must not be blank")
        if not region_name.strip():
            raise ValueError("region_name must not be blank")
        if call_timeout_seconds <= 0:
            raise ValueError("call_timeout_seconds must be > 0")

        client_config = Config(
            region_name=region_name.strip(),
            connect_timeout=call_timeout_seconds,
            read_timeout=call_timeout_seconds,
            retries={"max_attempts": 1, "mode": "standard"},
        )
        if endpoint_url:
            logger.info("ecs client: using custom aws endpoint: %s", endpoint_url)
        self._environment_name = normalized_environment_name
        self._registry_uri = registry_uri
        self._ecs_client = ecs_client or boto3.client("ecs", config=client_config, endpoint_url=endpoint_url)
        self._ssm_client = ssm_client or boto3.client("ssm", config=client_config, endpoint_url=endpoint_url)

    def orchestration_update_service(self, cluster: str, service: str, image: str, transient: bool) -> str:
        """Register a new revision for the service and switch the service to it.

        Running instances of older revisions are stopped afterwards unless the
        unit is transient.

        Args:
            cluster: Cluster name.
            service: Service name; also the task family name.
            image: Image reference in `repository:tag` form.
            transient: Whether old instances must be left running.

        Returns:
            str: New task definition ARN.

        Raises:
            OrchestrationClientError: Raised when any ECS call fails.
        """

        service_description = self._ecs_describe_service(cluster=cluster, service=service)
        new_revision_arn = self._ecs_register_revision(
            task_definition_arn=str(service_description["taskDefinition"]),
            image=image,
        )
        self._ecs_call(
            "update_service",
            service=service,
            cluster=cluster,
            desiredCount=self._SERVICE_DESIRED_COUNT,
            enableExecuteCommand=True,
            forceNewDeployment=False,
            taskDefinition=new_revision_arn,
        )
        if not transient:
            self._ecs_stop_tasks(cluster=cluster, family=service, keep_revision_arn=new_revision_arn)
        return new_revision_arn

    def orchestration_update_task(self, cluster: str, family: str, image: str, transient: bool) -> str:
        """Stop running family instances and register a new revision of the latest definition.

        Args:
            cluster: Cluster name.
            family: Task definition family.
            image: Image reference in `repository:tag` form.
            transient: Whether running instances must be left running.

        Returns:
            str: New task definition ARN.

        Raises:
            OrchestrationClientError: Raised when any ECS call fails.
        """

        output = self._ecs_call(
            "list_task_definitions",
            familyPrefix=family,
            maxResults=1,
            sort="DESC",
        )
        task_definition_arns = output.get("taskDefinitionArns") or []
        if not task_definition_arns:
            raise OrchestrationRequestError(
                f"no task definition found for family={family}",
                operation="list_task_definitions",
            )
        if not transient:
            self._ecs_stop_tasks(cluster=cluster, family=family, keep_revision_arn=None)
        return self._ecs_register_revision(task_definition_arn=str(task_definition_arns[0]), image=image)

    def orchestration_check_service(self, cluster: str, service: str, revision_id: str) -> bool:
        """Return whether a deployment of the revision has at least one running task.

        Args:
            cluster: Cluster name.
            service: Service name.
            revision_id: Expected task definition ARN.

        Returns:
            bool: Convergence flag.

        Raises:
            OrchestrationClientError: Raised when any ECS call fails.
        """

        if not revision_id:
            return False
        service_description = self._ecs_describe_service(cluster=cluster, service=service)
        for deployment in service_description.get("deployments") or []:
            if deployment.get("taskDefinition") == revision_id and int(deployment.get("runningCount") or 0) > 0:
                return True
        return False

    def orchestration_check_task(self, cluster: str, family: str, task_id: str, running: bool) -> bool:
        """Return whether tasks matching the identifier are in the requested state.

        A task matches when either its task ARN or its task definition ARN
        equals the identifier.

        Args:
            cluster: Cluster name.
            family: Task definition family.
            task_id: Task ARN or task definition ARN.
            running: True to require `RUNNING`, False to require `STOPPED`.

        Returns:
            bool: True when at least one task matches and all matches are in the requested state.

        Raises:
            OrchestrationClientError: Raised when any ECS call fails.
        """

        if not task_id:
            return False
        check_status = "RUNNING" if running else "STOPPED"
        task_arns = self._ecs_list_task_arns(cluster=cluster, family=family, desired_status=check_status)
        matching_tasks = [
            task
            for task in self._ecs_describe_tasks(cluster=cluster, task_arns=task_arns)
            if task_id in (task.get("taskArn"), task.get("taskDefinitionArn"))
        ]
        if not matching_tasks:
            return False
        return all(task.get("lastStatus") == check_status for task in matching_tasks)

    def orchestration_launch_task(
        self,
        cluster: str,
        family: str,
        container: str,
        vpc_config_parameter: str,
        overrides: dict[str, str] | None = None,
    ) -> str:
        """Launch one Fargate task with network configuration read from SSM.

        Args:
            cluster: Cluster name.
            family: Task definition family or revision.
            container: Container receiving environment overrides.
            vpc_config_parameter: SSM parameter holding the awsvpc configuration JSON.
            overrides: Optional container environment overrides.

        Returns:
            str: Launched task ARN.

        Raises:
            OrchestrationClientError: Raised when any AWS call fails or the parameter is malformed.
        """

        output = self._ecs_call(
            "get_parameter",
            client=self._ssm_client,
            Name=vpc_config_parameter,
            WithDecryption=False,
        )
        try:
            vpc_config = json.loads(output["Parameter"]["Value"])
        except (KeyError, TypeError, json.JSONDecodeError) as error:
            logger.error(
                "launch task: invalid vpc config: cluster=%s family=%s parameter=%s",
                cluster,
                family,
                vpc_config_parameter,
            )
            raise OrchestrationRequestError(
                f"invalid vpc configuration in parameter={vpc_config_parameter}",
                operation="get_parameter",
            ) from error
        network_configuration = {"awsvpcConfiguration": _ecs_normalize_vpc_config(vpc_config)}
        return self._ecs_run_task(
            cluster=cluster,
            family=family,
            container=container,
            network_configuration=network_configuration,
            overrides=overrides,
        )

    def orchestration_launch_service_task(
        self,
        cluster: str,
        service: str,
        family: str,
        container: str,
        overrides: dict[str, str] | None = None,
    ) -> str:
        """Launch one Fargate task reusing a service's network configuration.

        Args:
            cluster: Cluster name.
            service: Service whose network configuration is reused.
            family: Task definition family or revision.
            container: Container receiving environment overrides.
            overrides: Optional container environment overrides.

        Returns:
            str: Launched task ARN.

        Raises:
            OrchestrationClientError: Raised when any ECS call fails.
        """

        service_description = self._ecs_describe_service(cluster=cluster, service=service)
        return self._ecs_run_task(
            cluster=cluster,
            family=family,
            container=container,
            network_configuration=service_description.get("networkConfiguration"),
            overrides=overrides,
        )

    def _ecs_describe_service(self, cluster: str, service: str) -> dict[str, Any]:
        output = self._ecs_call("describe_services", services=[service], cluster=cluster)
        self._ecs_raise_for_failures(output, operation="describe_services", target=f"{cluster}/{service}")
        services = output.get("services") or []
        if not services:
            raise OrchestrationRequestError(f"service not found: {cluster}/{service}", operation="describe_services")
        return services[0]

    def _ecs_register_revision(self, task_definition_arn: str, image: str) -> str:
        """Register a copy of the task definition with the first container image replaced.

        Args:
            task_definition_arn: Source revision ARN.
            image: Image reference in `repository:tag` form.

        Returns:
            str: New revision ARN.

        Raises:
            OrchestrationClientError: Raised when any ECS call fails.
        """

        output = self._ecs_call("describe_task_definition", taskDefinition=task_definition_arn)
        task_definition = output["taskDefinition"]
        register_input: dict[str, Any] = {
            field_name: task_definition[field_name]
            for field_name in self._REGISTRABLE_TASK_DEFINITION_FIELDS
            if task_definition.get(field_name) is not None
        }
        container_definitions = copy.deepcopy(task_definition["containerDefinitions"])
        container_definitions[0]["image"] = self._registry_uri + image
        register_input["containerDefinitions"] = container_definitions
        register_input["tags"] = [{"key": self.RESOURCE_TAG_KEY, "value": self._environment_name}]

        register_output = self._ecs_call("register_task_definition", **register_input)
        return str(register_output["taskDefinition"]["taskDefinitionArn"])

    def _ecs_stop_tasks(self, cluster: str, family: str, keep_revision_arn: str | None) -> None:
        """Stop running tasks of a family, optionally sparing one revision.

        Args:
            cluster: Cluster name.
            family: Task definition family.
            keep_revision_arn: Revision whose tasks must keep running.

        Returns:
            None: Tasks are stopped as a side effect.

        Raises:
            OrchestrationClientError: Raised when any ECS call fails.
        """

        task_arns = self._ecs_list_task_arns(cluster=cluster, family=family, desired_status="RUNNING")
        if keep_revision_arn is not None:
            task_arns = [
                str(task["taskArn"])
                for task in self._ecs_describe_tasks(cluster=cluster, task_arns=task_arns)
                if task.get("taskDefinitionArn") != keep_revision_arn
            ]
        for task_arn in task_arns:
            self._ecs_call("stop_task", task=task_arn, cluster=cluster)

    def _ecs_list_task_arns(self, cluster: str, family: str, desired_status: str) -> list[str]:
        task_arns: list[str] = []
        request: dict[str, Any] = {"cluster": cluster, "family": family, "desiredStatus": desired_status}
        while True:
            output = self._ecs_call("list_tasks", **request)
            task_arns.extend(str(task_arn) for task_arn in output.get("taskArns") or [])
            next_token = output.get("nextToken")
            if not next_token:
                return task_arns
            request["nextToken"] = next_token

    def _ecs_describe_tasks(self, cluster: str, task_arns: list[str]) -> list[dict[str, Any]]:
        tasks: list[dict[str, Any]] = []
        for batch_start in range(0, len(task_arns), self._DESCRIBE_TASKS_BATCH_SIZE):
            batch = task_arns[batch_start : batch_start + self._DESCRIBE_TASKS_BATCH_SIZE]
            output = self._ecs_call("describe_tasks", cluster=cluster, tasks=batch)
            tasks.extend(output.get("tasks") or [])
        return tasks

    def _ecs_run_task(
        self,
        cluster: str,
        family: str,
        container: str,
        network_configuration: dict[str, Any] | None,
        overrides: dict[str, str] | None,
    ) -> str:
        run_input: dict[str, Any] = {
            "taskDefinition": family,
            "cluster": cluster,
            "count": 1,
            "enableExecuteCommand": True,
            "launchType": "FARGATE",
            "startedBy": self.SERVICE_NAME,
            "tags": [{"key": self.RESOURCE_TAG_KEY, "value": self._environment_name}],
        }
        if network_configuration:
            run_input["networkConfiguration"] = network_configuration
        if overrides:
            run_input["overrides"] = {
                "containerOverrides": [
                    {
                        "name": container,
                        "environment": [{"name": name, "value": value} for name, value in overrides.items()],
                    }
                ]
            }
        output = self._ecs_call("run_task", **run_input)
        self._ecs_raise_for_failures(output, operation="run_task", target=f"{cluster}/{family}")
        tasks = output.get("tasks") or []
        if not tasks:
            raise OrchestrationFailureError(f"no task started: {cluster}/{family}", operation="run_task")
        return str(tasks[0]["taskArn"])

    def _ecs_raise_for_failures(self, output: dict[str, Any], operation: str, target: str) -> None:
        failures = tuple(
            OrchestrationFailure(
                arn=str(failure.get("arn") or ""),
                detail=str(failure.get("detail") or ""),
                reason=str(failure.get("reason") or ""),
            )
            for failure in output.get("failures") or []
        )
        if not failures:
            return
        logger.error("%s: failure: target=%s failures=%s", operation, target, failures)
        summary = "; ".join(f"{failure.arn} {failure.reason} {failure.detail}".strip() for failure in failures)
        raise OrchestrationFailureError(f"{operation} failed for {target}: {summary}", operation=operation, failures=failures)

    def _ecs_call(self, operation: str, client: Any | None = None, **request: Any) -> dict[str, Any]:
        """Execute one AWS API call and map transport errors to project exceptions.

        Args:
            operation: boto3 client method name.
            client: Target client, defaults to the ECS client.
            **request: API request parameters.

        Returns:
            dict[str, Any]: API response.

        Raises:
            OrchestrationTimeoutError: Raised when the call deadline expires.
            OrchestrationConnectionError: Raised for transport and server-side failures.
            OrchestrationRequestError: Raised when the request is rejected.
        """

        target_client = client or self._ecs_client
        try:
            return getattr(target_client, operation)(**request)
        except (ConnectTimeoutError, ReadTimeoutError) as error:
            logger.error("%s: deadline exceeded: %s", operation, error)
            raise OrchestrationTimeoutError(f"{operation} timed out", operation=operation) from error
        except EndpointConnectionError as error:
            logger.error("%s: connection error: %s", operation, error)
            raise OrchestrationConnectionError(f"{operation} connection failed", operation=operation) from error
        except ClientError as error:
            error_code = str(error.response.get("Error", {}).get("Code", ""))
            logger.error("%s: client error: code=%s error=%s", operation, error_code, error)
            if error_code in self._REQUEST_ERROR_CODES:
                raise OrchestrationRequestError(f"{operation} rejected: {error}", operation=operation) from error
            raise OrchestrationConnectionError(f"{operation} failed: {error}", operation=operation) from error
        except BotoCoreError as error:
            logger.error("%s: transport error: %s", operation, error)
            raise OrchestrationConnectionError(f"{operation} failed: {error}", operation=operation) from error


def _ecs_normalize_vpc_config(vpc_config: dict[str, Any]) -> dict[str, Any]:
    """Accept both `Subnets` and `subnets` style keys for stored awsvpc configuration."""

    if not isinstance(vpc_config, dict):
        raise OrchestrationRequestError("vpc configuration must be a JSON object", operation="get_parameter")
    return {key[:1].lower() + key[1:]: value for key, value in vpc_config.items()}
