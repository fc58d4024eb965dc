"""Application bootstrap wiring for startup validation and dependency assembly."""

from datetime import timedelta

from fastapi import FastAPI
from sqlalchemy import Engine

from rollout_manager.adapters import EcsOrchestrationClient, JobNotifierPort, LogJobNotifier, WebhookJobNotifier
from rollout_manager.api import create_api_application
from rollout_manager.config import AppSettings, config_build_registry_uri, config_load_settings
from rollout_manager.db import (
    SQLAlchemyComponentHashService,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyJobStateService,
    db_create_engine,
)
from rollout_manager.jobs import DeployJobConfig, DeployJobFactory
from rollout_manager.rollout import ClusterRolloutDriver
from rollout_manager.topology import EnvironmentConfig, TopologyResolver


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    engine = db_create_engine(database_url=settings.database_url)
    job_repository = SQLAlchemyJobStateService(engine=engine)
    return create_api_application(
        settings=settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        job_repository=job_repository,
        job_factory=bootstrap_create_job_factory(settings=settings, engine=engine),
    )


def bootstrap_create_job_factory(settings: AppSettings, engine: Engine) -> DeployJobFactory:
    """Build the deploy job factory with platform, persistence and notification collaborators.

    Args:
        settings: Validated application settings.
        engine: SQLAlchemy engine shared by the repositories.

    Returns:
        DeployJobFactory: Factory building and resuming deploy jobs.

    Raises:
        ValueError: Raised when settings produce invalid collaborator configuration.
    """

    orchestration_client = EcsOrchestrationClient(
        environment_name=settings.environment_name,
        registry_uri=config_build_registry_uri(settings),
        region_name=settings.aws_region,
        call_timeout_seconds=settings.orchestration_call_timeout_seconds,
        endpoint_url=settings.aws_endpoint,
    )
    return DeployJobFactory(
        topology_resolver=TopologyResolver(
            EnvironmentConfig(environment_name=settings.environment_name, cluster_prefix=settings.cluster_prefix)
        ),
        rollout_driver=ClusterRolloutDriver(orchestration_client=orchestration_client),
        job_repository=SQLAlchemyJobStateService(engine=engine),
        hash_repository=SQLAlchemyComponentHashService(engine=engine),
        notifier=bootstrap_create_notifier(settings),
        config=DeployJobConfig(max_job_duration=timedelta(seconds=settings.job_max_duration_seconds)),
    )


def bootstrap_create_notifier(settings: AppSettings) -> JobNotifierPort:
    """Return the webhook notifier when configured, else the logging notifier."""

    if settings.discord_webhook_url is not None:
        return WebhookJobNotifier(
            webhook_url=str(settings.discord_webhook_url),
            environment_name=settings.environment_name,
            timeout_seconds=settings.notification_timeout_seconds,
        )
    return LogJobNotifier()
