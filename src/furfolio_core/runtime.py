"""
Process setup from ``FurfolioConfig``.

``configure`` applies the package configuration once at start-up: the level
of the ``furfolio_core`` logger, the default audit log capacity, the remote
configuration source, the settings store and, on request, the global
session manager.

Example:
    >>> runtime = configure()
    >>> runtime.settings.loyalty_threshold
    5
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .audit import configure_audit_logs
from .database import DataStore, SessionManager, create_engine, initialize_session_manager
from .services.inventory import InventoryManager
from .services.notifications import NotificationService
from .services.settings import (
    InMemorySettingsStore,
    JSONFileSettingsStore,
    SettingsManager,
    SettingsStore,
)
from .utils.config import FurfolioConfig, RemoteConfig

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "furfolio_core"


@dataclass
class FurfolioRuntime:
    config: FurfolioConfig
    remote_config: RemoteConfig
    settings: SettingsManager
    session_manager: Optional[SessionManager] = None

    def inventory_manager(
        self,
        data_store: DataStore,
        notification_service: Optional[NotificationService] = None,
    ) -> InventoryManager:
        """Inventory manager sharing this runtime's remote configuration."""
        return InventoryManager(
            data_store,
            notification_service=notification_service,
            remote_config=self.remote_config,
        )


def configure(
    config: Optional[FurfolioConfig] = None, init_database: bool = False
) -> FurfolioRuntime:
    """
    Apply ``config`` to the process.

    Args:
        config: Configuration to apply, read from ``FURFOLIO_*`` variables
            when omitted
        init_database: Whether to create the engine for ``database_url`` and
            install the global session manager

    Returns:
        The configured runtime

    Raises:
        EnvironmentException: If the environment holds invalid values
        ConfigurationException: If the settings file is corrupt
    """
    config = config if config is not None else FurfolioConfig.from_environment()

    logging.getLogger(PACKAGE_LOGGER).setLevel(config.log_level.value)
    configure_audit_logs(config.audit_capacity)

    if config.remote_config_path:
        remote_config = RemoteConfig(config.remote_config_path)
    else:
        remote_config = RemoteConfig()

    store: SettingsStore
    if config.settings_path:
        store = JSONFileSettingsStore(config.settings_path)
    else:
        store = InMemorySettingsStore()
    settings = SettingsManager(store=store, remote_config=remote_config)

    session_manager = None
    if init_database:
        engine = create_engine(config.database_url, echo=config.echo_sql)
        session_manager = initialize_session_manager(engine)

    logger.info(
        f"Furfolio configured (log level {config.log_level.value}, "
        f"audit capacity {config.audit_capacity})"
    )
    return FurfolioRuntime(
        config=config,
        remote_config=remote_config,
        settings=settings,
        session_manager=session_manager,
    )
