"""Wiring of the protection engine, audit logger and deletion service."""

import logging
from dataclasses import dataclass

from safedelete.audit.logger import AuditLogger
from safedelete.core.config import SafeDeleteConfig
from safedelete.core.errors import RetryPolicy
from safedelete.deletion.service import SafeDeletionService
from safedelete.protection.engine import ProtectionEngine
from safedelete.protection.watcher import PollingChangeWatcher

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SafeDeleteRuntime:
    """Components built from one configuration.

    Attributes:
        config: Effective configuration.
        engine: Protection engine.
        audit: Audit logger.
        service: Deletion service.
    """

    config: SafeDeleteConfig
    engine: ProtectionEngine
    audit: AuditLogger
    service: SafeDeletionService

    def close(self) -> None:
        """Dispose the engine and close the audit logger."""
        self.engine.dispose()
        self.audit.close()


def build_runtime(config: SafeDeleteConfig, *, watch: bool = True) -> SafeDeleteRuntime:
    """Build all components from a configuration and record startup.

    Args:
        config: Validated configuration.
        watch: Start a polling change watcher for cache invalidation.

    Returns:
        SafeDeleteRuntime ready to serve requests.
    """
    engine = ProtectionEngine(
        config.allowed_directories,
        config.protected_patterns,
        watcher=PollingChangeWatcher() if watch else None,
    )
    audit = AuditLogger(
        config.effective_log_directory,
        level=config.log_level,
        max_file_size=config.max_log_file_size,
        max_files=config.max_log_files,
    )
    service = SafeDeletionService(
        engine,
        audit,
        max_batch_size=config.max_batch_size,
        retry=RetryPolicy(
            max_retries=config.retry_attempts,
            retry_delay=config.retry_delay_ms / 1000,
        ),
    )

    audit.log_server_start(config)
    logger.debug(
        "Runtime ready: %d allowed directories, %d protected patterns",
        len(config.allowed_directories),
        len(config.protected_patterns),
    )
    return SafeDeleteRuntime(config=config, engine=engine, audit=audit, service=service)
