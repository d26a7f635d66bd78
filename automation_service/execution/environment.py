"""
Environment provisioning for suite runs.

The default provisioner only reports setup and teardown to the monitoring
service. Deployments that need seeded data subclass it and override
``setup``/``teardown``.
"""

import logging
from typing import Any, Dict, Optional

from ..notifications.gateway import NotificationGateway


EnvironmentContext = Dict[str, Any]


class EnvironmentProvisioner:
    """Prepares and cleans up the target environment around a run."""

    def __init__(
        self,
        gateway: Optional[NotificationGateway] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.gateway = gateway or NotificationGateway()
        self.logger = logger or logging.getLogger(__name__)

    async def setup(self, env_name: str) -> EnvironmentContext:
        """
        Prepare an environment for a run.

        Args:
            env_name: Environment name such as ``dev`` or ``staging``

        Returns:
            Opaque context handed back to ``teardown``
        """
        self.logger.info(f"Environment setup start: {env_name}")
        await self.gateway.send_log("INFO", "Environment setup start", {"env": env_name})
        return {"seeded": True, "env": env_name}

    async def teardown(self, context: EnvironmentContext) -> None:
        """Release whatever ``setup`` prepared."""
        self.logger.info(f"Environment teardown: {context.get('env')}")
        await self.gateway.send_log("INFO", "Environment teardown", {"context": context})
