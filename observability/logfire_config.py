"""
Logfire configuration and initialization.

Logfire provides structured logging and tracing for the API and every
compose pipeline step.

Environment Variables:
    LOGFIRE_TOKEN: Logfire project token (optional; without it spans stay local)
    ENVIRONMENT: deployment environment (development, staging, production)
"""
import os
from typing import Optional

import logfire


SERVICE_NAME = "aicompose-api"


class LogfireConfig:
    """
    Logfire configuration singleton.

    Ensures Logfire is initialized only once and provides
    graceful degradation when no token is configured.
    """

    _initialized = False

    @classmethod
    def initialize(cls, token: Optional[str] = None, environment: Optional[str] = None) -> None:
        """
        Initialize Logfire.

        Args:
            token: Logfire project token (or set LOGFIRE_TOKEN env var)
            environment: Deployment environment (or set ENVIRONMENT env var)

        Note:
            Without a token nothing is exported, but spans and logs still
            work locally so the service runs unchanged.
        """
        if cls._initialized:
            return

        token = token or os.getenv("LOGFIRE_TOKEN") or None

        logfire.configure(
            token=token,
            service_name=SERVICE_NAME,
            environment=environment or os.getenv("ENVIRONMENT", "development"),
            send_to_logfire="if-token-present",
        )

        if not token:
            logfire.warning("LOGFIRE_TOKEN not set, telemetry will not be exported")

        cls._initialized = True

    @classmethod
    def is_initialized(cls) -> bool:
        """
        Check if Logfire has been initialized.

        Returns:
            True if initialized, False otherwise
        """
        return cls._initialized
