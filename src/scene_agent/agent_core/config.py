"""Runtime configuration for the agent core."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .logger import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "SCENE_AGENT_"


class AgentConfig(BaseModel):
    """
    Configuration parameters for the agent orchestration core.

    Attributes:
        max_auto_continues: Extra model turns allowed after the first one before the
                            controller stops and asks the user for input.
        recent_entity_capacity: Number of recently touched entities kept in the
                                conversation context.
        tool_timeout: Timeout in seconds for coroutine tool handlers.
        streaming: Whether the controller consumes the model as a chunk stream.
        args_summary_limit: Maximum length of a single argument value in progress summaries.
    """

    max_auto_continues: int = Field(default=2, ge=0)
    recent_entity_capacity: int = Field(default=10, ge=1)
    tool_timeout: float = Field(default=180.0, gt=0)
    streaming: bool = False
    args_summary_limit: int = Field(default=100, ge=10)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "AgentConfig":
        """Build a configuration from ``SCENE_AGENT_*`` environment variables.

        A ``.env`` file is loaded first (without overriding variables that are already set).

        Args:
            env_file: Optional explicit path to the ``.env`` file.

        Returns:
            The validated configuration.
        """
        load_dotenv(env_file)

        values = {}
        for field_name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
            if raw is not None:
                values[field_name] = raw

        if values:
            logger.debug(f"Loaded agent configuration overrides from environment: {sorted(values)}")
        return cls.model_validate(values)
