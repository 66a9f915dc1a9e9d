"""Orchestrator configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class OrchestratorConfig(BaseModel):
    """Runtime settings for establishing tunnels."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    connect_timeout: float = Field(
        default=10.0, ge=0.1, le=300.0, description="Per-profile connect timeout in seconds"
    )
    parallel: bool = Field(
        default=False, description="Establish profiles concurrently"
    )
    max_workers: int = Field(
        default=4, ge=1, le=64, description="Worker threads when parallel"
    )
