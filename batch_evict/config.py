"""
Configuration settings for batch evictions.
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    APP_NAME: str = Field(default="batch-evict", description="Application name")

    # HTTP Configuration
    HTTP_PORT: int = Field(default=8002, description="Service port")

    # Kubernetes Configuration
    K8S_CONTEXT: Optional[str] = Field(default=None, description="Kubernetes context")
    K8S_KUBECONFIG: Optional[str] = Field(default=None, description="Path to kubeconfig file")
    K8S_IN_CLUSTER: bool = Field(default=False, description="Running in cluster")
    K8S_IMPERSONATE_USER: Optional[str] = Field(default=None, description="User to impersonate")

    # Eviction Configuration
    EVICT_NAMESPACE: str = Field(default="default", description="Namespace to evict pods from")
    EVICT_NAMESPACE_SELECTOR: str = Field(default="", description="Namespace label selector, overrides EVICT_NAMESPACE")
    EVICT_POD_SELECTOR: str = Field(default="", description="Pod label selector")
    EVICT_DRY_RUN: bool = Field(default=False, description="Validate evictions without applying them")
    EVICT_GRACE_PERIOD_SECONDS: Optional[int] = Field(default=None, ge=0, description="Pod termination grace period")
    EVICT_WORKERS: int = Field(default=1, ge=1, description="Parallel evictions per namespace")

    # Service Configuration
    LOG_LEVEL: str = Field(default="info", description="Log level: info|debug|warning")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()
