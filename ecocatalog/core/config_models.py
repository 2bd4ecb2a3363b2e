"""
Configuration Models and Validation

Pydantic models validating the YAML configuration
"""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, validator


class CatalogScope(str, Enum):
    """Which collection the controller loads"""
    FACTORY = "factory"
    MARKETPLACE = "marketplace"


class AppConfig(BaseModel):
    """Application settings"""
    name: str = Field(default="ecocatalog", description="Application name")
    version: str = Field(default="1.0.0", description="Version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Log level")
    logs_dir: str = Field(default="logs", description="Log directory")

    @validator("log_level")
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got {v}")
        return v


class CatalogConfig(BaseModel):
    """Remote catalog service"""
    base_url: str = Field(default="http://localhost:5000/api", description="API base URL")
    timeout: float = Field(default=10.0, gt=0, le=300, description="Request timeout (seconds)")
    scope: CatalogScope = Field(default=CatalogScope.FACTORY, description="Collection to manage")
    cache_bust: bool = Field(default=True, description="Append a timestamp to list requests")


class DisplayConfig(BaseModel):
    """Rendering hints"""
    fallback_image: str = Field(default="/logo192.png", description="Image shown for listings without images")


class DraftDefaultsConfig(BaseModel):
    """Blank new-listing form"""
    category: str = Field(default="home_decor")
    recycled_material_percentage: float = Field(default=80, ge=0, le=100)
    is_active: bool = Field(default=True)


class ConfigModel(BaseModel):
    """Complete configuration"""
    app: AppConfig = Field(default_factory=AppConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    draft_defaults: DraftDefaultsConfig = Field(default_factory=DraftDefaultsConfig)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigModel":
        return cls(**data)
