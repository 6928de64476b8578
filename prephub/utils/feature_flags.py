"""
Feature Flags System
Environment-based feature control for the course service
"""

import os
from typing import Dict, List
from dataclasses import dataclass
from enum import Enum

from prephub.errors import NotFoundError


class Environment(Enum):
    DEVELOPMENT = "development"
    QA = "qa"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class FeatureFlag:
    name: str
    enabled: bool
    description: str
    environments: List[Environment]


class FeatureFlagService:
    """Service for managing feature flags"""

    def __init__(self):
        self.current_environment = self._get_current_environment()
        self.flags = self._initialize_flags()

    def _get_current_environment(self) -> Environment:
        """Get current environment from environment variable"""
        env_name = os.getenv('ENVIRONMENT', 'development').lower()
        try:
            return Environment(env_name)
        except ValueError:
            return Environment.DEVELOPMENT

    def _initialize_flags(self) -> Dict[str, FeatureFlag]:
        """Initialize feature flags with their configurations"""
        flags = {
            'ai_generation': FeatureFlag(
                name='ai_generation',
                enabled=True,
                description='Enable LLM-backed outline and chapter generation',
                environments=list(Environment),
            ),
        }
        self._apply_environment_overrides(flags)
        return flags

    def _apply_environment_overrides(self, flags: Dict[str, FeatureFlag]) -> None:
        """Apply environment-specific feature flag overrides"""
        for flag in flags.values():
            flag.enabled = self.current_environment in flag.environments

            # FEATURE_<NAME>=true|false wins over the environment default
            env_override = os.getenv(f"FEATURE_{flag.name.upper()}")
            if env_override is not None:
                flag.enabled = env_override.lower() in ('true', '1', 'yes', 'on')

    def is_enabled(self, flag_name: str) -> bool:
        """Check if a feature flag is enabled"""
        flag = self.flags.get(flag_name)
        if flag is None:
            return False
        return flag.enabled


# Global feature flag service instance
feature_flags = FeatureFlagService()


def is_feature_enabled(flag_name: str) -> bool:
    """Check if a feature is enabled"""
    return feature_flags.is_enabled(flag_name)


def require_feature(flag_name: str):
    """Build a FastAPI dependency that 404s while ``flag_name`` is off"""
    async def dependency() -> bool:
        if not is_feature_enabled(flag_name):
            raise NotFoundError(f"Feature '{flag_name}' is not available")
        return True
    return dependency
