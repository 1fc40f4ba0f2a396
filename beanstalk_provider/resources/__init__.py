"""
Resource adapters for the Beanstalk provider.

One adapter per declared resource type; integrations share a single
descriptor-driven adapter.
"""

from beanstalk_provider.resources.base import (
    ResourceAdapter,
    changed_fields,
    replacement_fields,
)
from beanstalk_provider.resources.code_review import CodeReviewSettingsAdapter
from beanstalk_provider.resources.integration import (
    HIPCHAT,
    INTEGRATION_TYPES,
    JIRA,
    MODULAR_WEBHOOK,
    IntegrationType,
)
from beanstalk_provider.resources.repository import RepositoryAdapter
from beanstalk_provider.resources.team import TeamAdapter
from beanstalk_provider.resources.user import UserAdapter

__all__ = [
    "ResourceAdapter",
    "changed_fields",
    "replacement_fields",
    "CodeReviewSettingsAdapter",
    "IntegrationType",
    "HIPCHAT",
    "JIRA",
    "MODULAR_WEBHOOK",
    "INTEGRATION_TYPES",
    "RepositoryAdapter",
    "TeamAdapter",
    "UserAdapter",
]
