"""Database models — re-exports all models.

Import from here:  from outreach.models import Lead, CadenceStep, ...
Or from submodules: from outreach.models.leads import Lead
"""

from .base import Base  # noqa: F401

# Leads & pipeline
from .leads import Lead, PipelineHistory  # noqa: F401

# Cadences & activity log
from .outreach import Activity, CadenceStep  # noqa: F401
