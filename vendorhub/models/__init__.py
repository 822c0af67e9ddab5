from vendorhub.models.base import Base  # noqa: F401

from vendorhub.models.form_schema_version import FormSchemaVersion  # noqa: F401
from vendorhub.models.vendor import Vendor  # noqa: F401
from vendorhub.models.edit_request import EditRequest  # noqa: F401
from vendorhub.models.audit_log import AuditLog  # noqa: F401
from vendorhub.models.agent import Agent  # noqa: F401
