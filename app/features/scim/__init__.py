"""SCIM 2.0 user provisioning for organization-scoped API keys."""

from app.features.scim.routes import router

__all__ = ["router"]
