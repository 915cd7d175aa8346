"""Core application configuration and utilities."""

from app.core.audit import AuditAction, AuditEvent, log_audit, log_review_decision
from app.core.config import FeatureFlags, get_feature_flags, settings
from app.core.database import Base, get_db, get_sync_db

__all__ = [
    # Config
    "settings",
    "FeatureFlags",
    "get_feature_flags",
    # Database
    "Base",
    "get_db",
    "get_sync_db",
    # Audit
    "AuditAction",
    "AuditEvent",
    "log_audit",
    "log_review_decision",
]
