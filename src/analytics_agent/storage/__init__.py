"""
Persistent storage for audit records
"""

from .audit_store import AuditStore

__all__ = ['AuditStore']
