"""Supabase repository for the system log."""

from dataclasses import dataclass

from supabase import Client

from kitchen_ledger.services.audit import AuditRepository


@dataclass
class SupabaseAuditRepository(AuditRepository):
    """Supabase-backed audit repository writing to system_logs."""

    client: Client

    def append(self, log_type: str, action: str, details: str, outcome: str) -> None:
        """Create a system log row."""
        self.client.table("system_logs").insert(
            {
                "type": log_type,
                "action": action,
                "details": details,
                "status": outcome,
            }
        ).execute()
