from datetime import datetime
from supabase import Client
from typing import Any, Dict, Optional

OTP_TABLE = "otp_codes"


class ChallengeRepository:
    """Access to the otp_codes table. Store errors propagate to the caller."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def latest_for_destination(self, destination: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(OTP_TABLE)\
            .select("id, created_at")\
            .eq("phone_number", destination)\
            .order("created_at", desc=True)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def replace(self, destination: str, code: str, created_at: datetime, expires_at: datetime) -> Optional[Dict[str, Any]]:
        """Delete any challenge for the destination, then insert the new one."""
        self.delete_for_destination(destination)
        result = self.supabase.table(OTP_TABLE).insert({
            "phone_number": destination,
            "otp_code": code,
            "created_at": created_at.isoformat(),
            "expires_at": expires_at.isoformat(),
        }).execute()
        return result.data[0] if result.data else None

    def find(self, destination: str, code: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(OTP_TABLE)\
            .select("*")\
            .eq("phone_number", destination)\
            .eq("otp_code", code)\
            .eq("verified", False)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def consume(self, challenge_id: str) -> bool:
        """Delete the challenge by id; False when another request already removed it."""
        result = self.supabase.table(OTP_TABLE)\
            .delete()\
            .eq("id", challenge_id)\
            .execute()
        return bool(result.data)

    def delete_for_destination(self, destination: str) -> None:
        self.supabase.table(OTP_TABLE)\
            .delete()\
            .eq("phone_number", destination)\
            .execute()
