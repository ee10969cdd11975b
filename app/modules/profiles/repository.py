from supabase import Client
from typing import Any, Dict, Optional

PROFILES_TABLE = "profiles"
ROLES_TABLE = "user_roles"


class ProfileRepository:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_by_user_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(PROFILES_TABLE)\
            .select("*")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def find_by_phone(self, phone_number: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(PROFILES_TABLE)\
            .select("user_id")\
            .eq("phone_number", phone_number)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def update(self, user_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(PROFILES_TABLE)\
            .update(update_data)\
            .eq("user_id", user_id)\
            .execute()
        return result.data[0] if result.data else None

    def attach_phone(self, user_id: str, phone_number: str) -> None:
        self.update(user_id, {"phone_number": phone_number})

    def get_role(self, user_id: str) -> Optional[str]:
        result = self.supabase.table(ROLES_TABLE)\
            .select("role")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0]["role"] if result.data else None
