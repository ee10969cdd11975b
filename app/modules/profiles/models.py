# Supabase tables: profiles, user_roles, storage bucket: avatars
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in repository.py and service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key)
- user_id: uuid (unique, references auth.users.id)
- full_name: text (nullable) - copied from user_metadata by the sign-up trigger
- age: integer (nullable)
- gender: text (nullable) - male | female | other
- phone_number: text (nullable) - set after OTP verification or by the user
- avatar_url: text (nullable) - public URL in the avatars bucket
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

user_roles:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id)
- role: text - patient | doctor, read-only for users

Storage bucket avatars (public):
- {user_id}/avatar.{ext}
"""
