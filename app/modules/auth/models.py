# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - Email confirmation and password reset emails
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (standard email/password path)
- auth.admin.create_user() - Create a pre-confirmed user after phone OTP verification
- auth.sign_in_with_password() - Authenticate users
- auth.reset_password_for_email() - Send the password reset link
- auth.admin.update_user_by_id() - Set a new password for the token's user
- auth.get_user() - Get current user from JWT token

user_metadata carries full_name, role, age, gender and phone_number. A
database trigger on auth.users copies it into the profiles and user_roles
tables (see app/modules/profiles/models.py).
"""
