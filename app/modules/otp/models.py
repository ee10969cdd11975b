# Supabase table: otp_codes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in repository.py

"""
Expected Supabase table structure:

otp_codes:
- id: uuid (primary key, default: gen_random_uuid())
- phone_number: text (not null) - normalized destination, no whitespace
- otp_code: text (not null) - 6 digit numeric code
- expires_at: timestamptz (not null) - created_at + OTP_TTL_MINUTES
- verified: boolean (default: false)
- created_at: timestamptz (default: now())

RLS is enabled with no policies; only the service_role key can read or
write this table.

A destination holds at most one row at a time: issuing deletes every row for
the phone number before inserting. Rows are never updated, only deleted on
successful verification, on expiry detection, or on SMS dispatch failure.
"""
