# Supabase table: audit_log
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

audit_log:
- id: uuid (primary key, default: gen_random_uuid())
- admin_id: uuid (nullable, foreign key to users.id, on delete set null)
- action: text (not null) - approve_volunteer, reject_volunteer, promote_admin,
  demote_admin, delete_user
- target_user_id: uuid (nullable, foreign key to users.id, on delete set null)
- details: jsonb (nullable)
- created_at: timestamp (default: now())

Append-only. The only update ever issued nulls admin_id / target_user_id for
a user that is about to be deleted.
"""
