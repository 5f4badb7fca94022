# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Credentials are stored in this table (bcrypt hash), not in Supabase Auth

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, default: gen_random_uuid())
- username: text (unique, not null)
- email: text (unique, not null)
- password_hash: text (not null) - never selected into API responses
- full_name: text (not null)
- phone: text (not null)
- merhav: text (not null) - one of roles_config.MERHAVIM
- role: text (not null, default: 'user') - check constraint:
    role in ('user', 'pending_volunteer', 'verified_volunteer', 'admin')
- volunteer_declaration: boolean (not null, default: false)
- approved_at: timestamp (nullable)
- approved_by: uuid (nullable, foreign key to users.id, on delete set null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Role changes only happen through the admin endpoints, as conditional updates
(... where id = :id and role = :expected_role).
"""
