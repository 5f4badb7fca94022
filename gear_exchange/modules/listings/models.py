# Supabase table: listings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

listings:
- id: uuid (primary key, default: gen_random_uuid())
- owner_id: uuid (foreign key to users.id, not null, on delete cascade)
- title: text (not null)
- description: text (nullable)
- category: text (not null) - one of roles_config.LISTING_CATEGORIES
- transaction_type: text (not null) - one of roles_config.TRANSACTION_TYPES
- size: text (nullable)
- merhav: text (not null) - one of roles_config.MERHAVIM
- image1: text (nullable) - storage reference, e.g. /images/uploaded/listing-....jpg
- image2: text (nullable)
- volunteer_only: boolean (not null, default: false)
- is_available: boolean (not null, default: true)
- views: integer (not null, default: 0)
- created_at: timestamp (default: now())

Optional stored function used for view counting:

create function increment_listing_views(listing_id uuid) returns void as $$
  update listings set views = views + 1 where id = listing_id;
$$ language sql;
"""
