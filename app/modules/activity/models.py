# Supabase table: admin_activity_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

admin_activity_logs:
- id: uuid (primary key)
- user_id: uuid (foreign key to admin_users.id, nullable)
- action: text (not null) - e.g., "create", "update", "delete", "publish", "login"
- module: text (not null) - e.g., "events", "promotions", "users"
- resource_type: text (nullable) - e.g., "event", "promotion", "admin_role"
- resource_id: text (nullable)
- resource_name: text (nullable)
- old_values: jsonb (nullable)
- new_values: jsonb (nullable)
- metadata: jsonb (default: {})
- created_at: timestamp (default: now())

Analytics also reads (select only): events, tenants, posts, promotions,
whats_on, contacts, vip_tiers.
"""
