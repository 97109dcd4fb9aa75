# Supabase tables: admin_users, admin_user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Credentials live in Supabase Auth (auth.users); admin_users is matched by email

"""
Expected Supabase table structure:

admin_users:
- id: uuid (primary key)
- email: text (unique, not null) - stored lower-cased
- full_name: text (nullable)
- avatar_url: text (nullable)
- is_active: boolean (default: true) - inactive admins cannot sign in
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

admin_user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to admin_users.id, not null)
- role_id: uuid (foreign key to admin_roles.id, not null)
- assigned_by: uuid (foreign key to admin_users.id, nullable)
- assigned_at: timestamp (default: now())
- unique constraint on (user_id, role_id)
"""
