# Supabase Auth + admin tables
# Credentials live in Supabase Auth; authorization data lives in the admin_* tables.

"""
Supabase Auth provides:
- auth.sign_in_with_password() - Authenticate admins
- auth.get_user() - Resolve the current user from a JWT
- auth.sign_out() - Logout

The auth user is matched to its dashboard profile by email:

admin_users:
- id: uuid (primary key)
- email: text (not null, unique, stored lower-case)
- full_name: text
- avatar_url: text (nullable)
- is_active: boolean (default: true) - inactive admins cannot sign in
- created_at / updated_at: timestamp

admin_user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to admin_users.id)
- role_id: uuid (foreign key to admin_roles.id)
- assigned_by: uuid (nullable)
- assigned_at: timestamp (default: now())
"""
