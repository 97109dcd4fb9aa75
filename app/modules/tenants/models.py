# Supabase table: tenants
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tenants:
- id: uuid (primary key)
- tenant_code: text (unique, not null) - upper-case short code, e.g. "STARBUCKS"
- name: text (not null)
- category_id: uuid (foreign key to tenant_categories.id, nullable)
- description: text (nullable)
- main_floor: text (nullable) - e.g. "GF", "LG", "UG"
- operating_hours: jsonb (nullable) - {"monday": {"open": "10:00", "close": "22:00"}, ...}
- phone: text (nullable)
- logo_url: text (nullable)
- banner_url: text (nullable)
- is_active: boolean (default: true)
- is_featured: boolean (default: false)
- is_new_tenant: boolean (default: false)
- metadata: jsonb (default: {})
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

promotions.tenant_id references tenants.id; tenants with promotions cannot be deleted.
"""
