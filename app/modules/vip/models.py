# Supabase tables: vip_tiers, vip_benefits, vip_tier_benefits
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

vip_tiers:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- qualification_requirement: text (nullable)
- minimum_spend_amount: numeric (default: 0)
- minimum_receipt_amount: numeric (nullable)
- tier_level: integer (unique, not null) - 1 is the entry tier
- card_color: text (default: "#6b7280")
- is_active: boolean (default: true)
- sort_order: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

vip_benefits:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- icon: text (nullable)
- is_active: boolean (default: true)
- sort_order: integer (default: 0)

vip_tier_benefits (junction table):
- id: uuid (primary key)
- tier_id: uuid (foreign key to vip_tiers.id)
- benefit_id: uuid (foreign key to vip_benefits.id)
- benefit_note: text (nullable)
- display_order: integer (default: 0)
"""
