# Supabase table: promotions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

promotions:
- id: uuid (primary key)
- tenant_id: uuid (foreign key to tenants.id, not null)
- title: text (not null)
- full_description: text (nullable)
- image_url: text (nullable)
- source_post: text (nullable) - link to the tenant's original social post
- start_date: timestamptz (nullable)
- end_date: timestamptz (nullable)
- status: text (not null, default: "staging") - staging | published | expired
- published_at: timestamptz (nullable) - set on the first transition to published, never changed afterwards
- raw_json: jsonb (default: {}) - payload of the scraper that imported the promotion
- media_id: text (nullable)
- created_at: timestamp (default: now())

Published promotions whose end_date has passed are moved to "expired" by
PromotionService.auto_expire (endpoint and background loop).
"""
