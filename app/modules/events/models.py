# Supabase table: events
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

events:
- id: uuid (primary key)
- title: text (not null)
- slug: text (unique, not null)
- summary: text (nullable)
- body: text (nullable) - rich text HTML
- start_at: timestamptz (not null)
- end_at: timestamptz (nullable) - open-ended events have no end
- venue: text (nullable)
- images: jsonb (default: []) - [{"url", "alt", "caption"}]; legacy rows hold plain URL strings
- tags: text[] (default: {})
- is_published: boolean (default: false)
- is_featured: boolean (default: false)
- metadata: jsonb (default: {})
- created_by: uuid (foreign key to admin_users.id, nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Derived status (not stored): draft | upcoming | ongoing | ended, see app.core.content_status.
"""
