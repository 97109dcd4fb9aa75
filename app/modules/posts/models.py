# Supabase table: posts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

posts:
- id: uuid (primary key)
- title: text (not null)
- slug: text (unique, not null)
- summary: text (nullable)
- body_html: text (nullable)
- category_id: uuid (foreign key to blog_categories.id, nullable)
- tags: text[] (default: {})
- image_url: text (nullable)
- is_published: boolean (default: false)
- is_featured: boolean (default: false)
- publish_at: timestamptz (nullable) - first publication time, kept when unpublished
- created_by: uuid (foreign key to admin_users.id, nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
