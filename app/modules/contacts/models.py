# Supabase tables: contacts, contact_responses
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

contacts:
- id: uuid (primary key)
- full_name: text (not null)
- email: text (not null)
- phone_number: text (nullable)
- enquiry_type: text (not null) - "General", "Leasing", "Marketing", "Legal",
  "Lost & Found", "Parking & Security"
- enquiry_details: text (not null)
- submitted_date: timestamp (default: now())
- is_read: boolean (nullable; null is treated as unread)
- created_at: timestamp (default: now())

contact_responses:
- id: uuid (primary key)
- contact_id: uuid (foreign key to contacts.id)
- response_message: text (not null)
- responded_by: uuid (foreign key to admin_users.id)
- responded_at: timestamp (default: now())

Contacts are submitted by the public site; the dashboard only reads, marks
and deletes them.
"""
