"""Core domain package for gridwatch.

Core contains classification, suppression, and deduplication logic without any
Supabase or storage-specific code, keeping the delivery rules portable.
"""
