"""Legality: role-routed case management portal over a Supabase backend."""
