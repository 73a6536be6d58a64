"""Personal job-application tracker backed by a Supabase table."""

__version__ = "1.0.0"
