"""Session storage guard: scan usage, enforce a quota and clean up old sessions."""
