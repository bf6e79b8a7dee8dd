"""Database plumbing for the relational review store."""
