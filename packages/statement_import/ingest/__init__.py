"""Statement text ingestion: provider adapters and shared parser plumbing."""
