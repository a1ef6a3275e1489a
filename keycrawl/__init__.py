"""keycrawl: same-site crawler and keyword report service."""
