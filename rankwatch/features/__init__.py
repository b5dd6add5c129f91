"""Feature modules: ranks and summoner tracking."""
