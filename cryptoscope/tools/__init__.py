"""Market and DeFi tool wrappers."""
