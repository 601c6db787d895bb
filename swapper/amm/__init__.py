"""AMM integrations."""
