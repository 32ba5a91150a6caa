"""CLI module for apicontract."""
