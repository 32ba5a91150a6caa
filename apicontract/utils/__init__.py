"""Utility helpers for apicontract."""
