"""Shared money rules, error taxonomy and HTTP gateway for the back office."""
