"""Incremental MySQL slow query log monitor."""
