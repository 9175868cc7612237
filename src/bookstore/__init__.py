"""Bookstore API: CRUD over a single book resource."""
