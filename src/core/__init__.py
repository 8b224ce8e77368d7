"""
Core logic for media delivery.

This module is framework-agnostic - it doesn't import FastAPI, httpx,
or any infrastructure concerns. This separation means we can test the
range and subtitle logic in isolation and swap frameworks if needed.
"""
