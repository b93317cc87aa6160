"""Shared helpers for the kvspine test-suite."""
