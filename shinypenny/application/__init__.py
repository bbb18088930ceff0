"""Orchestration workflows built on the domain, runtime and pdf layers."""
