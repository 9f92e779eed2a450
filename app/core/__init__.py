"""
Core components shared across the scheduling service: domain building
blocks, dependency container, application factory and lifecycle.
"""
