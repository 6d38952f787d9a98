"""
Shared Kernel

Base classes, value objects and transaction plumbing used by the
booking and payment contexts.
"""
