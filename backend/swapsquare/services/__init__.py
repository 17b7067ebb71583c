"""Services Layer: async orchestration of core rules around store reads and writes.

Invariants:
    - Each mutating operation decides in core/ before its first write
    - All writers share the Repository mutation lock

Design Decisions:
    - One service per marketplace concern; Marketplace wires them together
"""
