"""
Shared Kernel

Base classes and utilities shared by the apartment and booking contexts:
entity/aggregate building blocks, the stay period value object, domain
errors, the unit of work and the message bus.
"""
