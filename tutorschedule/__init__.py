"""
Session conflict detection and scheduling for a tutoring business.
"""
