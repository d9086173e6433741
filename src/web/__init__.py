"""
Web interface for the traffic light allocator.
"""
