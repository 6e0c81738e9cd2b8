"""
WriteCoach - AI writing coach backend with multi-provider failover.
"""

__version__ = "1.0.0"
