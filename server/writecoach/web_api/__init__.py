"""
Web API - writing coach endpoints.
"""
