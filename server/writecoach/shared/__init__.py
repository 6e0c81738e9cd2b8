"""
Shared components: providers, failover core, configuration and models.
"""
