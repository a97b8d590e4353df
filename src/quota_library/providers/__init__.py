from .antigravity_quota_client import AntigravityQuotaClient

__all__ = ["AntigravityQuotaClient"]
