from .main import run_quota_checker

run_quota_checker()
