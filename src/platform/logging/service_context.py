"""
Service context for log lines.

Identifies which process emitted a record: service name, deploy environment
and pid, e.g. ``cinema-booking@local_dev:4242``.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'cinema-booking')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')
    return f'{service_name}@{deploy_env}:{os.getpid()}'
