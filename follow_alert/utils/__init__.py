"""유틸리티 모듈"""
from .config import ClientConfig, RelayConfig, ServiceConfig, load_env
from .logging_config import setup_logging

__all__ = ["ClientConfig", "RelayConfig", "ServiceConfig", "load_env", "setup_logging"]
