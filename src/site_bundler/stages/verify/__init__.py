from .runner import VerifyReport, verify_build
from .stage import stage_verify

__all__ = ["stage_verify", "verify_build", "VerifyReport"]
