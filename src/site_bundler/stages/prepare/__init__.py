from .stage import stage_prepare

__all__ = ["stage_prepare"]
