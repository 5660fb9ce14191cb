from ._latest_value import LatestValue

__all__ = ["LatestValue"]
