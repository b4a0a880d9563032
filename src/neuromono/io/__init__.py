"""Report exporters."""

from .exporters import save_batch_csv, save_csv, save_json

__all__ = ["save_json", "save_csv", "save_batch_csv"]
