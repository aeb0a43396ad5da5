"""errguard - normalize, classify, report and retry application errors."""

__app_name__ = "errguard"
__version__ = "0.1.0"
