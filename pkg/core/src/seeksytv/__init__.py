"""
SeeksyTV playback core.

Headless ad-break sequencing for the Seeksy TV watch page: pre-roll and
post-roll resolution, single-surface source swapping, skip gating, ad
telemetry and failover to content.
"""

__version__ = "0.1.0"
