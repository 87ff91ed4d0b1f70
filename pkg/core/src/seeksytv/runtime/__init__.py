"""
Playback runtime: ad resolution, the playback state machine, skip gating,
telemetry and failover.
"""
