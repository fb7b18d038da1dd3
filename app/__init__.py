"""Festival push-notification dispatch service."""
